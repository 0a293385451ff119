from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from blog_service.db.base import Base


class Post(Base):
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
