from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from blog_service.db.base import Base


class User(Base):
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    is_admin: Mapped[bool] = mapped_column(default=False, nullable=False)
