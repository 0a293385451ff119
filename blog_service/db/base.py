from datetime import datetime
from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import as_declarative, declared_attr, Mapped, mapped_column
from sqlalchemy.sql import func
import uuid


@as_declarative()
class Base:
    __name__: str

    # 共通フィールド
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # テーブル名を自動的にクラス名から生成（複数形）
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower() + "s"
