from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from blog_service.schemas.base import CamelModel


class PostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


# 部分更新用（指定されたフィールドのみ更新する）
class PostUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)


class PostResponse(CamelModel):
    id: UUID
    title: str
    content: str
    author: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
