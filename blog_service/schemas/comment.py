from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from blog_service.schemas.base import CamelModel


class CommentCreate(CamelModel):
    post_id: UUID
    text: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(CamelModel):
    id: UUID
    post_id: UUID
    username: str
    text: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
