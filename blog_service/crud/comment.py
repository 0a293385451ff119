from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.core.errors import StorageUnavailableError
from blog_service.core.logging import get_logger
from blog_service.models.comment import Comment
from blog_service.schemas.comment import CommentCreate

logger = get_logger(__name__)


class CommentStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, obj_in: CommentCreate, username: str) -> Comment:
        db_obj = Comment(post_id=obj_in.post_id, username=username, text=obj_in.text)
        self.db.add(db_obj)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"コメント作成中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e
        await self.db.refresh(db_obj)
        return db_obj

    async def get_by_post(self, post_id: UUID) -> Sequence[Comment]:
        try:
            result = await self.db.execute(
                select(Comment)
                .filter(Comment.post_id == post_id)
                .order_by(Comment.created_at.asc())
            )
        except SQLAlchemyError as e:
            logger.error(f"コメント取得中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e
        return result.scalars().all()
