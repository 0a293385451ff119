from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.core.errors import NotFoundError, StorageUnavailableError
from blog_service.core.logging import get_logger
from blog_service.models.comment import Comment
from blog_service.models.post import Post
from blog_service.schemas.post import PostCreate, PostUpdate

logger = get_logger(__name__)


class PostStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, obj_in: PostCreate, author: str) -> Post:
        db_obj = Post(title=obj_in.title, content=obj_in.content, author=author)
        self.db.add(db_obj)
        await self._commit("投稿作成")
        await self.db.refresh(db_obj)
        return db_obj

    async def get_all(self) -> Sequence[Post]:
        try:
            result = await self.db.execute(select(Post).order_by(Post.created_at.desc()))
        except SQLAlchemyError as e:
            logger.error(f"投稿一覧取得中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e
        return result.scalars().all()

    async def get(self, id: UUID) -> Post:
        try:
            result = await self.db.execute(select(Post).filter(Post.id == id))
        except SQLAlchemyError as e:
            logger.error(f"投稿取得中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError("投稿が見つかりません")
        return post

    async def update(self, db_obj: Post, obj_in: PostUpdate) -> Post:
        # 指定されたフィールドのみ反映する
        for field, value in obj_in.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(db_obj, field, value)
        await self._commit("投稿更新")
        await self.db.refresh(db_obj)
        return db_obj

    async def delete(self, db_obj: Post) -> None:
        # 外部キー制約が無効なDBでもコメントが残らないよう先に削除する
        try:
            await self.db.execute(delete(Comment).where(Comment.post_id == db_obj.id))
            await self.db.delete(db_obj)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"投稿削除中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e
        await self._commit("投稿削除")

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{action}中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e
