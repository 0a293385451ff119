from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.core.errors import DuplicateKeyError, StorageUnavailableError
from blog_service.core.logging import get_logger
from blog_service.models.user import User

logger = get_logger(__name__)


class CredentialStore:
    """
    ユーザーの認証情報を永続化するストア

    ユーザー名・メールアドレスの重複はDBの一意制約でのみ検出する。
    事前の存在チェックは行わない（同時登録の競合はDB側で解決される）。
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(
        self,
        username: str,
        email: str,
        hashed_password: str,
        is_admin: bool = False,
    ) -> User:
        db_obj = User(
            username=username,
            email=email,
            hashed_password=hashed_password,
            is_admin=is_admin,
        )
        self.db.add(db_obj)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateKeyError() from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"ユーザー作成中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e

        await self.db.refresh(db_obj)
        return db_obj

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self._get_one(select(User).filter(User.username == username))

    async def get_by_id(self, id: UUID) -> Optional[User]:
        return await self._get_one(select(User).filter(User.id == id))

    async def _get_one(self, stmt) -> Optional[User]:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"ユーザー取得中にDBエラーが発生しました: {e}", exc_info=True)
            raise StorageUnavailableError() from e
        return result.scalar_one_or_none()
