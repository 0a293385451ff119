from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.core.errors import InvalidTokenError, PermissionDeniedError
from blog_service.core.logging import get_request_logger
from blog_service.crud.comment import CommentStore
from blog_service.crud.post import PostStore
from blog_service.crud.user import CredentialStore
from blog_service.db.session import get_db
from blog_service.models.user import User
from blog_service.services.auth import AuthService

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request, db: AsyncSession = Depends(get_db)) -> AuthService:
    """リクエスト毎にAuthServiceを組み立てる依存関数"""
    return AuthService(
        store=CredentialStore(db),
        hasher=request.app.state.password_hasher,
        token_issuer=request.app.state.token_issuer,
        logger=get_request_logger(request),
    )


def get_post_store(db: AsyncSession = Depends(get_db)) -> PostStore:
    return PostStore(db)


def get_comment_store(db: AsyncSession = Depends(get_db)) -> CommentStore:
    return CommentStore(db)


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
        auth_service: AuthService = Depends(get_auth_service),
        ) -> User:
    """
    アクセストークンからユーザーを取得する依存関数

    Raises:
        InvalidTokenError: トークンが無い・無効・期限切れ、またはユーザーが存在しない場合
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidTokenError()

    payload = auth_service.verify_token(credentials.credentials)

    user = await auth_service.store.get_by_id(payload.id)
    if user is None:
        raise InvalidTokenError()

    return user


def ensure_owner_or_admin(current_user: User, owner_username: str) -> None:
    """リソースの所有者または管理者であることを確認する"""
    if current_user.is_admin or current_user.username == owner_username:
        return
    raise PermissionDeniedError()
