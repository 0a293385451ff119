from typing import Any

from fastapi import APIRouter, Depends, Request, status

from blog_service.api.deps import get_auth_service, get_current_user
from blog_service.core.logging import get_request_logger
from blog_service.models.user import User
from blog_service.schemas.user import (
    LoginRequest,
    LoginResponse,
    TokenVerifyRequest,
    TokenVerifyResponse,
    UserCreate,
    UserResponse,
)
from blog_service.services.auth import AuthService

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    request: Request,
    user_in: UserCreate,
    auth_service: AuthService = Depends(get_auth_service),
    ) -> Any:
    """
    一般ユーザーを登録するエンドポイント
    - 認証不要
    - 常にis_admin=Falseで登録される
    - パスワードハッシュはレスポンスに含めない
    """
    logger = get_request_logger(request)
    logger.info(f"ユーザー登録リクエスト: {user_in.username}")

    return await auth_service.register(user_in)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    ) -> Any:
    """
    ユーザーログインとトークン発行のエンドポイント
    """
    logger = get_request_logger(request)
    logger.info(f"ログインリクエスト: ユーザー名={credentials.username}")

    return await auth_service.login(credentials)


@router.post("/verify", response_model=TokenVerifyResponse)
async def verify_token_endpoint(
    token_data: TokenVerifyRequest,
    auth_service: AuthService = Depends(get_auth_service),
    ) -> Any:
    """
    トークンを検証し、含まれるクレームを返すエンドポイント
    """
    payload = auth_service.verify_token(token_data.token)
    return TokenVerifyResponse(valid=True, id=payload.id, is_admin=payload.is_admin, exp=payload.exp)


@router.get("/me", response_model=UserResponse)
async def get_user_me(current_user: User = Depends(get_current_user)) -> Any:
    """
    自分自身のユーザー情報を取得するエンドポイント
    """
    return current_user
