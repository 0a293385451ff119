import asyncio
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from blog_service.core.errors import (
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationFailureError,
)
from blog_service.core.logging import LoggerLike, get_logger
from blog_service.core.security import PasswordHasher, TokenIssuer
from blog_service.crud.user import CredentialStore
from blog_service.models.user import User
from blog_service.schemas.user import (
    LoginRequest,
    LoginResponse,
    LoginUser,
    TokenPayload,
    UserCreate,
    UserResponse,
)


class AuthService:
    """
    ユーザー登録とログインを担当するサービス

    ストア・ハッシュ化・トークン発行はすべてコンストラクタで受け取る。
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        token_issuer: TokenIssuer,
        logger: Optional[LoggerLike] = None,
    ):
        self.store = store
        self.hasher = hasher
        self.token_issuer = token_issuer
        self.logger = logger or get_logger(__name__)

    async def register(self, user_in: Union[UserCreate, Mapping[str, Any]]) -> UserResponse:
        """
        ユーザーを登録し、パスワードハッシュを除いたユーザー情報を返す

        Raises:
            ValidationFailureError: 入力値が不正な場合
            DuplicateKeyError: ユーザー名またはメールアドレスが既に存在する場合
            StorageUnavailableError: DBエラーの場合
        """
        user_in = _validate(UserCreate, user_in)

        # bcrypt はCPUを占有するためスレッドで実行する
        hashed_password = await asyncio.to_thread(self.hasher.hash, user_in.password)

        # 重複チェックはDBの一意制約に任せる
        new_user = await self.store.create_user(
            username=user_in.username,
            email=user_in.email,
            hashed_password=hashed_password,
        )
        self.logger.info(f"ユーザー登録成功: ID={new_user.id}, ユーザー名={new_user.username}")
        return UserResponse.model_validate(new_user)

    async def login(self, credentials: Union[LoginRequest, Mapping[str, Any]]) -> LoginResponse:
        """
        認証に成功した場合はユーザー情報と署名済みトークンを返す

        ユーザーが存在しない場合とパスワードが一致しない場合は
        同じ InvalidCredentialsError を送出する。
        """
        credentials = _validate(LoginRequest, credentials)

        db_user = await self.store.get_by_username(credentials.username)
        if db_user is None:
            # ユーザーの有無で応答時間が変わらないよう同じコストの照合を行う
            await asyncio.to_thread(self.hasher.verify_dummy, credentials.password)
            self.logger.warning(f"ログイン失敗: ユーザー名 '{credentials.username}' が存在しません")
            raise InvalidCredentialsError()

        valid = await asyncio.to_thread(
            self.hasher.verify, credentials.password, db_user.hashed_password
        )
        if not valid:
            self.logger.warning(f"ログイン失敗: ユーザー '{credentials.username}' のパスワードが不正です")
            raise InvalidCredentialsError()

        token = self.issue_token(db_user)
        self.logger.info(f"ログイン成功: ユーザーID={db_user.id}, ユーザー名={db_user.username}")

        return LoginResponse(
            user=LoginUser(username=db_user.username, email=db_user.email),
            token=token,
        )

    def issue_token(self, db_user: User, now: Optional[datetime] = None) -> str:
        return self.token_issuer.create_access_token(
            data={"id": str(db_user.id), "isAdmin": db_user.is_admin},
            now=now,
        )

    def verify_token(self, token: str, now: Optional[datetime] = None) -> TokenPayload:
        payload = self.token_issuer.verify_token(token, now=now)
        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            # 署名は正しいがクレームが欠けている
            raise InvalidTokenError() from e


def _validate(model, value):
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise ValidationFailureError(
            "入力値が不正です: " + ", ".join(str(err["loc"][-1]) for err in e.errors() if err["loc"])
        ) from e
