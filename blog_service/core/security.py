from passlib.context import CryptContext
import secrets
from datetime import datetime, timedelta, UTC
from jose import jwt, JWTError
from typing import Optional, Dict, Any

from blog_service.core.config import Settings
from blog_service.core.errors import InvalidTokenError


class PasswordHasher:
    """bcrypt によるソルト付きパスワードハッシュ"""

    def __init__(self, rounds: int = 10):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )
        # 存在しないユーザーの照合にも同じコストをかけるためのハッシュ
        self._dummy_hash = self.pwd_context.hash(secrets.token_urlsafe(16))

    def hash(self, password: str) -> str:
        # ソルトはハッシュ毎に新しく生成される
        return self.pwd_context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            # 壊れたハッシュは不一致として扱う
            return False

    def verify_dummy(self, plain_password: str) -> bool:
        """照合対象が無い場合に、実在ユーザーと同じコストで照合を行う（結果は常にFalse）"""
        self.verify(plain_password, self._dummy_hash)
        return False


class TokenIssuer:
    """共有シークレットで署名するJWTの発行と検証"""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_delta: timedelta = timedelta(days=1)):
        if not secret_key:
            raise ValueError("SECRET_KEY is not configured")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def create_access_token(self, data: Dict[str, Any], now: Optional[datetime] = None) -> str:
        """
        アクセストークンを作成する

        Args:
            data: トークンに含めるクレーム（id, isAdmin）
            now: 発行時刻（指定がない場合は現在時刻）

        Returns:
            str: 署名済みのJWT
        """
        issued_at = now or datetime.now(UTC)
        to_encode = data.copy()
        to_encode.update({
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_delta).timestamp()),
        })
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        トークンの署名と有効期限を検証し、ペイロードを返す

        Args:
            token: 検証するJWT
            now: 検証時刻（指定がない場合は現在時刻）

        Returns:
            Dict[str, Any]: デコードされたクレーム

        Raises:
            InvalidTokenError: 署名不正・形式不正・期限切れの場合
        """
        try:
            # 有効期限は検証時刻を指定できるよう自前で確認する
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError() from e

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise InvalidTokenError()

        current = now or datetime.now(UTC)
        if current.timestamp() >= exp:
            raise InvalidTokenError("トークンの有効期限が切れています")

        return payload


def get_password_hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


def get_token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
