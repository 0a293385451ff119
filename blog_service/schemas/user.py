from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from blog_service.schemas.base import CamelModel

# bcrypt は72バイトを超える入力を扱えない
PASSWORD_MAX_BYTES = 72
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def strip_not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("空白のみの値は指定できません")
    return v


# 新規ユーザー登録時に必要なプロパティ
class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("username", "email")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return strip_not_blank(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"パスワードは{PASSWORD_MAX_BYTES}バイト以内で指定してください")
        return v


# ログインリクエスト
class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        # 登録時と同じ正規化を行う
        return strip_not_blank(v)


# レスポンスとして返すユーザー情報（パスワードハッシュは含めない）
class UserResponse(CamelModel):
    id: UUID
    username: str
    email: str
    is_admin: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ログイン成功時に返す公開ユーザー情報
class LoginUser(CamelModel):
    username: str
    email: str


class LoginResponse(CamelModel):
    user: LoginUser
    token: str


# トークンのクレーム
class TokenPayload(CamelModel):
    id: UUID
    is_admin: bool = False
    exp: int


class TokenVerifyRequest(CamelModel):
    token: str


class TokenVerifyResponse(CamelModel):
    valid: bool
    id: UUID
    is_admin: bool
    exp: int
