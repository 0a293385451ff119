import pytest
import uuid
from pydantic import ValidationError

from blog_service.schemas.comment import CommentCreate
from blog_service.schemas.post import PostUpdate
from blog_service.schemas.user import (
    LoginRequest,
    LoginResponse,
    LoginUser,
    TokenPayload,
    UserCreate,
    UserResponse,
)


class TestUserSchemas:
    def test_user_create_valid(self):
        """有効なUserCreateスキーマのテスト"""
        user = UserCreate(username="alice", email="a@x.com", password="hunter2")
        assert user.username == "alice"
        assert user.email == "a@x.com"
        assert user.password == "hunter2"

    @pytest.mark.parametrize("field", ["username", "email", "password"])
    def test_user_create_missing_field(self, field):
        """必須項目が欠けている場合のテスト"""
        data = {"username": "alice", "email": "a@x.com", "password": "hunter2"}
        del data[field]
        with pytest.raises(ValidationError):
            UserCreate(**data)

    def test_user_create_blank_username(self):
        """空白のみのユーザー名のテスト"""
        with pytest.raises(ValidationError):
            UserCreate(username="   ", email="a@x.com", password="hunter2")

    def test_user_create_strips_username(self):
        """ユーザー名の前後の空白が除去されることのテスト"""
        user = UserCreate(username=" alice ", email="a@x.com", password="hunter2")
        assert user.username == "alice"

    def test_user_create_invalid_email(self):
        """メールアドレスの形式が不正な場合のテスト"""
        with pytest.raises(ValidationError):
            UserCreate(username="alice", email="not-an-email", password="hunter2")

    def test_user_create_long_username(self):
        """長すぎるユーザー名のテスト"""
        with pytest.raises(ValidationError):
            UserCreate(username="a" * 51, email="a@x.com", password="hunter2")

    def test_user_create_password_too_long_in_bytes(self):
        """72バイトを超えるパスワードのテスト"""
        with pytest.raises(ValidationError):
            UserCreate(username="alice", email="a@x.com", password="あ" * 25)

    def test_login_request_strips_username(self):
        """ログイン時のユーザー名も登録時と同じく前後の空白が除去されることのテスト"""
        credentials = LoginRequest(username=" alice ", password="hunter2")
        assert credentials.username == "alice"

        with pytest.raises(ValidationError):
            LoginRequest(username="   ", password="hunter2")

    def test_login_request_empty_password(self):
        """空のパスワードでのログインリクエストのテスト"""
        with pytest.raises(ValidationError):
            LoginRequest(username="alice", password="")

    def test_user_response_excludes_password(self):
        """UserResponseにパスワード関連の項目が含まれないことのテスト"""
        data = UserResponse(
            id=uuid.uuid4(), username="alice", email="a@x.com", is_admin=False
        ).model_dump(by_alias=True)
        assert "isAdmin" in data
        assert "password" not in data
        assert "hashedPassword" not in data

    def test_login_response_shape(self):
        """LoginResponseの形式のテスト"""
        data = LoginResponse(
            user=LoginUser(username="alice", email="a@x.com"), token="abc"
        ).model_dump(by_alias=True)
        assert data == {"user": {"username": "alice", "email": "a@x.com"}, "token": "abc"}

    def test_token_payload_from_claims(self):
        """JWTクレームからTokenPayloadへの変換テスト"""
        user_id = uuid.uuid4()
        payload = TokenPayload.model_validate({"id": str(user_id), "isAdmin": True, "exp": 1, "iat": 0})
        assert payload.id == user_id
        assert payload.is_admin is True


class TestPostSchemas:
    def test_post_update_partial(self):
        """部分更新では指定された項目のみが設定されることのテスト"""
        update = PostUpdate(title="新しいタイトル")
        assert update.model_dump(exclude_unset=True) == {"title": "新しいタイトル"}

    def test_comment_create_accepts_camel_case(self):
        """CommentCreateがcamelCaseの入力を受け付けることのテスト"""
        post_id = uuid.uuid4()
        comment = CommentCreate.model_validate({"postId": str(post_id), "text": "こんにちは"})
        assert comment.post_id == post_id
