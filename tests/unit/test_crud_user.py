import pytest
import uuid
from unittest.mock import patch
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from blog_service.core.errors import DuplicateKeyError, StorageUnavailableError
from blog_service.crud.user import CredentialStore
from blog_service.models.user import User


class TestCredentialStore:
    async def test_create_user(self, db_session):
        """ユーザー作成のテスト"""
        store = CredentialStore(db_session)
        user = await store.create_user("newuser", "new@example.com", "hashed-value")

        assert user.id is not None
        assert user.username == "newuser"
        assert user.email == "new@example.com"
        assert user.is_admin is False
        assert user.created_at is not None
        assert user.updated_at is not None

        saved_user = await store.get_by_username("newuser")
        assert saved_user is not None
        assert saved_user.id == user.id

    async def test_create_admin_user(self, db_session):
        """管理者ユーザー作成のテスト"""
        store = CredentialStore(db_session)
        admin = await store.create_user("newadmin", "newadmin@example.com", "hashed-value", is_admin=True)

        assert admin.is_admin is True

    async def test_create_duplicate_username(self, db_session, db_test_user):
        """重複ユーザー名でのユーザー作成テスト（失敗ケース）"""
        store = CredentialStore(db_session)
        username, email = db_test_user.username, db_test_user.email
        with pytest.raises(DuplicateKeyError):
            await store.create_user(username, "other@example.com", "hashed-value")

        # 最初のユーザーは影響を受けない
        count = await db_session.scalar(select(func.count()).select_from(User))
        assert count == 1
        saved_user = await store.get_by_username(username)
        assert saved_user.email == email

    async def test_create_duplicate_email(self, db_session, db_test_user):
        """重複メールアドレスでのユーザー作成テスト（失敗ケース）"""
        store = CredentialStore(db_session)
        with pytest.raises(DuplicateKeyError):
            await store.create_user("anotheruser", db_test_user.email, "hashed-value")

    async def test_create_user_storage_error(self, db_session):
        """DBエラーがStorageUnavailableErrorに変換されることのテスト"""
        store = CredentialStore(db_session)
        error = OperationalError("INSERT", {}, Exception("connection refused"))
        with patch.object(db_session, "commit", side_effect=error):
            with pytest.raises(StorageUnavailableError) as exc_info:
                await store.create_user("newuser", "new@example.com", "hashed-value")

        # ドライバーのエラー内容はメッセージに含まれない
        assert "connection refused" not in exc_info.value.message
        assert exc_info.value.__cause__ is error

    async def test_get_by_username_not_found(self, db_session):
        """存在しないユーザー名の検索テスト"""
        assert await CredentialStore(db_session).get_by_username("nobody") is None

    async def test_get_by_id(self, db_session, db_test_user):
        """IDによるユーザー検索テスト"""
        store = CredentialStore(db_session)
        assert (await store.get_by_id(db_test_user.id)).username == db_test_user.username
        assert await store.get_by_id(uuid.uuid4()) is None

    async def test_lookup_storage_error(self, db_session):
        """検索時のDBエラーがStorageUnavailableErrorに変換されることのテスト"""
        store = CredentialStore(db_session)
        error = OperationalError("SELECT", {}, Exception("timeout"))
        with patch.object(db_session, "execute", side_effect=error):
            with pytest.raises(StorageUnavailableError):
                await store.get_by_username("testuser")
