import os

# 設定モジュールの読み込み前にテスト用の環境変数を設定する
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from typing import Dict
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from blog_service.core.config import Settings
from blog_service.core.security import PasswordHasher, TokenIssuer, get_token_issuer
from blog_service.crud.user import CredentialStore
from blog_service.db.base import Base
from blog_service.db.session import Database
from blog_service.main import create_app
from blog_service.models import User, Post, Comment  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    return Settings(
        SECRET_KEY="test-secret-key",
        ENVIRONMENT="testing",
        DATABASE_URI=TEST_DATABASE_URL,
        # テストではハッシュのコストを下げる
        BCRYPT_ROUNDS=4,
    )


# テスト用のインメモリSQLiteデータベース（全セッションで同じ接続を共有する）
@pytest.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def database(db_engine) -> Database:
    return Database(TEST_DATABASE_URL, engine=db_engine)


@pytest.fixture(scope="function")
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture(scope="function")
def hasher(test_settings) -> PasswordHasher:
    return PasswordHasher(rounds=test_settings.BCRYPT_ROUNDS)


@pytest.fixture(scope="function")
def token_issuer(test_settings) -> TokenIssuer:
    return get_token_issuer(test_settings)


@pytest.fixture(scope="function")
def app(test_settings, database):
    return create_app(test_settings, database)


@pytest.fixture(scope="function")
async def async_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# テストユーザーデータ
@pytest.fixture(scope="function")
def test_user_data() -> Dict[str, str]:
    return {
        "username": "testuser",
        "email": "testuser@example.com",
        "password": "password123",
    }


# テスト管理者データ
@pytest.fixture(scope="function")
def test_admin_data() -> Dict[str, str]:
    return {
        "username": "admin",
        "email": "admin@example.com",
        "password": "adminpass",
    }


# DBに登録済みのテストユーザー
@pytest.fixture(scope="function")
async def db_test_user(db_session, hasher, test_user_data) -> User:
    return await CredentialStore(db_session).create_user(
        username=test_user_data["username"],
        email=test_user_data["email"],
        hashed_password=hasher.hash(test_user_data["password"]),
    )


# DBに登録済みのテスト管理者
@pytest.fixture(scope="function")
async def db_test_admin(db_session, hasher, test_admin_data) -> User:
    return await CredentialStore(db_session).create_user(
        username=test_admin_data["username"],
        email=test_admin_data["email"],
        hashed_password=hasher.hash(test_admin_data["password"]),
        is_admin=True,
    )


@pytest.fixture(scope="function")
def user_auth_headers(token_issuer, db_test_user) -> Dict[str, str]:
    token = token_issuer.create_access_token({"id": str(db_test_user.id), "isAdmin": False})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def admin_auth_headers(token_issuer, db_test_admin) -> Dict[str, str]:
    token = token_issuer.create_access_token({"id": str(db_test_admin.id), "isAdmin": True})
    return {"Authorization": f"Bearer {token}"}
