from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional, Literal, List


class Settings(BaseSettings):
    # 環境設定
    ENVIRONMENT: Literal["development", "testing", "production"] = "development"

    # ロギング設定
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/blog_service.log"

    # 初期管理者ユーザー設定（パスワード未設定の場合は作成しない）
    INITIAL_ADMIN_USERNAME: str = "admin"
    INITIAL_ADMIN_EMAIL: str = "admin@example.com"
    INITIAL_ADMIN_PASSWORD: Optional[str] = None

    # データベース設定
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "blog"
    # 接続文字列を直接指定する場合（POSTGRES_* より優先）
    DATABASE_URI: Optional[str] = None
    SQLALCHEMY_ECHO: bool = False
    CREATE_TABLES_ON_STARTUP: bool = False

    # トークン設定
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1日

    # パスワードハッシュ設定
    BCRYPT_ROUNDS: int = 10

    CORS_ORIGINS: List[str] = ["*"]

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URI:
            return self.DATABASE_URI
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
    )


settings = Settings()
