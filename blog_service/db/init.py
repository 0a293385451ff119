
from blog_service.core.config import Settings
from blog_service.core.logging import app_logger as logger
from blog_service.core.security import PasswordHasher
from blog_service.crud.user import CredentialStore
from blog_service.db.base import Base
from blog_service.db.session import Database
from blog_service.core.errors import DuplicateKeyError

# create_all 対象のモデルを登録する
from blog_service.models import user, post, comment  # noqa: F401


class DatabaseInitializer:
    """データベース初期化を担当するクラス"""

    def __init__(self, database: Database, settings: Settings, hasher: PasswordHasher):
        self.database = database
        self.settings = settings
        self.hasher = hasher

    async def init(self) -> bool:
        """
        データベースの初期化処理を行います。
        本番環境ではAlembicのマイグレーションでテーブルを作成し、
        CREATE_TABLES_ON_STARTUP が有効な場合のみここでテーブルを作成します。
        """
        logger.info("Initializing database...")

        if self.settings.CREATE_TABLES_ON_STARTUP:
            async with self.database.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

        logger.info("Database initialization completed")
        return True

    async def create_initial_admin(self) -> None:
        """INITIAL_ADMIN_PASSWORD が設定されている場合に初期管理者ユーザーを作成する"""
        if not self.settings.INITIAL_ADMIN_PASSWORD:
            return

        admin_username = self.settings.INITIAL_ADMIN_USERNAME
        async with self.database.session() as session:
            store = CredentialStore(session)
            if await store.get_by_username(admin_username):
                logger.info(f"Admin user '{admin_username}' already exists")
                return
            try:
                await store.create_user(
                    username=admin_username,
                    email=self.settings.INITIAL_ADMIN_EMAIL,
                    hashed_password=self.hasher.hash(self.settings.INITIAL_ADMIN_PASSWORD),
                    is_admin=True,
                )
                logger.info(f"Initial admin user '{admin_username}' created successfully")
            except DuplicateKeyError:
                # 他のプロセスが既にユーザーを作成している場合
                logger.info(f"Admin user '{admin_username}' already created by another process")
