import time
import uuid
import os
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from blog_service.api.v1.api import api_router
from blog_service.core.config import Settings, settings as default_settings
from blog_service.core.errors import ErrorKind, ServiceError
from blog_service.core.logging import app_logger, get_request_logger
from blog_service.core.security import get_password_hasher, get_token_issuer
from blog_service.db.init import DatabaseInitializer
from blog_service.db.session import Database

SERVICE_VERSION = "1.0.0"


def mask_authorization(headers) -> dict:
    """ログ出力用にヘッダーを複製し、認証情報をマスクする"""
    masked = dict(headers)
    auth_header = masked.get("authorization")
    if auth_header is None:
        return masked
    if auth_header.startswith("Bearer "):
        # トークンの先頭部分だけを表示し、残りをマスク
        token_part = auth_header[len("Bearer "):]
        masked["authorization"] = f"Bearer {token_part[:10]}..."
    else:
        masked["authorization"] = "***"
    return masked


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションのライフサイクルを管理します"""
    # 起動時の処理
    initializer = DatabaseInitializer(
        database=app.state.database,
        settings=app.state.settings,
        hasher=app.state.password_hasher,
    )
    try:
        await initializer.init()
        app_logger.info("Database initialized successfully")
    except Exception as e:
        app_logger.error(f"Error initializing database: {e}")
        raise

    try:
        await initializer.create_initial_admin()
    except Exception as e:
        # 管理者作成のエラーはアプリ起動を妨げるべきではない
        app_logger.error(f"Error creating admin user: {e}", exc_info=True)

    yield  # アプリケーションの実行中

    # 終了時の処理
    app_logger.info("Shutting down application")
    await app.state.database.dispose()


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    設定とデータベースを受け取りFastAPIアプリケーションを組み立てる

    Args:
        settings: アプリケーション設定（指定がない場合は環境変数から読み込んだ設定）
        database: データベース（指定がない場合は設定の接続先から作成）
    """
    settings = settings or default_settings

    # ログディレクトリの作成（ファイルログが有効な場合）
    if settings.LOG_TO_FILE:
        log_dir = os.path.dirname(settings.LOG_FILE_PATH)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

    app = FastAPI(
        title="ブログサービス",
        description="ユーザー認証・投稿・コメントを提供するブログAPI",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.password_hasher = get_password_hasher(settings)
    app.state.token_issuer = get_token_issuer(settings)

    # CORSミドルウェアの設定
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # リクエストIDとロギングミドルウェア
    @app.middleware("http")
    async def request_middleware(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        logger = get_request_logger(request)

        # 機密情報（認証情報など）をマスクしてからヘッダーを記録する
        logger.debug(f"Request headers: {mask_authorization(request.headers)}")
        logger.info(
            f"Request started: {request.method} {request.url.path} "
            f"(Client: {request.client.host if request.client else 'unknown'})"
        )

        start_time = time.time()

        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = str(process_time)

            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"Status: {response.status_code} "
                f"Process time: {process_time:.3f}s"
            )

            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"Error: {str(e)} "
                f"Process time: {process_time:.3f}s",
                exc_info=True
            )
            raise

    # バリデーションエラーハンドラー
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger = get_request_logger(request)

        # エラー情報の処理（ValueErrorオブジェクトを文字列に変換）
        errors = []
        for error in exc.errors():
            processed_error = dict(error)
            if "ctx" in processed_error and "error" in processed_error["ctx"]:
                processed_error["ctx"] = dict(processed_error["ctx"])
                processed_error["ctx"]["error"] = str(processed_error["ctx"]["error"])
            # 入力値（パスワードを含みうる）はレスポンスに含めない
            processed_error.pop("input", None)
            errors.append(processed_error)

        logger.warning(
            f"Validation error: {request.method} {request.url.path} "
            f"Fields: {[e.get('loc') for e in errors]}"
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": errors, "code": ErrorKind.VALIDATION_FAILURE.value},
        )

    # サービス層の例外をHTTPレスポンスに変換する
    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        logger = get_request_logger(request)
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                f"Service error: {request.method} {request.url.path} kind={exc.kind.value}",
                exc_info=exc.__cause__ or exc,
            )
        else:
            logger.warning(
                f"Service error: {request.method} {request.url.path} "
                f"kind={exc.kind.value} status={exc.status_code}"
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.kind.value},
            headers=exc.headers,
        )

    # APIルーターの登録
    app.include_router(api_router, prefix="/api/v1")

    # ルートエンドポイント
    @app.get("/")
    async def root():
        return {
            "message": "ブログサービスAPI",
            "version": SERVICE_VERSION,
            "docs_url": "/docs"
        }

    # ヘルスチェックエンドポイント
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


if __name__ == "__main__":
    import uvicorn

    # アプリケーション起動時のログ
    app_logger.info(
        f"Starting blog-service in {default_settings.ENVIRONMENT} mode "
        f"(Log level: {default_settings.LOG_LEVEL})"
    )

    uvicorn.run(create_app(), host="0.0.0.0", port=8080)
