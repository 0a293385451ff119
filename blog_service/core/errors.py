from enum import Enum
from typing import Dict, Optional

from fastapi import status


class ErrorKind(str, Enum):
    """クライアントに返すエラー種別"""

    VALIDATION_FAILURE = "validation_failure"
    DUPLICATE_KEY = "duplicate_key"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    STORAGE_UNAVAILABLE = "storage_unavailable"


class ServiceError(Exception):
    """
    サービス層の例外の基底クラス

    kind / status_code / message がそのままHTTPレスポンスに変換される。
    message にはドライバーのエラー内容などの内部情報を含めないこと。
    """

    kind: ErrorKind
    status_code: int
    message: str

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationFailureError(ServiceError):
    kind = ErrorKind.VALIDATION_FAILURE
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "入力値が不正です"


class DuplicateKeyError(ServiceError):
    kind = ErrorKind.DUPLICATE_KEY
    status_code = status.HTTP_409_CONFLICT
    message = "このユーザー名またはメールアドレスは既に登録されています"


class InvalidCredentialsError(ServiceError):
    # 存在しないユーザーとパスワード誤りを区別しない
    kind = ErrorKind.INVALID_CREDENTIALS
    status_code = status.HTTP_400_BAD_REQUEST
    message = "ユーザー名またはパスワードが正しくありません"


class InvalidTokenError(ServiceError):
    kind = ErrorKind.INVALID_TOKEN
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "認証情報が無効です"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class PermissionDeniedError(ServiceError):
    kind = ErrorKind.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
    message = "この操作を行う権限がありません"


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    message = "対象が見つかりません"


class StorageUnavailableError(ServiceError):
    kind = ErrorKind.STORAGE_UNAVAILABLE
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "サーバー内部でエラーが発生しました"
