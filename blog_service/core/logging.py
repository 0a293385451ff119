import json
import logging
import sys
from datetime import datetime, UTC
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Set, Union

from fastapi import Request

from blog_service.core.config import settings

DEFAULT_REQUEST_ID = "no-request-id"

# get_logger で構成済みのロガー名（外部から追加されたハンドラーとは区別する）
_configured_loggers: Set[str] = set()


class RequestIdFilter(logging.Filter):
    """request_id を持たないログレコードにデフォルト値を設定するフィルター"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = DEFAULT_REQUEST_ID
        return True


class CustomJsonFormatter(logging.Formatter):
    """ログレコードを1行のJSONとして出力するフォーマッター"""

    def format(self, record: logging.LogRecord) -> str:
        log_dict: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
            "request_id": getattr(record, "request_id", DEFAULT_REQUEST_ID),
        }

        user_id = getattr(record, "user_id", None)
        if user_id is not None:
            log_dict["user_id"] = str(user_id)

        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_dict, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    """
    設定に従ってハンドラーとフィルターを構成したロガーを返す

    Args:
        name: ロガー名

    Returns:
        logging.Logger: 構成済みのロガー
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger
    _configured_loggers.add(name)

    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False

    if settings.ENVIRONMENT == "production":
        formatter: logging.Formatter = CustomJsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s"
        )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(RequestIdFilter())
    logger.addHandler(stream_handler)

    if settings.LOG_TO_FILE:
        file_handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(CustomJsonFormatter())
        file_handler.addFilter(RequestIdFilter())
        logger.addHandler(file_handler)

    logger.addFilter(RequestIdFilter())
    return logger


def get_request_logger(request: Request) -> logging.LoggerAdapter:
    """リクエストIDを付与したロガーアダプターを返す"""
    request_id = getattr(request.state, "request_id", DEFAULT_REQUEST_ID)
    return logging.LoggerAdapter(get_logger("blog_service.request"), {"request_id": request_id})


LoggerLike = Union[logging.Logger, logging.LoggerAdapter]

app_logger = get_logger("blog_service")
