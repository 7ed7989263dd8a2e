"""FastAPIアプリケーションファクトリー"""

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campus_auth.core.config import get_settings
from campus_auth.core.lifespan import lifespan
from campus_auth.core.logging import get_logger
from campus_auth.presentation import api_router
from campus_auth.presentation.exception_handlers import register_exception_handlers
from campus_auth.presentation.middleware.error_handler import error_response_middleware
from campus_auth.presentation.middleware.security_headers import (
    SecurityHeadersMiddleware,
)
from campus_auth.presentation.middleware.session import session_middleware

logger = get_logger(__name__)


class HealthCheckFilter(logging.Filter):
    """ヘルスチェックログを除外するフィルター"""

    def filter(self, record: logging.LogRecord) -> bool:
        return "/api/system/healthcheck" not in record.getMessage()


def create_app() -> FastAPI:
    """
    FastAPIアプリケーションを生成

    Returns:
        FastAPIアプリケーションインスタンス
    """
    settings = get_settings()

    app_params: dict[str, Any] = {
        "title": "Campus Auth",
        "description": "セッションキャッシュと認証検証のAPI",
        "version": "0.1.0",
        "lifespan": lifespan,
    }

    # 本番環境ではドキュメントを無効化
    if settings.is_production:
        app_params["docs_url"] = None
        app_params["redoc_url"] = None
        app_params["openapi_url"] = None

    app = FastAPI(**app_params)

    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())

    # CORS（Cookie認証のためcredentialsを許可）
    if len(settings.BACKEND_CORS_ORIGINS) > 0:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.middleware("http")(error_response_middleware)
    app.middleware("http")(session_middleware)

    app.include_router(api_router)

    return app
