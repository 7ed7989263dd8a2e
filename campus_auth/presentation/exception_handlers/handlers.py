"""FastAPI例外ハンドラー"""

import json
from typing import Awaitable, Callable, cast

import sentry_sdk
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_auth.core.logging import get_logger
from campus_auth.domain.exceptions import DomainError, ValidationError
from campus_auth.presentation.exceptions import (
    APIError,
    ErrorResponse,
    domain_error_to_api_error,
)

logger = get_logger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> Response:
    """
    DomainError例外ハンドラ

    5xx（復号失敗・ストア障害）はログに残し、Sentryへ送る。
    """
    api_error = domain_error_to_api_error(exc)
    if api_error.status_code >= 500:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: "
            f"{exc.message}"
        )
        sentry_sdk.capture_exception(exc)
    return Response(
        content=json.dumps(jsonable_encoder(api_error.to_response())),
        status_code=api_error.status_code,
        media_type="application/json",
    )


async def api_error_handler(request: Request, exc: APIError) -> Response:
    """APIError例外ハンドラ（後方互換性のため保持）"""
    return Response(
        content=json.dumps(jsonable_encoder(exc.to_response())),
        status_code=exc.status_code,
        media_type="application/json",
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """
    HTTPException例外ハンドラ

    ルーター由来の404/405もここで標準形式に揃える。
    """
    error = ErrorResponse(
        code="http_error",
        message=str(exc.detail),
    )
    return Response(
        content=json.dumps(jsonable_encoder(error)),
        status_code=exc.status_code,
        headers=exc.headers,
        media_type="application/json",
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> Response:
    """バリデーションエラーハンドラ（Pydantic）"""
    error = ValidationError(
        message="Invalid request body",
        details=[
            {"loc": err["loc"], "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ],
    )
    api_error = domain_error_to_api_error(error)
    return Response(
        content=json.dumps(jsonable_encoder(api_error.to_response())),
        status_code=api_error.status_code,
        media_type="application/json",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    FastAPIアプリケーションに例外ハンドラーを登録

    Args:
        app: FastAPIアプリケーションインスタンス
    """
    # 型キャスト：Starletteの型定義との互換性のため
    # FastAPIの例外ハンドラーは実行時に正しく動作するが、
    # 静的型チェッカーではStarletteの厳密な型定義に適合しない
    handler_type = Callable[[Request, Exception], Awaitable[Response]]

    app.add_exception_handler(DomainError, cast(handler_type, domain_error_handler))
    app.add_exception_handler(APIError, cast(handler_type, api_error_handler))
    app.add_exception_handler(
        StarletteHTTPException, cast(handler_type, http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(handler_type, validation_exception_handler)
    )
