import secrets
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session
from starlette.status import HTTP_403_FORBIDDEN

from ...core.config import get_settings
from ...domain.entities import AuthenticatedUser
from ...infrastructure.database import get_db
from ...infrastructure.repositories.session_repository import SessionCacheRepository
from ...infrastructure.services.authenticator import SessionAuthenticator
from ...infrastructure.services.session_issuer import SessionIssuer
from ...infrastructure.services.session_manager import SessionManager


def get_session_repository(db: Session = Depends(get_db)) -> SessionCacheRepository:
    """セッションリポジトリのdependency"""
    return SessionCacheRepository(db)


def get_session_manager(
    repository: SessionCacheRepository = Depends(get_session_repository),
) -> SessionManager:
    return SessionManager(repository)


def get_session_issuer(
    repository: SessionCacheRepository = Depends(get_session_repository),
) -> SessionIssuer:
    return SessionIssuer(repository)


def get_authenticator(
    repository: SessionCacheRepository = Depends(get_session_repository),
) -> SessionAuthenticator:
    return SessionAuthenticator(repository)


def _authenticate(
    request: Request,
    authenticator: SessionAuthenticator,
    roles: Optional[list[str]],
) -> AuthenticatedUser:
    settings = get_settings()
    user = authenticator.authenticate(
        request.cookies.get(settings.SESSION_COOKIE_NAME),
        request.headers.get("Authorization"),
        required_roles=roles,
    )
    request.state.user = user
    return user


def require_session(*roles: str) -> Callable[..., AuthenticatedUser]:
    """
    セッション認証のdependencyを生成

    - require_session(): 有効なセッションがあれば全ロール許可
    - require_session("admin", "mod"): 指定ロールのみ許可（それ以外は403）

    Cookie の sessionId、Authorization: Bearer <JWT> の順に検証する。
    """
    required = list(roles) or None

    def dependency(
        request: Request,
        authenticator: SessionAuthenticator = Depends(get_authenticator),
    ) -> AuthenticatedUser:
        return _authenticate(request, authenticator, required)

    return dependency


def require_admin(
    request: Request,
    authenticator: SessionAuthenticator = Depends(get_authenticator),
) -> AuthenticatedUser:
    """
    管理者ロール（ADMIN_ROLES）のセッションを要求するdependency
    """
    return _authenticate(request, authenticator, get_settings().ADMIN_ROLES)


def get_optional_user(
    request: Request,
    authenticator: SessionAuthenticator = Depends(get_authenticator),
) -> Optional[AuthenticatedUser]:
    """
    認証できればユーザー、できなければNoneを返すdependency

    ストア障害は503として伝播する。
    """
    settings = get_settings()
    return authenticator.authenticate_optional(
        request.cookies.get(settings.SESSION_COOKIE_NAME),
        request.headers.get("Authorization"),
    )


# API認証用のヘッダーハンドラーを作成
api_key_header = APIKeyHeader(
    name="Authorization", scheme_name="Bearer", auto_error=False
)


def get_api_key(
    api_key_header: str = Security(api_key_header),
) -> str:
    """
    APIキー認証のdependency（サービス間呼び出し用）
    Authorizationヘッダーに'Bearer {api_key}'形式で指定されたAPIキーを検証

    - Authorization: Bearer your-api-key-here
    """
    settings = get_settings()

    if not api_key_header:
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN, detail="Authorization header missing"
        )

    # Bearerプレフィックスの処理
    scheme, _, api_key = api_key_header.partition(" ")
    if scheme.lower() != "bearer":
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN,
            detail="Authorization header must start with 'Bearer'",
        )

    if not api_key or not secrets.compare_digest(
        api_key.encode("utf-8"), settings.API_KEY.encode("utf-8")
    ):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Invalid API key")

    return api_key
