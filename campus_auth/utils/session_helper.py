"""
セッション管理ヘルパー

FastAPIのRequestとResponseからセッションCookie・クライアント情報を扱うための便利な関数
"""

from typing import Optional

from fastapi import Request, Response

from ..core.config import get_settings

CLIENT_IP_HEADERS = ("CF-Connecting-IP", "X-Forwarded-For")


def get_client_ip(request: Request) -> Optional[str]:
    """
    クライアントIPアドレスを取得

    CF-Connecting-IP、X-Forwarded-For、client.host の順に参照する

    Args:
        request: FastAPI Request

    Returns:
        クライアントIPアドレス
    """
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            # X-Forwarded-Forには複数のIPが含まれる可能性があるため、最初のものを使用
            return value.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    """
    User-Agentヘッダーを取得

    Args:
        request: FastAPI Request

    Returns:
        User-Agentヘッダー
    """
    return request.headers.get("User-Agent")


def get_session_cookie(request: Request) -> Optional[str]:
    """CookieのsessionIdを取得（未検証）"""
    return request.cookies.get(get_settings().SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, session_uuid: str, max_age: int) -> None:
    """
    セッションCookieを設定

    Args:
        response: FastAPI Response
        session_uuid: セッションのUUID（トークンそのものは載せない）
        max_age: Cookieの有効秒数（セッションの有効期間と同じ）
    """
    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_uuid,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,  # 本番環境ではHTTPSのみ
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    """セッションCookieを削除"""
    settings = get_settings()
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
