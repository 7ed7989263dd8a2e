"""リクエストコンテキストミドルウェア"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from campus_auth.core.config import get_settings
from campus_auth.utils.session_helper import get_client_ip, get_user_agent


async def session_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """
    セッション関連のリクエスト情報を request.state に載せる

    - session_id: Cookie の sessionId（未検証）
    - client_ip / user_agent: セッション作成時の監査情報

    セッションの検証はDBアクセスを伴うため、ここでは行わず
    各エンドポイントの依存関係（require_session）で行う。

    Args:
        request: HTTPリクエスト
        call_next: 次のミドルウェア/エンドポイント

    Returns:
        HTTPレスポンス
    """
    settings = get_settings()
    request.state.session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    request.state.client_ip = get_client_ip(request)
    request.state.user_agent = get_user_agent(request)
    return await call_next(request)
