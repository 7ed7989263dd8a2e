from .session_helper import (
    clear_session_cookie,
    get_client_ip,
    get_session_cookie,
    get_user_agent,
    set_session_cookie,
)

__all__ = [
    "get_client_ip",
    "get_user_agent",
    "get_session_cookie",
    "set_session_cookie",
    "clear_session_cookie",
]
