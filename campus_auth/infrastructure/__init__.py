"""Infrastructure layer - Technical implementations"""

from .database import get_db, get_engine, get_session_factory
from .repositories.session_repository import SessionCacheRepository
from .services.authenticator import SessionAuthenticator
from .services.session_issuer import IssuedSession, SessionIssuer
from .services.session_manager import SessionManager

__all__ = [
    "get_db",
    "get_engine",
    "get_session_factory",
    "SessionCacheRepository",
    "SessionAuthenticator",
    "SessionIssuer",
    "IssuedSession",
    "SessionManager",
]
