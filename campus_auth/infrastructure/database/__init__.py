from .connection import dispose_engine, get_db, get_engine, get_session_factory
from .models import Base, BaseModel, SessionCache, TimeStampMixin

__all__ = [
    "get_db",
    "get_engine",
    "get_session_factory",
    "dispose_engine",
    "Base",
    "BaseModel",
    "TimeStampMixin",
    "SessionCache",
]
