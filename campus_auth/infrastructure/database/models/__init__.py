from .base import Base, BaseModel, TimeStampMixin, utcnow
from .session_cache import SessionCache

__all__ = ["Base", "BaseModel", "TimeStampMixin", "SessionCache", "utcnow"]
