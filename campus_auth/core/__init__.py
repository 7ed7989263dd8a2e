"""Core module - Settings and cross-cutting concerns"""

from .config import Settings, get_settings

# Domain層のエラー
from ..domain.exceptions.base import (
    BadRequestError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Domain errors
    "DomainError",
    "NotFoundError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "ServiceUnavailableError",
    "ValidationError",
]
