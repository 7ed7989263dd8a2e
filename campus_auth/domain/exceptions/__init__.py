from .auth import (
    DecryptionError,
    DuplicateTokenError,
    InsufficientPrivilegesError,
    InvalidTokenError,
    SessionStoreError,
    TokenExpiredError,
    UnauthenticatedError,
)
from .base import (
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
    "DomainError",
    "NotFoundError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "ServiceUnavailableError",
    "ValidationError",
    "DecryptionError",
    "DuplicateTokenError",
    "UnauthenticatedError",
    "InvalidTokenError",
    "TokenExpiredError",
    "InsufficientPrivilegesError",
    "SessionStoreError",
]
