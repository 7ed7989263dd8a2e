"""Domain layer - Business rules and entities"""

from .exceptions import (
    BadRequestError,
    ConflictError,
    DecryptionError,
    DomainError,
    DuplicateTokenError,
    ForbiddenError,
    InsufficientPrivilegesError,
    InvalidTokenError,
    NotFoundError,
    ServiceUnavailableError,
    SessionStoreError,
    TokenExpiredError,
    UnauthenticatedError,
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
