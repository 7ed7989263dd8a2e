from .roles import (
    ACTION_PERMISSIONS,
    ROLE_HIERARCHY,
    UserRole,
    can_perform_action,
    has_higher_or_equal_role,
)
from .session import (
    AuthenticatedUser,
    DecryptedUserData,
    SessionInfo,
    SessionLookup,
    SessionProfile,
    SessionStats,
)

__all__ = [
    "UserRole",
    "ROLE_HIERARCHY",
    "ACTION_PERMISSIONS",
    "has_higher_or_equal_role",
    "can_perform_action",
    "SessionLookup",
    "SessionProfile",
    "SessionInfo",
    "DecryptedUserData",
    "AuthenticatedUser",
    "SessionStats",
]
