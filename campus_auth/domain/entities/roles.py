"""ユーザーロールと権限"""

from enum import Enum
from typing import Literal


class UserRole(str, Enum):
    STUDENT = "student"
    CONTRIBUTOR = "contributor"
    MOD = "mod"
    DEVSUPPORT = "devsupport"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.STUDENT: 1,
    UserRole.CONTRIBUTOR: 2,
    UserRole.MOD: 3,
    UserRole.DEVSUPPORT: 4,
    UserRole.ADMIN: 5,
}

Action = Literal["upload", "moderate", "admin", "delete", "edit"]

ACTION_PERMISSIONS: dict[str, frozenset[UserRole]] = {
    "upload": frozenset(
        {UserRole.STUDENT, UserRole.CONTRIBUTOR, UserRole.MOD, UserRole.ADMIN}
    ),
    "moderate": frozenset({UserRole.MOD, UserRole.ADMIN}),
    "admin": frozenset({UserRole.ADMIN}),
    "delete": frozenset({UserRole.MOD, UserRole.ADMIN}),
    "edit": frozenset({UserRole.CONTRIBUTOR, UserRole.MOD, UserRole.ADMIN}),
}


def has_higher_or_equal_role(user_role: str, required_role: str) -> bool:
    """
    ロール階層で required_role 以上かどうか

    未知のロールは常にFalse。
    """
    try:
        return ROLE_HIERARCHY[UserRole(user_role)] >= ROLE_HIERARCHY[
            UserRole(required_role)
        ]
    except ValueError:
        return False


def can_perform_action(user_role: str, action: Action) -> bool:
    """アクション単位の権限判定"""
    try:
        role = UserRole(user_role)
    except ValueError:
        return False
    return role in ACTION_PERMISSIONS[action]
