"""
ロール・権限判定の単体テスト
"""

import pytest

from campus_auth.domain.entities import (
    UserRole,
    can_perform_action,
    has_higher_or_equal_role,
)


class TestRoleHierarchy:
    """has_higher_or_equal_role()のテスト"""

    @pytest.mark.parametrize(
        "user_role,required,expected",
        [
            ("admin", "mod", True),
            ("mod", "mod", True),
            ("devsupport", "mod", True),
            ("contributor", "mod", False),
            ("student", "contributor", False),
            ("admin", "admin", True),
        ],
    )
    def test_hierarchy(self, user_role: str, required: str, expected: bool) -> None:
        assert has_higher_or_equal_role(user_role, required) is expected

    def test_unknown_role(self) -> None:
        """未知のロールは常にFalse"""
        assert has_higher_or_equal_role("superuser", "student") is False
        assert has_higher_or_equal_role("admin", "superuser") is False


class TestActionPermissions:
    """can_perform_action()のテスト"""

    def test_student_can_upload_only(self) -> None:
        assert can_perform_action("student", "upload") is True
        assert can_perform_action("student", "edit") is False
        assert can_perform_action("student", "moderate") is False

    def test_mod_can_moderate_and_delete(self) -> None:
        assert can_perform_action("mod", "moderate") is True
        assert can_perform_action("mod", "delete") is True
        assert can_perform_action("mod", "admin") is False

    def test_devsupport_is_not_in_action_table(self) -> None:
        """devsupportは階層上はmodより上だが、アクション権限は持たない"""
        assert can_perform_action("devsupport", "upload") is False

    def test_admin(self) -> None:
        for action in ("upload", "moderate", "admin", "delete", "edit"):
            assert can_perform_action(UserRole.ADMIN.value, action) is True  # type: ignore[arg-type]

    def test_unknown_role(self) -> None:
        assert can_perform_action("guest", "upload") is False
