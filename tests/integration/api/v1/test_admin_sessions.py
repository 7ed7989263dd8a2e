"""
セッション管理API（管理者向け）の統合テスト
"""

from datetime import datetime, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.orm import Session

from campus_auth.infrastructure.database.models import SessionCache, utcnow
from campus_auth.infrastructure.security.tokens import create_access_token

ADMIN = "/api/v1/admin/sessions"


def bearer(session_token: str) -> dict[str, str]:
    token = create_access_token({"id": "admin"}, session_token, timedelta(hours=1))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(make_session: Any) -> dict[str, str]:
    """管理者セッションのAuthorizationヘッダー"""
    _, token = make_session(user_id="admin-1", role="admin")
    return bearer(token)


class TestAuthorization:
    def test_requires_session(self, client: TestClient) -> None:
        assert client.get(f"{ADMIN}/stats").status_code == 401

    def test_student_is_forbidden(self, client: TestClient, make_session: Any) -> None:
        """学生ロールは403で、許可ロールをメッセージに含めないこと"""
        _, token = make_session(role="student")

        response = client.get(f"{ADMIN}/stats", headers=bearer(token))

        assert response.status_code == 403
        assert response.json()["message"] == (
            "Insufficient privileges. Admin access required"
        )

    def test_moderator_is_allowed(self, client: TestClient, make_session: Any) -> None:
        _, token = make_session(role="mod")
        assert client.get(f"{ADMIN}/stats", headers=bearer(token)).status_code == 200


class TestStats:
    def test_stats(
        self, client: TestClient, make_session: Any, admin_headers: dict[str, str]
    ) -> None:
        make_session(user_id="u1", ttl_hours=12)
        make_session(user_id="u1", ttl_hours=48)

        response = client.get(f"{ADMIN}/stats", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        # 管理者自身のセッションも含む
        assert data["total_active_sessions"] == 3
        assert data["active_users_count"] == 2
        assert data["total_expired_sessions"] == 0
        assert data["sessions_expiring_soon"] == 1


class TestUserSessions:
    def test_list_and_force_logout(
        self, client: TestClient, make_session: Any, admin_headers: dict[str, str]
    ) -> None:
        make_session(user_id="u1")
        make_session(user_id="u1")

        listed = client.get(f"{ADMIN}/users/u1", headers=admin_headers).json()
        assert listed["count"] == 2
        assert "session_token" not in listed["sessions"][0]
        assert "email" not in listed["sessions"][0]

        response = client.post(f"{ADMIN}/users/u1/logout", headers=admin_headers)
        assert response.json() == {"invalidated": 2}

        listed = client.get(f"{ADMIN}/users/u1", headers=admin_headers).json()
        assert listed["count"] == 0

    def test_force_logout_single_session(
        self, client: TestClient, make_session: Any, admin_headers: dict[str, str]
    ) -> None:
        _, token = make_session(user_id="u1")

        response = client.post(
            f"{ADMIN}/logout", json={"session_token": token}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        # 対象セッションではもう認証できない
        assert client.get("/api/v1/sessions/me", headers=bearer(token)).status_code == 401

    def test_force_logout_unknown_session(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        response = client.post(
            f"{ADMIN}/logout", json={"session_token": "unknown"}, headers=admin_headers
        )
        assert response.status_code == 404


class TestExtend:
    def test_extend_accumulates(
        self, client: TestClient, make_session: Any, admin_headers: dict[str, str]
    ) -> None:
        """延長を2回行うと2回分加算されること"""
        session, token = make_session(ttl_hours=1)
        original = session.expires_at

        client.post(
            f"{ADMIN}/extend",
            json={"session_token": token, "additional_hours": 24},
            headers=admin_headers,
        )
        response = client.post(
            f"{ADMIN}/extend",
            json={"session_token": token, "additional_hours": 24},
            headers=admin_headers,
        )

        assert response.status_code == 200
        new_expiry = datetime.fromisoformat(response.json()["expires_at"])
        assert new_expiry == original + timedelta(hours=48)

    def test_extend_unknown(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        response = client.post(
            f"{ADMIN}/extend", json={"session_token": "unknown"}, headers=admin_headers
        )
        assert response.status_code == 404

    def test_extend_requires_positive_hours(
        self, client: TestClient, make_session: Any, admin_headers: dict[str, str]
    ) -> None:
        _, token = make_session()
        response = client.post(
            f"{ADMIN}/extend",
            json={"session_token": token, "additional_hours": 0},
            headers=admin_headers,
        )
        assert response.status_code == 400


class TestInactiveAndCleanup:
    def test_inactive(
        self,
        client: TestClient,
        make_session: Any,
        db_session: Session,
        admin_headers: dict[str, str],
    ) -> None:
        idle, _ = make_session(user_id="idle")
        db_session.execute(
            update(SessionCache)
            .where(SessionCache.id == idle.id)
            .values(last_activity=utcnow() - timedelta(minutes=90))
        )
        db_session.commit()

        response = client.get(f"{ADMIN}/inactive?minutes=60", headers=admin_headers)

        data = response.json()
        assert data["threshold_minutes"] == 60
        assert [s["user_id"] for s in data["sessions"]] == ["idle"]

    def test_inactive_rejects_zero_minutes(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        response = client.get(f"{ADMIN}/inactive?minutes=0", headers=admin_headers)
        assert response.status_code == 400

    def test_cleanup(
        self,
        client: TestClient,
        make_session: Any,
        db_session: Session,
        admin_headers: dict[str, str],
    ) -> None:
        expired, _ = make_session(user_id="expired")
        db_session.execute(
            update(SessionCache)
            .where(SessionCache.id == expired.id)
            .values(expires_at=utcnow() - timedelta(minutes=1))
        )
        db_session.commit()

        response = client.post(f"{ADMIN}/cleanup", headers=admin_headers)

        assert response.json() == {"deleted": 1}
