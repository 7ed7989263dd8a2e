"""
セッション管理ファサード

管理画面・バッチ・CLIから使う集計と強制操作をまとめる。
"""

from datetime import datetime, timedelta
from typing import Optional

from ...core.logging import get_logger
from ...domain.entities import SessionLookup, SessionStats
from ..database.models.base import utcnow
from ..database.models.session_cache import SessionCache
from ..repositories.session_repository import SessionCacheRepository

logger = get_logger(__name__)

EXPIRING_SOON_HOURS = 24


class SessionManager:
    """
    セッション管理ファサード
    """

    def __init__(self, repository: SessionCacheRepository) -> None:
        self.repository = repository

    def get_session_stats(self) -> SessionStats:
        """
        セッション統計を取得

        sessions_expiring_soon は24時間以内に期限を迎える有効なセッション数。
        """
        return SessionStats(
            total_active_sessions=self.repository.count_active(),
            total_expired_sessions=self.repository.count_inactive(),
            active_users_count=self.repository.count_active_users(),
            sessions_expiring_soon=self.repository.count_expiring_within(
                EXPIRING_SOON_HOURS
            ),
        )

    def get_active_sessions_count(self) -> int:
        return self.repository.count_active()

    def get_user_active_sessions(self, user_id: str) -> list[SessionCache]:
        """ユーザーの有効なセッション一覧"""
        return self.repository.list_active_for_user(user_id)

    def is_user_online(self, user_id: str) -> bool:
        return (
            self.repository.find_active_session(user_id, SessionLookup.USER_ID)
            is not None
        )

    def force_logout_user(self, user_id: str) -> int:
        """
        ユーザーの全セッションを強制ログアウト

        Returns:
            無効化されたセッション数
        """
        count = self.repository.invalidate_all_user_sessions(user_id)
        logger.info(f"Force logout for user {user_id}: {count} sessions")
        return count

    def force_logout_session(self, session_token: str) -> bool:
        """
        指定セッションを強制ログアウト

        Returns:
            セッションが存在した場合True
        """
        return self.repository.invalidate_session(session_token) is not None

    def extend_session(
        self, session_token: str, additional_hours: float = 24
    ) -> Optional[datetime]:
        """
        セッションの有効期限を延長

        延長は保存済みの expires_at に加算される（2回延長すれば2回分）。
        最終アクティビティも現在時刻に更新する。

        Returns:
            新しい有効期限、サインイン中のセッションがない場合はNone
        """
        new_expiry = self.repository.extend_expiry(session_token, additional_hours)
        if new_expiry is not None:
            logger.info(f"Session extended by {additional_hours}h until {new_expiry}")
        return new_expiry

    def get_inactive_sessions(self, threshold_minutes: int = 30) -> list[SessionCache]:
        """
        一定時間アクティビティのない有効なセッション

        Args:
            threshold_minutes: 非アクティブとみなすまでの分数
        """
        cutoff = utcnow() - timedelta(minutes=threshold_minutes)
        return self.repository.list_idle_since(cutoff)

    def update_session_activity(self, session_token: str) -> bool:
        return self.repository.update_activity(session_token) is not None

    def cleanup_expired_sessions(self) -> int:
        return self.repository.cleanup_expired_sessions()
