"""期限切れセッションの掃除タスク"""

from typing import Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from campus_auth.core.config import get_settings
from campus_auth.core.logging import get_logger
from campus_auth.infrastructure.batch.base import BatchTask
from campus_auth.infrastructure.batch.registry import TaskRegistry, task_registry
from campus_auth.infrastructure.database.connection import get_session_factory
from campus_auth.infrastructure.repositories.session_repository import (
    SessionCacheRepository,
)

logger = get_logger(__name__)


class SessionCleanupTask(BatchTask):
    """
    期限切れ・無効化済みセッションを削除するタスク。

    有効期限を過ぎたセッションと、無効化から猶予期間
    （SESSION_CLEANUP_GRACE_HOURS）を過ぎたセッションが対象。
    """

    name = "session_cleanup"

    def __init__(
        self,
        session_factory: Optional[Callable[[], sessionmaker[Session]]] = None,
    ) -> None:
        super().__init__()
        self._session_factory = session_factory or get_session_factory
        self.deleted = 0

    def execute(self) -> None:
        with self._session_factory()() as db:
            self.deleted = SessionCacheRepository(db).cleanup_expired_sessions()

    def on_success(self) -> None:
        self.logger.info(f"[BATCH] {self.task_name} removed {self.deleted} sessions")


def run_session_cleanup() -> None:
    """
    掃除タスクを実行する。

    スケジューラーから呼び出される。
    """
    SessionCleanupTask().run()


def register_session_cleanup(registry: TaskRegistry = task_registry) -> bool:
    """
    掃除タスクをレジストリに登録する。

    DBが未設定、またはスケジュールが空の場合は登録しない。

    Returns:
        登録した場合True
    """
    settings = get_settings()
    if not settings.has_database:
        logger.info("Session cleanup disabled: database not configured")
        return False
    if not settings.SESSION_CLEANUP_SCHEDULE:
        logger.info("Session cleanup disabled: SESSION_CLEANUP_SCHEDULE is empty")
        return False

    registry.register(
        task_id=SessionCleanupTask.name,
        func=run_session_cleanup,
        cron=settings.SESSION_CLEANUP_SCHEDULE,
        description="Expired session cleanup",
    )
    return True
