"""バッチタスクの登録レジストリ"""

from collections.abc import Callable
from typing import TypedDict

from apscheduler.triggers.cron import CronTrigger


class TaskInfo(TypedDict):
    """タスク情報の型定義"""

    func: Callable[[], None]
    trigger: CronTrigger
    description: str


class TaskRegistry:
    """
    バッチタスクの登録レジストリ。

    タスクをスケジュール情報とともに登録し、
    スケジューラーが参照できるように管理する。
    同じIDで登録し直した場合は上書きされる。

    Example:
        >>> task_registry.register(
        ...     task_id="session_cleanup",
        ...     func=run_session_cleanup,
        ...     cron="*/15 * * * *",
        ...     description="Expired session cleanup",
        ... )
    """

    def __init__(self) -> None:
        self.tasks: dict[str, TaskInfo] = {}

    def register(
        self, task_id: str, func: Callable[[], None], cron: str, description: str = ""
    ) -> None:
        """
        タスクを登録する。

        Args:
            task_id: タスクの一意な識別子
            func: 実行する関数
            cron: cron形式のスケジュール (例: "*/15 * * * *" = 15分ごと)
            description: タスクの説明（ログ出力用）

        Raises:
            ValueError: 無効なcron形式の場合
        """
        self.tasks[task_id] = {
            "func": func,
            "trigger": CronTrigger.from_crontab(cron, timezone="UTC"),
            "description": description,
        }

    def unregister(self, task_id: str) -> bool:
        """登録を解除する。存在しない場合はFalse。"""
        return self.tasks.pop(task_id, None) is not None

    def get_all(self) -> dict[str, TaskInfo]:
        """
        登録された全タスクを取得する。

        Returns:
            dict: タスクID をキーとした辞書。
        """
        return self.tasks


# グローバルレジストリインスタンス
task_registry = TaskRegistry()
