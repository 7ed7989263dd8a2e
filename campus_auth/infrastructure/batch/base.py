"""バッチタスクの基底クラス"""

import time
from abc import ABC, abstractmethod
from typing import ClassVar

import sentry_sdk

from campus_auth.core.logging import get_logger


class BatchTask(ABC):
    """
    バッチタスクの基底クラス。

    すべてのバッチタスクはこのクラスを継承し、
    execute()メソッドを実装する必要がある。
    name はスケジューラーのジョブIDとしても使われる。

    Example:
        >>> class MyTask(BatchTask):
        ...     name = "my_task"
        ...
        ...     def execute(self) -> None:
        ...         print("Task executed")
        ...
        >>> MyTask().run()
    """

    name: ClassVar[str] = ""

    def __init__(self) -> None:
        self.logger = get_logger(self.__class__.__module__)

    @property
    def task_name(self) -> str:
        return self.name or self.__class__.__name__

    @abstractmethod
    def execute(self) -> None:
        """
        タスクの実行処理。サブクラスで実装必須。
        """

    def on_success(self) -> None:
        """タスク成功時のフック"""

    def on_failure(self, error: Exception) -> None:
        """
        タスク失敗時のフック。

        デフォルトではエラーログを出力する。

        Args:
            error: 発生した例外
        """
        self.logger.error(f"[BATCH] {self.task_name} failed: {error}", exc_info=True)

    def run(self) -> None:
        """
        タスク実行のラッパー。

        - 実行開始/終了のログ出力
        - 実行時間の計測
        - Sentryへのエラー送信
        - 成功/失敗フックの呼び出し

        Raises:
            Exception: execute()で発生した例外を再送出
        """
        started = time.monotonic()
        try:
            self.logger.info(f"[BATCH] {self.task_name} start")
            self.execute()
            self.on_success()
            elapsed = time.monotonic() - started
            self.logger.info(f"[BATCH] {self.task_name} completed ({elapsed:.3f}s)")
        except Exception as e:
            self.on_failure(e)
            sentry_sdk.capture_exception(e)
            raise
