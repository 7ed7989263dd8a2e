"""バッチ処理フレームワーク"""

from .base import BatchTask
from .registry import TaskRegistry, task_registry
from .scheduler import create_scheduler, start_scheduler, stop_scheduler

__all__ = [
    "BatchTask",
    "TaskRegistry",
    "task_registry",
    "create_scheduler",
    "start_scheduler",
    "stop_scheduler",
]
