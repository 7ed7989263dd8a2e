"""バッチスケジューラー管理"""

from apscheduler.schedulers.background import BackgroundScheduler

from campus_auth.core.logging import get_logger

from .registry import TaskRegistry, task_registry

logger = get_logger(__name__)


def create_scheduler(registry: TaskRegistry = task_registry) -> BackgroundScheduler:
    """
    スケジューラーを作成し、登録されたタスクをセットアップする。

    同じタスクの実行が重ならないよう、max_instances=1 / coalesce=True で登録する。

    Args:
        registry: タスクレジストリ

    Returns:
        BackgroundScheduler: タスクが登録されたスケジューラー
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    for task_id, task_info in registry.get_all().items():
        scheduler.add_job(
            task_info["func"],
            trigger=task_info["trigger"],
            id=task_id,
            name=task_info["description"] or task_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info(f"[SCHEDULER] Registered task: {task_id}")

    return scheduler


def start_scheduler(scheduler: BackgroundScheduler) -> None:
    """
    スケジューラーを起動し、次回実行時刻をログに出力する。

    Args:
        scheduler: 起動するスケジューラー
    """
    scheduler.start()
    logger.info("[SCHEDULER] Started")

    # 次回実行時刻をログ出力
    for job in scheduler.get_jobs():
        logger.info(f"[SCHEDULER] {job.id} next run: {job.next_run_time}")


def stop_scheduler(scheduler: BackgroundScheduler) -> None:
    """
    スケジューラーを停止する（実行中のジョブは待たない）。

    Args:
        scheduler: 停止するスケジューラー
    """
    if not scheduler.running:
        return
    scheduler.shutdown(wait=False)
    logger.info("[SCHEDULER] Stopped")
