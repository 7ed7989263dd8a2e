"""
スケジューラー管理の単体テスト
"""

from datetime import datetime
from unittest.mock import Mock, patch

from apscheduler.triggers.cron import CronTrigger

from campus_auth.infrastructure.batch.registry import TaskRegistry
from campus_auth.infrastructure.batch.scheduler import (
    create_scheduler,
    start_scheduler,
    stop_scheduler,
)


def _registry_with_task(func: Mock, description: str = "Test task") -> Mock:
    registry = Mock(spec=TaskRegistry)
    registry.get_all.return_value = {
        "test_task": {
            "func": func,
            "trigger": CronTrigger.from_crontab("0 3 * * *"),
            "description": description,
        }
    }
    return registry


class TestCreateScheduler:
    """create_scheduler()のテスト"""

    @patch("campus_auth.infrastructure.batch.scheduler.BackgroundScheduler")
    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_create_scheduler_returns_scheduler_instance(
        self,
        mock_logger: Mock,
        mock_scheduler_class: Mock,
    ) -> None:
        """UTCのBackgroundSchedulerインスタンスを返すこと"""
        registry = Mock(spec=TaskRegistry)
        registry.get_all.return_value = {}

        mock_scheduler = Mock()
        mock_scheduler_class.return_value = mock_scheduler

        result = create_scheduler(registry)

        assert result == mock_scheduler
        mock_scheduler_class.assert_called_once_with(timezone="UTC")

    @patch("campus_auth.infrastructure.batch.scheduler.BackgroundScheduler")
    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_create_scheduler_registers_tasks(
        self,
        mock_logger: Mock,
        mock_scheduler_class: Mock,
    ) -> None:
        """タスクが重複実行なしの設定で登録されること"""
        test_func = Mock()
        registry = _registry_with_task(test_func)
        test_trigger = registry.get_all.return_value["test_task"]["trigger"]

        mock_scheduler = Mock()
        mock_scheduler_class.return_value = mock_scheduler

        create_scheduler(registry)

        mock_scheduler.add_job.assert_called_once()
        call_args = mock_scheduler.add_job.call_args
        # funcは位置引数、その他はキーワード引数
        assert call_args[0][0] == test_func
        assert call_args[1]["trigger"] == test_trigger
        assert call_args[1]["id"] == "test_task"
        assert call_args[1]["name"] == "Test task"
        assert call_args[1]["max_instances"] == 1
        assert call_args[1]["coalesce"] is True

    @patch("campus_auth.infrastructure.batch.scheduler.BackgroundScheduler")
    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_job_name_falls_back_to_task_id(
        self,
        mock_logger: Mock,
        mock_scheduler_class: Mock,
    ) -> None:
        registry = _registry_with_task(Mock(), description="")
        mock_scheduler = Mock()
        mock_scheduler_class.return_value = mock_scheduler

        create_scheduler(registry)

        assert mock_scheduler.add_job.call_args[1]["name"] == "test_task"

    @patch("campus_auth.infrastructure.batch.scheduler.BackgroundScheduler")
    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_create_scheduler_logs_task_registration(
        self,
        mock_logger: Mock,
        mock_scheduler_class: Mock,
    ) -> None:
        """タスク登録ログが出力されること"""
        registry = _registry_with_task(Mock())
        mock_scheduler_class.return_value = Mock()

        create_scheduler(registry)

        calls = [str(call) for call in mock_logger.info.call_args_list]
        assert any("Registered task: test_task" in call for call in calls)

    def test_real_scheduler_holds_registered_job(self) -> None:
        """実際のBackgroundSchedulerにジョブが入ること（起動はしない）"""
        registry = TaskRegistry()
        registry.register(task_id="cleanup", func=lambda: None, cron="*/15 * * * *")

        scheduler = create_scheduler(registry)

        assert scheduler.get_job("cleanup") is not None
        assert scheduler.running is False

    @patch("campus_auth.infrastructure.batch.scheduler.BackgroundScheduler")
    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_create_scheduler_with_no_tasks(
        self,
        mock_logger: Mock,
        mock_scheduler_class: Mock,
    ) -> None:
        """タスクが0個の場合でもスケジューラーを返すこと"""
        registry = Mock(spec=TaskRegistry)
        registry.get_all.return_value = {}

        mock_scheduler = Mock()
        mock_scheduler_class.return_value = mock_scheduler

        result = create_scheduler(registry)

        assert result == mock_scheduler
        mock_scheduler.add_job.assert_not_called()


class TestStartScheduler:
    """start_scheduler()のテスト"""

    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_start_scheduler_starts_scheduler(self, mock_logger: Mock) -> None:
        """scheduler.start()が呼ばれること"""
        mock_scheduler = Mock()
        mock_scheduler.get_jobs.return_value = []

        start_scheduler(mock_scheduler)

        mock_scheduler.start.assert_called_once()

    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_start_scheduler_logs_startup(self, mock_logger: Mock) -> None:
        """起動ログが出力されること"""
        mock_scheduler = Mock()
        mock_scheduler.get_jobs.return_value = []

        start_scheduler(mock_scheduler)

        calls = [str(call) for call in mock_logger.info.call_args_list]
        assert any("[SCHEDULER] Started" in call for call in calls)

    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_start_scheduler_logs_next_run_times(self, mock_logger: Mock) -> None:
        """各ジョブの次回実行時刻がログに出力されること"""
        mock_job = Mock()
        mock_job.id = "test_job"
        mock_job.next_run_time = datetime(2025, 1, 1, 3, 0, 0)

        mock_scheduler = Mock()
        mock_scheduler.get_jobs.return_value = [mock_job]

        start_scheduler(mock_scheduler)

        calls = [str(call) for call in mock_logger.info.call_args_list]
        assert any("test_job next run:" in call for call in calls)


class TestStopScheduler:
    """stop_scheduler()のテスト"""

    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_stop_scheduler_shuts_down_scheduler(self, mock_logger: Mock) -> None:
        """実行中のジョブを待たずにshutdown()が呼ばれること"""
        mock_scheduler = Mock()
        mock_scheduler.running = True

        stop_scheduler(mock_scheduler)

        mock_scheduler.shutdown.assert_called_once_with(wait=False)

    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_stop_scheduler_logs_shutdown(self, mock_logger: Mock) -> None:
        """停止ログが出力されること"""
        mock_scheduler = Mock()
        mock_scheduler.running = True

        stop_scheduler(mock_scheduler)

        calls = [str(call) for call in mock_logger.info.call_args_list]
        assert any("[SCHEDULER] Stopped" in call for call in calls)

    @patch("campus_auth.infrastructure.batch.scheduler.logger")
    def test_stop_scheduler_not_running(self, mock_logger: Mock) -> None:
        """起動していないスケジューラーは何もしないこと"""
        mock_scheduler = Mock()
        mock_scheduler.running = False

        stop_scheduler(mock_scheduler)

        mock_scheduler.shutdown.assert_not_called()
