"""アプリケーションライフサイクル管理"""

import contextlib
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI

from campus_auth.core.config import get_settings
from campus_auth.core.logging import get_logger

logger = get_logger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    アプリケーションのライフサイクル管理

    起動時:
    - 起動時刻の記録
    - データベースマイグレーション
    - セッション掃除タスクの登録
    - スケジューラー起動

    シャットダウン時:
    - スケジューラー停止
    - 接続プールの破棄

    Args:
        app: FastAPIアプリケーションインスタンス

    Yields:
        None
    """
    settings = get_settings()

    # 起動時刻を記録（healthcheckのuptime計算用）
    app.state.start_time = datetime.now(timezone.utc)

    # マイグレーション
    if settings.has_database:
        from campus_auth.infrastructure.database.migration import run_migrations

        run_migrations(logger_key="uvicorn")
    else:
        logger.info("Database migrations are disabled")

    from campus_auth.infrastructure.batch.scheduler import (
        create_scheduler,
        start_scheduler,
        stop_scheduler,
    )
    from campus_auth.infrastructure.batch.tasks import register_session_cleanup

    register_session_cleanup()

    scheduler = create_scheduler()
    app.state.scheduler = scheduler
    start_scheduler(scheduler)

    yield

    # シャットダウン
    stop_scheduler(scheduler)

    from campus_auth.infrastructure.database import dispose_engine

    dispose_engine()
