from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from campus_auth.core.config import get_settings
from campus_auth.core.logging import get_logger
from campus_auth.infrastructure.batch.tasks.session_cleanup import SessionCleanupTask
from campus_auth.infrastructure.database import get_session_factory
from campus_auth.presentation.schemas.system import SessionStoreStatus, HealthCheckResponse

router = APIRouter()
logger = get_logger(__name__)


def check_session_store() -> SessionStoreStatus:
    """
    セッションストア（DB）の疎通確認

    DBが設定されていない場合は無効として扱い、unhealthyにはしない。
    """
    settings = get_settings()
    if not settings.has_database:
        return SessionStoreStatus(
            status="healthy", connection=False, error="Database disabled"
        )

    try:
        with get_session_factory()() as db:
            # 軽量なDB接続テスト
            db.execute(text("SELECT 1"))
    except (SQLAlchemyError, RuntimeError) as e:
        logger.error(f"Session store health check failed: {e}", exc_info=True)
        return SessionStoreStatus(status="unhealthy", connection=False, error=str(e))

    return SessionStoreStatus(status="healthy", connection=True, error=None)


@router.get("/", response_model=HealthCheckResponse)
def healthcheck(request: Request, response: Response) -> HealthCheckResponse:
    """
    ヘルスチェックエンドポイント

    - セッションストアの接続状況
    - アプリケーションuptime
    - 環境情報を返す

    セッションストアに接続できない場合は503 Service Unavailableを返す
    """
    start_time = getattr(request.app.state, "start_time", None)
    uptime_seconds = 0.0
    if start_time:
        uptime_seconds = (datetime.now(timezone.utc) - start_time).total_seconds()

    db_status = check_session_store()
    scheduler = getattr(request.app.state, "scheduler", None)
    cleanup_scheduled = bool(
        scheduler is not None and scheduler.get_job(SessionCleanupTask.name)
    )
    overall_status = "ok" if db_status.status == "healthy" else "unhealthy"

    if overall_status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthCheckResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=uptime_seconds,
        database=db_status,
        cleanup_scheduled=cleanup_scheduled,
        environment=get_settings().normalized_env_mode,
    )
