from typing import Any, Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from campus_auth.core.config import get_settings
from campus_auth.core.logging import get_logger

logger = get_logger(__name__)

# プロセス全体で共有する接続プール（初回利用時に生成）
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


def _build_engine() -> Engine:
    settings = get_settings()
    if not settings.has_database:
        raise RuntimeError(
            "Database not configured. Set POSTGRES_* environment variables."
        )

    connect_args: dict[str, Any] = {}
    if settings.DB_STATEMENT_TIMEOUT_MS > 0:
        # タイムアウトしたクエリはOperationalErrorとして呼び出し元に伝播する
        connect_args["options"] = (
            f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
        )

    engine = create_engine(
        settings.database_uri,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=3600,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    logger.info("Database engine created")

    if settings.is_supabase:
        logger.info("Using Supabase as database provider")

    return engine


def get_engine() -> Engine:
    """
    SQLAlchemy Engineを取得（初回呼び出し時に生成）

    Raises:
        RuntimeError: データベースが設定されていない場合
    """
    global _engine
    if _engine is None:
        _engine = _build_engine()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """DBセッションファクトリを取得（初回呼び出し時に生成）"""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=get_engine()
        )
    return _session_factory


def dispose_engine() -> None:
    """接続プールを破棄する（シャットダウン時）"""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None


def get_db() -> Generator[Session, None, None]:
    """
    DB接続のためのデペンデンシー
    yield構文でセッションをコンテキストマネージャとして提供
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
