"""
データベースマイグレーション実行モジュール

アプリケーション起動時・CLIからAlembicマイグレーションを
プログラム的に実行する。
"""

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config

from campus_auth.core.config import Settings, get_settings
from campus_auth.core.logging import get_logger

SCRIPT_LOCATION = (Path(__file__).parent / "alembic").resolve()


def _configure_migration_logging(settings: Settings) -> None:
    """
    Alembic/SQLAlchemyのロガーをuvicornロガーのハンドラに寄せる

    ステージング環境ではSQL文まで出力する。
    """
    uvicorn_logger = logging.getLogger("uvicorn")
    verbose = settings.is_staging or settings.is_local

    for name, verbose_level, quiet_level in (
        ("alembic", logging.DEBUG, logging.INFO),
        ("sqlalchemy.engine", logging.INFO, logging.WARNING),
    ):
        target = logging.getLogger(name)
        for handler in uvicorn_logger.handlers:
            target.addHandler(handler)
        target.setLevel(verbose_level if verbose else quiet_level)


def create_alembic_config(database_url: str) -> Config:
    """
    Alembic設定オブジェクトを作成する

    Args:
        database_url: 接続先のURL

    Returns:
        Config: Alembic設定オブジェクト
    """
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(SCRIPT_LOCATION))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    return alembic_cfg


def run_migrations(
    logger_key: Optional[str] = None, database_url: Optional[str] = None
) -> None:
    """
    データベースマイグレーションを実行（head まで）

    失敗した場合は例外を送出し、アプリケーション起動を停止する。

    Args:
        logger_key: 使用するロガー名
        database_url: 接続先（Noneの場合は設定値）

    Raises:
        RuntimeError: マイグレーション実行に失敗した場合
    """
    logger = get_logger(logger_key or __name__)
    try:
        settings = get_settings()
        _configure_migration_logging(settings)

        alembic_cfg = create_alembic_config(database_url or settings.database_uri)

        logger.info("Starting session store migrations...")
        logger.info(f"Script location: {SCRIPT_LOCATION}")
        logger.info(
            f"Database: {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}/{settings.POSTGRES_DB}"
        )

        command.upgrade(alembic_cfg, "head")

        logger.info("Session store migrations completed successfully")

    except Exception as e:
        logger.error(f"Database migration failed: {e}", exc_info=True)
        raise RuntimeError(f"Database migration failed: {e}") from e
