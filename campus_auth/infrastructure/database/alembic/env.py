"""
Alembic環境設定

プログラム的実行（起動時のrun_migrations）とCLI実行の両方をサポートする。
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from campus_auth.core.config import get_settings
from campus_auth.infrastructure.database.models.base import Base

# 全てのモデルをインポート（autogenerateで検出させるため）
from campus_auth.infrastructure.database.models.session_cache import (  # noqa: F401
    SessionCache,
)

VERSION_TABLE = "campus_auth_alembic_version"

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """
    データベースURLを取得

    プログラム的実行時は set_main_option で設定された値、
    CLI実行時は環境変数から構築した値を使う
    """
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    return get_settings().database_uri


def run_migrations_offline() -> None:
    """'offline' モード（SQLスクリプト生成のみ）"""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        version_table=VERSION_TABLE,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """'online' モード（DBに接続して実行）"""
    connectable = config.attributes.get("connection", None)

    if connectable is None:
        configuration = config.get_section(config.config_ini_section) or {}
        configuration["sqlalchemy.url"] = get_url()
        connectable = engine_from_config(
            configuration,
            prefix="sqlalchemy.",
            poolclass=pool.NullPool,
        )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            version_table=VERSION_TABLE,
            compare_type=True,
            # SQLiteはALTER TABLEの制約が強いのでバッチモードで実行
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
