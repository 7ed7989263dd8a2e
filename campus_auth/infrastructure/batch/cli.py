"""セッション管理CLI"""

from collections.abc import Iterator
from contextlib import contextmanager

import click

from campus_auth.core.logging import get_logger, mask_identifier
from campus_auth.domain.exceptions import DomainError
from campus_auth.infrastructure.batch.tasks.session_cleanup import SessionCleanupTask
from campus_auth.infrastructure.database.connection import get_session_factory
from campus_auth.infrastructure.repositories.session_repository import (
    SessionCacheRepository,
)
from campus_auth.infrastructure.services.session_manager import SessionManager

logger = get_logger(__name__)


@contextmanager
def session_manager() -> Iterator[SessionManager]:
    """CLI用のSessionManagerを生成する（DB設定がない場合は中断）"""
    try:
        factory = get_session_factory()
    except RuntimeError as e:
        click.echo(f"✗ {e}", err=True)
        raise click.Abort()

    with factory() as db:
        try:
            yield SessionManager(SessionCacheRepository(db))
        except DomainError as e:
            click.echo(f"✗ {e.code}: {e.message}", err=True)
            raise click.Abort()


@click.group()
def cli() -> None:
    """セッションキャッシュ管理CLI"""


@cli.command("cleanup")
def cleanup() -> None:
    """期限切れ・無効化済みセッションを即座に削除する"""
    task = SessionCleanupTask()
    try:
        task.run()
    except (DomainError, RuntimeError) as e:
        click.echo(f"✗ Cleanup failed: {e}", err=True)
        raise click.Abort()
    click.echo(f"✓ Removed {task.deleted} sessions")


@cli.command("stats")
def stats() -> None:
    """セッション統計を表示する"""
    with session_manager() as manager:
        result = manager.get_session_stats()

    click.echo(f"Active sessions:         {result.total_active_sessions}")
    click.echo(f"Expired/invalidated:     {result.total_expired_sessions}")
    click.echo(f"Active users:            {result.active_users_count}")
    click.echo(f"Expiring within 24h:     {result.sessions_expiring_soon}")


@cli.command("logout-user")
@click.argument("user_id")
@click.option("--yes", "-y", is_flag=True, help="確認をスキップ")
def logout_user(user_id: str, yes: bool) -> None:
    """
    ユーザーの全セッションを無効化する。

    USER_ID: 対象のユーザーID
    """
    if not yes:
        click.confirm(
            f"All sessions of user '{user_id}' will be signed out. Continue?",
            abort=True,
        )

    with session_manager() as manager:
        count = manager.force_logout_user(user_id)
    click.echo(f"✓ Invalidated {count} sessions")


@cli.command("inactive")
@click.option(
    "--minutes",
    default=30,
    show_default=True,
    type=click.IntRange(min=1),
    help="非アクティブとみなすまでの分数",
)
def inactive(minutes: int) -> None:
    """一定時間アクティビティのない有効なセッションを一覧表示する"""
    with session_manager() as manager:
        sessions = manager.get_inactive_sessions(threshold_minutes=minutes)

    if not sessions:
        click.echo(f"No sessions idle for more than {minutes} minutes")
        return

    click.echo(f"Sessions idle for more than {minutes} minutes:")
    for s in sessions:
        click.echo(
            f"  - {mask_identifier(s.uuid)} user={s.user_id} "
            f"last_activity={s.last_activity:%Y-%m-%d %H:%M:%S} "
            f"expires_at={s.expires_at:%Y-%m-%d %H:%M:%S}"
        )


if __name__ == "__main__":
    cli()
