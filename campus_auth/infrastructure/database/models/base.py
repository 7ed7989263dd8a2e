from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


def utcnow() -> datetime:
    """
    現在時刻（UTC、tzinfoなし）

    PostgreSQL / SQLite のどちらでも比較結果が変わらないよう、
    DBにはtzinfoなしのUTCで保存する。
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimeStampMixin:
    """
    タイムスタンプMixin

    updated_atはセッション掃除の猶予期間判定に使うため、
    アプリ側の時計（utcnow）で埋める。
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )


class BaseModel(Base, TimeStampMixin):
    """
    ベースモデル
    全てのモデルで継承して使用
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
