from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, utcnow


class SessionCache(BaseModel):
    """
    セッションキャッシュモデル

    1レコード = 1ログイン。PIIは暗号文とハッシュのペアで保存し、平文は持たない。

    有効なセッションの条件は次の3つすべてを満たすこと:
        is_signed_in == True / is_active == True / expires_at > 現在時刻

    Attributes:
        uuid: CookieのsessionIdに載せる識別子（一意）
        user_id: ユーザーID（外部のユーザーストアの参照）
        email: 暗号化されたメールアドレス
        email_hash: メールアドレスの検索用ハッシュ
        session_token: 暗号化されたセッショントークン
        session_token_hash: セッショントークンの検索用ハッシュ（一意）
        is_signed_in: サインイン状態
        is_active: 管理上の有効フラグ（期限とは独立）
        sign_in_time / last_activity / expires_at: ライフサイクル時刻
        device_info / ip_address: 監査用（認可判定には使わない）
    """

    __tablename__ = "session_cache"

    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    email: Mapped[str] = mapped_column(Text, nullable=False)
    email_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    session_token: Mapped[str] = mapped_column(Text, nullable=False)
    session_token_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True
    )
    phone: Mapped[Optional[str]] = mapped_column(Text)
    phone_hash: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    reg_number: Mapped[Optional[str]] = mapped_column(Text)
    reg_number_hash: Mapped[Optional[str]] = mapped_column(String(64), index=True)

    # プロフィールのキャッシュ
    full_name: Mapped[Optional[str]] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="student")
    school: Mapped[Optional[str]] = mapped_column(String(255))
    faculty: Mapped[Optional[str]] = mapped_column(String(255))
    department: Mapped[Optional[str]] = mapped_column(String(255))
    level: Mapped[Optional[str]] = mapped_column(String(32))
    upid: Mapped[Optional[str]] = mapped_column(String(64))
    profile_photo: Mapped[Optional[str]] = mapped_column(Text)
    gender: Mapped[Optional[str]] = mapped_column(String(16))
    dob: Mapped[Optional[date]] = mapped_column(Date)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_signed_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sign_in_time: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    last_activity: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    device_info: Mapped[Optional[str]] = mapped_column(String(512))
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))

    __table_args__ = (
        Index("ix_session_cache_user_signed_in", "user_id", "is_signed_in"),
        Index("ix_session_cache_email_signed_in", "email_hash", "is_signed_in"),
        Index("ix_session_cache_expires_active", "expires_at", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<SessionCache(uuid={self.uuid}, user_id={self.user_id}, "
            f"expires_at={self.expires_at})>"
        )
