"""
セッションキャッシュのリポジトリ

セッションのライフサイクル（作成・検索・アクティビティ更新・無効化・掃除）を提供する。
- PIIは決定的暗号化して保存し、検索はハッシュで行う
- 「見つからない」はNone、「ストアの失敗」はSessionStoreErrorとして区別する
- プロセス内キャッシュは持たず、毎回DBに問い合わせる
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession
from sqlalchemy.sql.elements import ColumnElement

from ...core.config import get_settings
from ...core.logging import get_logger, mask_identifier
from ...domain.entities import (
    DecryptedUserData,
    SessionInfo,
    SessionLookup,
    SessionProfile,
)
from ...domain.exceptions import (
    DomainError,
    DuplicateTokenError,
    SessionStoreError,
    ValidationError,
)
from ..database.models.base import utcnow
from ..database.models.session_cache import SessionCache
from ..security.encryption import DeterministicCipher, get_cipher, normalize_email
from ..security.tokens import generate_session_uuid

logger = get_logger(__name__)

EXTEND_MAX_ATTEMPTS = 3


class SessionCacheRepository:
    """
    セッションキャッシュのリポジトリ
    """

    def __init__(
        self,
        db: DBSession,
        cipher: Optional[DeterministicCipher] = None,
        grace_hours: Optional[int] = None,
    ) -> None:
        """
        Args:
            db: DBセッション
            cipher: 暗号化インスタンス（Noneの場合はデフォルト取得）
            grace_hours: 無効化済みセッションを掃除するまでの猶予（時間）
        """
        settings = get_settings()
        self.db = db
        # 依存性注入: テスト時は固定キーのインスタンスを渡せる
        self.cipher = cipher if cipher is not None else get_cipher()
        self.grace_hours = (
            grace_hours
            if grace_hours is not None
            else settings.SESSION_CLEANUP_GRACE_HOURS
        )
        self.default_ttl_hours = settings.SESSION_EXPIRE_HOURS

    @contextmanager
    def _store_operation(self, action: str) -> Iterator[None]:
        """SQLAlchemyの例外をSessionStoreErrorに変換し、トランザクションを戻す"""
        try:
            yield
        except DomainError:
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Session store failure during {action}: {e}")
            raise SessionStoreError(details={"action": action}) from e

    @staticmethod
    def _active_criteria(now: datetime) -> list[ColumnElement[bool]]:
        """有効なセッションの条件（3つすべて必須）"""
        return [
            SessionCache.is_signed_in.is_(True),
            SessionCache.is_active.is_(True),
            SessionCache.expires_at > now,
        ]

    def _token_hash(self, session_token: str) -> str:
        return self.cipher.hash_for_search(session_token)

    def _lookup_criteria(
        self, identifier: str, lookup: SessionLookup | str
    ) -> ColumnElement[bool]:
        lookup = SessionLookup(lookup)
        if lookup is SessionLookup.USER_ID:
            return SessionCache.user_id == identifier
        if lookup is SessionLookup.EMAIL:
            return SessionCache.email_hash == self.cipher.hash_for_search(
                normalize_email(identifier)
            )
        if lookup is SessionLookup.SESSION_TOKEN:
            return SessionCache.session_token_hash == self._token_hash(identifier)
        return SessionCache.uuid == identifier

    def _update(self, criteria: list[ColumnElement[bool]], values: dict[str, Any]) -> int:
        result = self.db.execute(
            update(SessionCache)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return int(result.rowcount or 0)

    def _first(self, *criteria: ColumnElement[bool]) -> Optional[SessionCache]:
        return self.db.execute(select(SessionCache).where(*criteria)).scalars().first()

    def create_session(
        self,
        user_id: str,
        email: str,
        session_token: str,
        ttl_hours: Optional[float] = None,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
        profile: Optional[SessionProfile] = None,
    ) -> SessionCache:
        """
        新しいセッションを作成

        Args:
            user_id: ユーザーID
            email: メールアドレス（平文。暗号化とハッシュ化して保存）
            session_token: セッショントークン（平文。暗号化とハッシュ化して保存）
            ttl_hours: 有効期間（時間）、Noneの場合は設定値
            device_info: 端末情報（監査用）
            ip_address: IPアドレス（監査用）
            profile: キャッシュするプロフィール

        Returns:
            作成したセッション

        Raises:
            DuplicateTokenError: 同じセッショントークンが既に存在する場合
            SessionStoreError: DB書き込みに失敗した場合
        """
        if ttl_hours is None:
            ttl_hours = self.default_ttl_hours
        if ttl_hours <= 0:
            raise ValidationError("ttl_hours must be positive")

        profile = profile or SessionProfile()
        now = utcnow()

        session = SessionCache(
            uuid=generate_session_uuid(),
            user_id=user_id,
            email=self.cipher.encrypt(email),
            email_hash=self.cipher.hash_for_search(normalize_email(email)),
            session_token=self.cipher.encrypt(session_token),
            session_token_hash=self._token_hash(session_token),
            full_name=profile.full_name,
            role=profile.role,
            school=profile.school,
            faculty=profile.faculty,
            department=profile.department,
            level=profile.level,
            upid=profile.upid,
            profile_photo=profile.profile_photo,
            gender=profile.gender,
            dob=profile.dob,
            is_verified=profile.is_verified,
            is_signed_in=True,
            is_active=True,
            sign_in_time=now,
            last_activity=now,
            expires_at=now + timedelta(hours=ttl_hours),
            device_info=device_info or "Unknown",
            ip_address=ip_address or "unknown",
            created_at=now,
            updated_at=now,
        )

        if profile.phone:
            session.phone = self.cipher.encrypt(profile.phone)
            session.phone_hash = self.cipher.hash_for_search(profile.phone.strip())
        if profile.reg_number:
            session.reg_number = self.cipher.encrypt(profile.reg_number)
            session.reg_number_hash = self.cipher.hash_for_search(
                profile.reg_number.strip()
            )

        with self._store_operation("create_session"):
            self.db.add(session)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(f"Duplicate session token for user {user_id}")
                raise DuplicateTokenError() from e

        logger.info(
            f"Session created: {mask_identifier(session.uuid)} (user={user_id})"
        )
        return session

    def find_active_session(
        self,
        identifier: str,
        lookup: SessionLookup | str = SessionLookup.USER_ID,
    ) -> Optional[SessionCache]:
        """
        有効なセッションを検索

        複数該当する場合（USER_ID / EMAIL）は最終アクティビティが新しいものを返す。

        Args:
            identifier: 識別子
            lookup: 識別子の種別

        Returns:
            セッション、存在しない場合はNone

        Raises:
            ValueError: 不正な識別子種別
            SessionStoreError: DB読み込みに失敗した場合
        """
        if not identifier:
            return None

        criteria = self._lookup_criteria(identifier, lookup)
        with self._store_operation("find_active_session"):
            session = (
                self.db.execute(
                    select(SessionCache)
                    .where(criteria, *self._active_criteria(utcnow()))
                    .order_by(SessionCache.last_activity.desc())
                    .limit(1)
                )
                .scalars()
                .first()
            )

        if session is None:
            logger.debug(
                f"Active session not found by {SessionLookup(lookup).value}: "
                f"{mask_identifier(identifier)}"
            )
        return session

    def get_raw(self, session_token: str) -> Optional[SessionCache]:
        """
        状態フラグ・期限を無視してセッションを取得（監査・管理用）
        """
        with self._store_operation("get_raw"):
            return self._first(
                SessionCache.session_token_hash == self._token_hash(session_token)
            )

    def get_raw_by_uuid(self, uuid: str) -> Optional[SessionCache]:
        """UUIDで状態を問わずセッションを取得（監査・管理用）"""
        with self._store_operation("get_raw_by_uuid"):
            return self._first(SessionCache.uuid == uuid)

    def _touch(self, criteria: ColumnElement[bool], action: str) -> Optional[SessionCache]:
        now = utcnow()
        with self._store_operation(action):
            updated = self._update(
                [
                    criteria,
                    SessionCache.is_signed_in.is_(True),
                    SessionCache.is_active.is_(True),
                ],
                {"last_activity": now, "updated_at": now},
            )
            if not updated:
                return None
            return self._first(criteria)

    def update_activity(self, session_token: str) -> Optional[SessionCache]:
        """
        最終アクティビティ時刻を更新

        Args:
            session_token: セッショントークン

        Returns:
            更新後のセッション、存在しない・無効な場合はNone
        """
        return self._touch(
            SessionCache.session_token_hash == self._token_hash(session_token),
            "update_activity",
        )

    def update_activity_by_uuid(self, uuid: str) -> Optional[SessionCache]:
        """CookieのsessionIdで最終アクティビティ時刻を更新"""
        return self._touch(SessionCache.uuid == uuid, "update_activity_by_uuid")

    def _invalidate(
        self, criteria: ColumnElement[bool], action: str
    ) -> Optional[SessionCache]:
        now = utcnow()
        with self._store_operation(action):
            # 無効化済みのレコードは更新しない（updated_atを動かさないため）
            self._update(
                [
                    criteria,
                    or_(
                        SessionCache.is_signed_in.is_(True),
                        SessionCache.is_active.is_(True),
                    ),
                ],
                {"is_signed_in": False, "is_active": False, "updated_at": now},
            )
            return self._first(criteria)

    def invalidate_session(self, session_token: str) -> Optional[SessionCache]:
        """
        セッションを無効化（サインアウト）

        何度呼んでも安全。2回目以降は何も変更しない。

        Args:
            session_token: セッショントークン

        Returns:
            無効化後のセッション、存在しない場合はNone
        """
        session = self._invalidate(
            SessionCache.session_token_hash == self._token_hash(session_token),
            "invalidate_session",
        )
        if session is not None:
            logger.info(f"Session invalidated: {mask_identifier(session.uuid)}")
        return session

    def invalidate_session_by_uuid(self, uuid: str) -> Optional[SessionCache]:
        """CookieのsessionIdでセッションを無効化"""
        session = self._invalidate(SessionCache.uuid == uuid, "invalidate_session_by_uuid")
        if session is not None:
            logger.info(f"Session signed out: {mask_identifier(uuid)}")
        return session

    def invalidate_all_user_sessions(self, user_id: str) -> int:
        """
        ユーザーの全セッションを無効化

        Args:
            user_id: ユーザーID

        Returns:
            変更されたセッション数
        """
        now = utcnow()
        with self._store_operation("invalidate_all_user_sessions"):
            count = self._update(
                [
                    SessionCache.user_id == user_id,
                    or_(
                        SessionCache.is_signed_in.is_(True),
                        SessionCache.is_active.is_(True),
                    ),
                ],
                {"is_signed_in": False, "is_active": False, "updated_at": now},
            )
        logger.info(f"Invalidated {count} sessions for user {user_id}")
        return count

    def cleanup_expired_sessions(self) -> int:
        """
        期限切れ・無効化済みセッションを削除

        削除対象:
        - expires_at が現在時刻より前
        - 無効化済み（is_signed_in / is_active ともにFalse）で、
          updated_at が猶予期間（既定24時間）より前

        Returns:
            削除されたセッション数
        """
        now = utcnow()
        grace_cutoff = now - timedelta(hours=self.grace_hours)
        with self._store_operation("cleanup_expired_sessions"):
            result = self.db.execute(
                delete(SessionCache)
                .where(
                    or_(
                        SessionCache.expires_at < now,
                        and_(
                            SessionCache.is_signed_in.is_(False),
                            SessionCache.is_active.is_(False),
                            SessionCache.updated_at < grace_cutoff,
                        ),
                    )
                )
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        count = int(result.rowcount or 0)
        if count > 0:
            logger.info(f"Cleaned up {count} expired sessions")
        return count

    def extend_expiry(
        self, session_token: str, additional_hours: float
    ) -> Optional[datetime]:
        """
        有効期限を延長（現在の expires_at に加算）

        読み取った expires_at を条件にした更新（compare-and-swap）で書き戻すため、
        同時に延長されても片方の延長が失われない。

        Args:
            session_token: セッショントークン
            additional_hours: 延長時間

        Returns:
            新しい有効期限、サインイン中のセッションがない場合はNone

        Raises:
            SessionStoreError: 競合が解消しなかった場合・DB失敗時
        """
        token_criteria = SessionCache.session_token_hash == self._token_hash(
            session_token
        )
        with self._store_operation("extend_expiry"):
            for _ in range(EXTEND_MAX_ATTEMPTS):
                current = self.db.execute(
                    select(SessionCache.expires_at).where(
                        token_criteria, SessionCache.is_signed_in.is_(True)
                    )
                ).scalar_one_or_none()
                if current is None:
                    return None

                new_expiry = current + timedelta(hours=additional_hours)
                now = utcnow()
                updated = self._update(
                    [
                        token_criteria,
                        SessionCache.is_signed_in.is_(True),
                        SessionCache.expires_at == current,
                    ],
                    {
                        "expires_at": new_expiry,
                        "last_activity": now,
                        "updated_at": now,
                    },
                )
                if updated:
                    return new_expiry
                logger.info("Session expiry changed concurrently, retrying extension")

        raise SessionStoreError(
            "Session extension could not be applied",
            details={"action": "extend_expiry"},
        )

    def count_active(self) -> int:
        """有効なセッション数"""
        with self._store_operation("count_active"):
            return int(
                self.db.execute(
                    select(func.count(SessionCache.id)).where(
                        *self._active_criteria(utcnow())
                    )
                ).scalar_one()
            )

    def count_inactive(self) -> int:
        """期限切れ・無効化済みのセッション数"""
        now = utcnow()
        with self._store_operation("count_inactive"):
            return int(
                self.db.execute(
                    select(func.count(SessionCache.id)).where(
                        or_(
                            SessionCache.is_signed_in.is_(False),
                            SessionCache.is_active.is_(False),
                            SessionCache.expires_at <= now,
                        )
                    )
                ).scalar_one()
            )

    def count_active_users(self) -> int:
        """有効なセッションを持つユーザー数"""
        with self._store_operation("count_active_users"):
            return int(
                self.db.execute(
                    select(func.count(func.distinct(SessionCache.user_id))).where(
                        *self._active_criteria(utcnow())
                    )
                ).scalar_one()
            )

    def count_expiring_within(self, hours: float) -> int:
        """指定時間以内に期限を迎える有効なセッション数"""
        now = utcnow()
        with self._store_operation("count_expiring_within"):
            return int(
                self.db.execute(
                    select(func.count(SessionCache.id)).where(
                        *self._active_criteria(now),
                        SessionCache.expires_at < now + timedelta(hours=hours),
                    )
                ).scalar_one()
            )

    def list_active_for_user(self, user_id: str) -> list[SessionCache]:
        """ユーザーの有効なセッション（サインインが新しい順）"""
        with self._store_operation("list_active_for_user"):
            return list(
                self.db.execute(
                    select(SessionCache)
                    .where(
                        SessionCache.user_id == user_id,
                        *self._active_criteria(utcnow()),
                    )
                    .order_by(SessionCache.sign_in_time.desc())
                ).scalars()
            )

    def list_idle_since(self, cutoff: datetime) -> list[SessionCache]:
        """最終アクティビティが cutoff より前の有効なセッション"""
        with self._store_operation("list_idle_since"):
            return list(
                self.db.execute(
                    select(SessionCache)
                    .where(
                        *self._active_criteria(utcnow()),
                        SessionCache.last_activity < cutoff,
                    )
                    .order_by(SessionCache.last_activity.asc())
                ).scalars()
            )

    def decrypt_email(self, session: SessionCache) -> str:
        """
        セッションのメールアドレスを復号

        Raises:
            DecryptionError: 復号に失敗した場合
        """
        return self.cipher.decrypt(session.email)

    def decrypt_user_data(self, session: SessionCache) -> DecryptedUserData:
        """
        セッションの暗号化項目をすべて復号してまとめる

        Raises:
            DecryptionError: 復号に失敗した場合
        """
        profile = SessionProfile(
            role=session.role,
            full_name=session.full_name,
            school=session.school,
            faculty=session.faculty,
            department=session.department,
            level=session.level,
            upid=session.upid,
            profile_photo=session.profile_photo,
            gender=session.gender,
            dob=session.dob,
            phone=self.cipher.decrypt(session.phone) if session.phone else None,
            reg_number=(
                self.cipher.decrypt(session.reg_number) if session.reg_number else None
            ),
            is_verified=session.is_verified,
        )
        return DecryptedUserData(
            user_id=session.user_id,
            uuid=session.uuid,
            email=self.decrypt_email(session),
            profile=profile,
            session_info=SessionInfo(
                is_active=session.is_active,
                is_signed_in=session.is_signed_in,
                sign_in_time=session.sign_in_time,
                last_activity=session.last_activity,
                expires_at=session.expires_at,
                device_info=session.device_info,
                ip_address=session.ip_address,
            ),
        )
