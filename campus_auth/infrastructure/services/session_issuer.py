"""
セッションの発行

認証済み（パスワード・OTP検証済み）のユーザーに対して
サーバー側セッションとアクセストークン(JWT)を発行する。
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ...core.config import get_settings
from ...core.logging import get_logger, mask_identifier
from ...domain.entities import SessionProfile
from ...domain.exceptions import DuplicateTokenError
from ..database.models.session_cache import SessionCache
from ..repositories.session_repository import SessionCacheRepository
from ..security.tokens import create_access_token, generate_session_token

logger = get_logger(__name__)


@dataclass
class IssuedSession:
    """発行結果"""

    session: SessionCache
    session_token: str
    access_token: str
    expires_at: datetime
    ttl_hours: float

    @property
    def max_age_seconds(self) -> int:
        return int(self.ttl_hours * 3600)


class SessionIssuer:
    def __init__(
        self,
        repository: SessionCacheRepository,
        ttl_hours: Optional[float] = None,
        jwt_secret: Optional[str] = None,
    ) -> None:
        self.repository = repository
        self.ttl_hours = (
            ttl_hours if ttl_hours is not None else get_settings().SESSION_EXPIRE_HOURS
        )
        self.jwt_secret = jwt_secret

    def _create(
        self,
        user_id: str,
        email: str,
        profile: SessionProfile,
        device_info: Optional[str],
        ip_address: Optional[str],
    ) -> tuple[SessionCache, str]:
        # トークン衝突時は1回だけ再生成して再試行する
        for attempt in range(2):
            session_token = generate_session_token()
            try:
                session = self.repository.create_session(
                    user_id=user_id,
                    email=email,
                    session_token=session_token,
                    ttl_hours=self.ttl_hours,
                    device_info=device_info,
                    ip_address=ip_address,
                    profile=profile,
                )
                return session, session_token
            except DuplicateTokenError:
                if attempt:
                    raise
                logger.warning("Session token collision, regenerating")
        raise DuplicateTokenError()

    def issue(
        self,
        user_id: str,
        email: str,
        profile: Optional[SessionProfile] = None,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> IssuedSession:
        """
        セッションとJWTを発行する

        Raises:
            DuplicateTokenError: 再試行後もトークンが衝突した場合
            SessionStoreError: セッションストアの障害
        """
        profile = profile or SessionProfile()
        session, session_token = self._create(
            user_id, email, profile, device_info, ip_address
        )

        access_token = create_access_token(
            {
                "id": user_id,
                "role": profile.role,
                "fullName": profile.full_name,
            },
            session_token,
            timedelta(hours=self.ttl_hours),
            secret=self.jwt_secret,
        )

        logger.info(f"Session issued: {mask_identifier(session.uuid)}")
        return IssuedSession(
            session=session,
            session_token=session_token,
            access_token=access_token,
            expires_at=session.expires_at,
            ttl_hours=self.ttl_hours,
        )
