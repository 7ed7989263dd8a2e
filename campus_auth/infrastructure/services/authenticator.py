"""
リクエスト認証

1. Cookie の sessionId（セッションUUID）でセッションを検索
2. 見つからなければ Authorization: Bearer <JWT> を検証し、
   埋め込まれた sessionToken でサーバー側のセッションを検索
3. どちらも見つからなければ 401

JWTの署名が正しくても、サーバー側のセッションが無効化されていれば拒否する。
ストアの障害は SessionStoreError（503）として伝播し、401 にはしない。
"""

from collections.abc import Iterable
from typing import Optional

from ...core.logging import get_logger, mask_identifier
from ...domain.entities import AuthenticatedUser, SessionLookup
from ...domain.exceptions import (
    InsufficientPrivilegesError,
    UnauthenticatedError,
    UnauthorizedError,
)
from ..database.models.session_cache import SessionCache
from ..repositories.session_repository import SessionCacheRepository
from ..security.tokens import (
    SESSION_TOKEN_CLAIM,
    decode_access_token,
    parse_bearer_token,
)

logger = get_logger(__name__)


class SessionAuthenticator:
    def __init__(
        self,
        repository: SessionCacheRepository,
        jwt_secret: Optional[str] = None,
        jwt_algorithm: Optional[str] = None,
    ) -> None:
        self.repository = repository
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    def _from_cookie(self, session_id: Optional[str]) -> Optional[SessionCache]:
        if not session_id:
            return None
        session = self.repository.find_active_session(session_id, SessionLookup.UUID)
        if session is None:
            logger.debug(f"Cookie session not active: {mask_identifier(session_id)}")
        return session

    def _from_bearer(self, authorization: Optional[str]) -> Optional[SessionCache]:
        token = parse_bearer_token(authorization)
        if token is None:
            return None
        payload = decode_access_token(
            token, secret=self.jwt_secret, algorithm=self.jwt_algorithm
        )
        return self.repository.find_active_session(
            payload[SESSION_TOKEN_CLAIM], SessionLookup.SESSION_TOKEN
        )

    def authenticate(
        self,
        session_id: Optional[str],
        authorization: Optional[str],
        required_roles: Optional[Iterable[str]] = None,
    ) -> AuthenticatedUser:
        """
        リクエストの呼び出し元を認証する

        Args:
            session_id: Cookie の sessionId
            authorization: Authorization ヘッダー
            required_roles: 許可するロール（Noneまたは空なら全ロール）

        Returns:
            認証済みユーザー

        Raises:
            UnauthenticatedError: 有効なセッションがない
            InvalidTokenError: JWTが不正
            TokenExpiredError: JWTの有効期限切れ
            InsufficientPrivilegesError: ロール不足
            SessionStoreError: セッションストアの障害
            DecryptionError: メールアドレスの復号に失敗
        """
        via = "cookie"
        session = self._from_cookie(session_id)
        if session is None:
            via = "bearer"
            session = self._from_bearer(authorization)

        if session is None:
            raise UnauthenticatedError()

        roles = set(required_roles or ())
        if roles and session.role not in roles:
            logger.warning(
                f"Role '{session.role}' rejected for session "
                f"{mask_identifier(session.uuid)}"
            )
            raise InsufficientPrivilegesError()

        return AuthenticatedUser(
            id=session.user_id,
            uuid=session.uuid,
            email=self.repository.decrypt_email(session),
            role=session.role,
            full_name=session.full_name,
            session_token_hash=session.session_token_hash,
            expires_at=session.expires_at,
            via=via,
            extra={
                "school": session.school,
                "faculty": session.faculty,
                "department": session.department,
                "level": session.level,
                "upid": session.upid,
                "profile_photo": session.profile_photo,
                "is_verified": session.is_verified,
            },
        )

    def authenticate_optional(
        self,
        session_id: Optional[str],
        authorization: Optional[str],
    ) -> Optional[AuthenticatedUser]:
        """
        認証を試み、失敗した場合はNoneを返す

        ストア障害・復号失敗は伝播する。
        """
        try:
            return self.authenticate(session_id, authorization)
        except UnauthorizedError:
            return None
