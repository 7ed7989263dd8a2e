"""
セッション管理API（管理者・モデレーター向け）
"""

from fastapi import APIRouter, Depends, Query

from campus_auth.core.logging import get_logger
from campus_auth.domain.entities import AuthenticatedUser
from campus_auth.domain.exceptions import NotFoundError
from campus_auth.infrastructure.services.session_manager import SessionManager
from campus_auth.presentation.api.deps import get_session_manager, require_admin
from campus_auth.presentation.schemas.sessions import (
    CleanupResponse,
    ExtendSessionRequest,
    ExtendSessionResponse,
    ForceLogoutResponse,
    InactiveSessionsResponse,
    SessionStatsResponse,
    SessionSummary,
    SessionTokenRequest,
    SignOutResponse,
    UserSessionsResponse,
)

router = APIRouter(dependencies=[Depends(require_admin)])
logger = get_logger(__name__)


@router.get("/stats", response_model=SessionStatsResponse)
def session_stats(
    manager: SessionManager = Depends(get_session_manager),
) -> SessionStatsResponse:
    stats = manager.get_session_stats()
    return SessionStatsResponse(
        total_active_sessions=stats.total_active_sessions,
        total_expired_sessions=stats.total_expired_sessions,
        active_users_count=stats.active_users_count,
        sessions_expiring_soon=stats.sessions_expiring_soon,
    )


@router.get("/users/{user_id}", response_model=UserSessionsResponse)
def user_sessions(
    user_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> UserSessionsResponse:
    sessions = [
        SessionSummary.model_validate(s)
        for s in manager.get_user_active_sessions(user_id)
    ]
    return UserSessionsResponse(user_id=user_id, count=len(sessions), sessions=sessions)


@router.post("/users/{user_id}/logout", response_model=ForceLogoutResponse)
def force_logout_user(
    user_id: str,
    manager: SessionManager = Depends(get_session_manager),
    admin: AuthenticatedUser = Depends(require_admin),
) -> ForceLogoutResponse:
    """
    ユーザーの全セッションを強制ログアウト
    """
    count = manager.force_logout_user(user_id)
    logger.info(f"Admin {admin.id} forced logout of user {user_id}")
    return ForceLogoutResponse(invalidated=count)


@router.post("/logout", response_model=SignOutResponse)
def force_logout_session(
    body: SessionTokenRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SignOutResponse:
    if not manager.force_logout_session(body.session_token):
        raise NotFoundError("Session not found")
    return SignOutResponse(success=True, message="Session logged out")


@router.post("/extend", response_model=ExtendSessionResponse)
def extend_session(
    body: ExtendSessionRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> ExtendSessionResponse:
    """
    セッションの有効期限を延長（現在の有効期限に加算）
    """
    new_expiry = manager.extend_session(body.session_token, body.additional_hours)
    if new_expiry is None:
        raise NotFoundError("Session not found")
    return ExtendSessionResponse(expires_at=new_expiry)


@router.get("/inactive", response_model=InactiveSessionsResponse)
def inactive_sessions(
    minutes: int = Query(default=30, ge=1, le=60 * 24 * 30),
    manager: SessionManager = Depends(get_session_manager),
) -> InactiveSessionsResponse:
    sessions = [
        SessionSummary.model_validate(s)
        for s in manager.get_inactive_sessions(threshold_minutes=minutes)
    ]
    return InactiveSessionsResponse(
        threshold_minutes=minutes, count=len(sessions), sessions=sessions
    )


@router.post("/cleanup", response_model=CleanupResponse)
def cleanup_sessions(
    manager: SessionManager = Depends(get_session_manager),
) -> CleanupResponse:
    return CleanupResponse(deleted=manager.cleanup_expired_sessions())
