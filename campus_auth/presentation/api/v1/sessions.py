from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from campus_auth.core.logging import get_logger, mask_identifier
from campus_auth.domain.entities import AuthenticatedUser
from campus_auth.infrastructure.repositories.session_repository import (
    SessionCacheRepository,
)
from campus_auth.infrastructure.security.tokens import (
    SESSION_TOKEN_CLAIM,
    decode_access_token,
    parse_bearer_token,
)
from campus_auth.infrastructure.services.session_issuer import SessionIssuer
from campus_auth.infrastructure.services.session_manager import SessionManager
from campus_auth.presentation.api.deps import (
    get_api_key,
    get_optional_user,
    get_session_issuer,
    get_session_manager,
    get_session_repository,
    require_session,
)
from campus_auth.presentation.schemas.sessions import (
    ActivityResponse,
    OnlineStatusResponse,
    SessionCreateRequest,
    SessionCreateResponse,
    SignOutResponse,
    UserResponse,
)
from campus_auth.utils.session_helper import (
    clear_session_cookie,
    get_client_ip,
    get_session_cookie,
    get_user_agent,
    set_session_cookie,
)

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/",
    response_model=SessionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_api_key)],
)
def create_session(
    body: SessionCreateRequest,
    request: Request,
    response: Response,
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> SessionCreateResponse:
    """
    セッション作成エンドポイント（サービス間呼び出し）

    資格情報の検証済みユーザーに対してセッションを作成し、
    sessionId Cookie とアクセストークン(JWT)を返す。
    """
    issued = issuer.issue(
        user_id=body.user_id,
        email=body.email,
        profile=body.to_profile(),
        device_info=body.device_info or get_user_agent(request),
        ip_address=get_client_ip(request),
    )
    set_session_cookie(response, issued.session.uuid, issued.max_age_seconds)

    return SessionCreateResponse(
        access_token=issued.access_token,
        session_id=issued.session.uuid,
        expires_at=issued.expires_at,
    )


@router.get("/me", response_model=UserResponse)
def read_me(
    user: AuthenticatedUser = Depends(require_session()),
) -> UserResponse:
    """
    認証済みユーザー情報
    """
    return UserResponse.from_user(user)


@router.post("/activity", response_model=ActivityResponse)
def refresh_activity(
    user: AuthenticatedUser = Depends(require_session()),
    repository: SessionCacheRepository = Depends(get_session_repository),
) -> ActivityResponse:
    """
    最終アクティビティ時刻を更新
    """
    session = repository.update_activity_by_uuid(user.uuid)
    if session is None:
        return ActivityResponse(success=False)
    return ActivityResponse(success=True, last_activity=session.last_activity)


@router.get("/online-status", response_model=OnlineStatusResponse)
def online_status(
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    manager: SessionManager = Depends(get_session_manager),
) -> OnlineStatusResponse:
    """
    オンライン状態（未認証でも200を返す）
    """
    if user is None:
        return OnlineStatusResponse(is_online=False, has_valid_session=False)
    return OnlineStatusResponse(
        is_online=manager.is_user_online(user.id), has_valid_session=True
    )


@router.post("/signout", response_model=SignOutResponse)
def sign_out(
    request: Request,
    response: Response,
    repository: SessionCacheRepository = Depends(get_session_repository),
) -> SignOutResponse:
    """
    サインアウト

    Cookie の sessionId を優先し、なければ Bearer JWT のセッションを無効化する。
    Cookieは常に削除する。
    """
    session = None
    session_id = get_session_cookie(request)
    if session_id:
        session = repository.invalidate_session_by_uuid(session_id)
    else:
        token = parse_bearer_token(request.headers.get("Authorization"))
        if token:
            payload = decode_access_token(token)
            session = repository.invalidate_session(payload[SESSION_TOKEN_CLAIM])

    clear_session_cookie(response)

    if session is None:
        return SignOutResponse(success=False, message="No active session")

    logger.info(f"Signed out session {mask_identifier(session.uuid)}")
    return SignOutResponse(success=True, message="Signed out successfully")
