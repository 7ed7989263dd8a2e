"""セッション関連のスキーマ定義"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ...domain.entities import AuthenticatedUser, SessionProfile, UserRole


class SessionCreateRequest(BaseModel):
    """
    セッション作成リクエスト

    パスワード・OTPの検証は呼び出し元のサービスで完了している前提。
    """

    user_id: str = Field(min_length=1, max_length=64)
    email: str = Field(min_length=3, max_length=320)
    role: UserRole = UserRole.STUDENT
    full_name: Optional[str] = None
    school: Optional[str] = None
    faculty: Optional[str] = None
    department: Optional[str] = None
    level: Optional[str] = None
    upid: Optional[str] = None
    profile_photo: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    phone: Optional[str] = None
    reg_number: Optional[str] = None
    is_verified: bool = False
    device_info: Optional[str] = Field(default=None, max_length=512)

    def to_profile(self) -> SessionProfile:
        return SessionProfile(
            role=self.role.value,
            full_name=self.full_name,
            school=self.school,
            faculty=self.faculty,
            department=self.department,
            level=self.level,
            upid=self.upid,
            profile_photo=self.profile_photo,
            gender=self.gender,
            dob=self.dob,
            phone=self.phone,
            reg_number=self.reg_number,
            is_verified=self.is_verified,
        )


class UserResponse(BaseModel):
    """
    認証済みユーザー情報

    Attributes:
        id: ユーザーID
        uuid: セッションUUID
        email: メールアドレス（復号済み）
        role: ロール
        full_name: 氏名
        expires_at: セッションの有効期限
        via: 認証経路（cookie/bearer）
    """

    id: str
    uuid: str
    email: str
    role: str
    full_name: Optional[str] = None
    school: Optional[str] = None
    faculty: Optional[str] = None
    department: Optional[str] = None
    level: Optional[str] = None
    upid: Optional[str] = None
    profile_photo: Optional[str] = None
    is_verified: bool = False
    expires_at: datetime
    via: str

    @classmethod
    def from_user(cls, user: AuthenticatedUser) -> "UserResponse":
        return cls(
            id=user.id,
            uuid=user.uuid,
            email=user.email,
            role=user.role,
            full_name=user.full_name,
            expires_at=user.expires_at,
            via=user.via,
            **user.extra,
        )


class SessionCreateResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    session_id: str
    expires_at: datetime


class ActivityResponse(BaseModel):
    success: bool
    last_activity: Optional[datetime] = None


class OnlineStatusResponse(BaseModel):
    is_online: bool
    has_valid_session: bool


class SignOutResponse(BaseModel):
    success: bool
    message: str


class SessionStatsResponse(BaseModel):
    """
    セッション統計

    Attributes:
        total_active_sessions: 有効なセッション数
        total_expired_sessions: 期限切れ・無効化済みのセッション数
        active_users_count: 有効なセッションを持つユーザー数
        sessions_expiring_soon: 24時間以内に期限を迎えるセッション数
    """

    total_active_sessions: int
    total_expired_sessions: int
    active_users_count: int
    sessions_expiring_soon: int


class SessionSummary(BaseModel):
    """管理画面向けのセッション概要（トークン・PIIは含めない）"""

    model_config = ConfigDict(from_attributes=True)

    uuid: str
    user_id: str
    role: str
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
    sign_in_time: datetime
    last_activity: datetime
    expires_at: datetime


class UserSessionsResponse(BaseModel):
    user_id: str
    count: int
    sessions: list[SessionSummary]


class ForceLogoutResponse(BaseModel):
    invalidated: int


class SessionTokenRequest(BaseModel):
    session_token: str = Field(min_length=1)


class ExtendSessionRequest(SessionTokenRequest):
    additional_hours: float = Field(default=24, gt=0, le=24 * 30)


class ExtendSessionResponse(BaseModel):
    expires_at: datetime


class InactiveSessionsResponse(BaseModel):
    threshold_minutes: int
    count: int
    sessions: list[SessionSummary]


class CleanupResponse(BaseModel):
    deleted: int
