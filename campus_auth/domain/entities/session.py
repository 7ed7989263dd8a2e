"""
セッション関連のドメインエンティティ

永続化モデル（SQLAlchemy）とは分離した、フレームワーク非依存の値オブジェクト。
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class SessionLookup(str, Enum):
    """
    find_active_session の識別子種別

    - USER_ID: ユーザーIDで検索（管理ツール）
    - EMAIL: メールアドレスで検索（ハッシュで照合）
    - SESSION_TOKEN: セッショントークンで検索（Bearer JWTに埋め込まれたもの）
    - UUID: CookieのsessionIdで検索
    """

    USER_ID = "userId"
    EMAIL = "email"
    SESSION_TOKEN = "sessionToken"
    UUID = "uuid"


@dataclass
class SessionProfile:
    """
    セッションに複製して保持するユーザープロフィール

    ユーザーストアに問い合わせずに認証結果を組み立てるためのキャッシュ。
    phone / reg_number は暗号化して保存される。
    """

    role: str = "student"
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


@dataclass
class SessionInfo:
    """セッションの状態情報（復号不要な項目のみ）"""

    is_active: bool
    is_signed_in: bool
    sign_in_time: datetime
    last_activity: datetime
    expires_at: datetime
    device_info: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass
class DecryptedUserData:
    """復号済みのユーザーデータ一式"""

    user_id: str
    uuid: str
    email: str
    profile: SessionProfile
    session_info: SessionInfo


@dataclass
class AuthenticatedUser:
    """
    認証済みリクエストの呼び出し元情報

    email はこのオブジェクトを組み立てる時点で初めて復号される。
    """

    id: str
    uuid: str
    email: str
    role: str
    full_name: Optional[str]
    session_token_hash: str
    expires_at: datetime
    via: str  # "cookie" または "bearer"
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionStats:
    """セッション統計"""

    total_active_sessions: int
    total_expired_sessions: int
    active_users_count: int
    sessions_expiring_soon: int
