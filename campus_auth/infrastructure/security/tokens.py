"""
セッショントークン・アクセストークン(JWT)の発行と検証
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from campus_auth.core.config import get_settings
from campus_auth.domain.exceptions import InvalidTokenError, TokenExpiredError

SESSION_TOKEN_CLAIM = "sessionToken"


def generate_session_token() -> str:
    """
    セッショントークンを生成

    Returns:
        ランダムな64文字のHEX文字列
    """
    return secrets.token_hex(32)


def generate_session_uuid() -> str:
    """CookieのsessionIdに載せるUUIDを生成"""
    return str(uuid.uuid4())


def create_access_token(
    user: dict[str, Any],
    session_token: str,
    expires_delta: timedelta,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """
    アクセストークン(JWT)を発行

    ペイロードは ``{"user": {...}, "sessionToken": "...", "iat", "exp"}``。
    JWTだけでは認証は完結せず、埋め込まれたセッショントークンの
    サーバー側セッションが有効である必要がある。

    Args:
        user: ユーザー情報（JSONシリアライズ可能なdict）
        session_token: 紐づくセッショントークン
        expires_delta: 有効期間
        secret: 署名シークレット（Noneの場合は設定値）
        algorithm: 署名アルゴリズム（Noneの場合は設定値）

    Returns:
        JWT文字列
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "user": user,
        SESSION_TOKEN_CLAIM: session_token,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(
        payload,
        secret or settings.jwt_secret,
        algorithm=algorithm or settings.JWT_ALGORITHM,
    )


def decode_access_token(
    token: str,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> dict[str, Any]:
    """
    アクセストークン(JWT)を検証してペイロードを返す

    Args:
        token: JWT文字列
        secret: 署名シークレット（Noneの場合は設定値）
        algorithm: 署名アルゴリズム（Noneの場合は設定値）

    Returns:
        ペイロード

    Raises:
        TokenExpiredError: 有効期限切れ
        InvalidTokenError: 形式不正・署名不一致・sessionTokenクレームなし
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[algorithm or settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()

    session_token = payload.get(SESSION_TOKEN_CLAIM)
    if not isinstance(session_token, str) or not session_token:
        raise InvalidTokenError("Token does not reference a session")

    return payload


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Authorizationヘッダーから Bearer トークンを取り出す

    Returns:
        トークン文字列、Bearer形式でない場合はNone
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None
