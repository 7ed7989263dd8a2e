"""
セッション・認証まわりのドメイン例外

「セッションが存在しない」はNoneで表現し、例外にはしない。
ここに定義するのは「処理そのものが失敗した」ケースのみ。
"""

from typing import Any, Optional

from .base import (
    ConflictError,
    DomainError,
    ForbiddenError,
    ServiceUnavailableError,
    UnauthorizedError,
)


class DecryptionError(DomainError):
    """暗号文が設定中のキーで復号できない（形式不正・キー不一致）"""

    def __init__(
        self,
        message: str = "Failed to decrypt sensitive data",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, code="decryption_failed", details=details)


class DuplicateTokenError(ConflictError):
    """同じセッショントークンのセッションが既に存在する"""

    def __init__(
        self,
        message: str = "Session token already exists",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message, details=details, code="duplicate_session_token"
        )


class UnauthenticatedError(UnauthorizedError):
    """有効なセッションが見つからない"""

    def __init__(
        self,
        message: str = "No valid session found",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)


class InvalidTokenError(UnauthorizedError):
    """JWTの形式・署名・ペイロードが不正"""

    def __init__(
        self,
        message: str = "Invalid token",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details, code="invalid_token")


class TokenExpiredError(InvalidTokenError):
    """JWTの有効期限切れ"""

    def __init__(
        self,
        message: str = "Token has expired",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "token_expired"


class InsufficientPrivilegesError(ForbiddenError):
    """
    セッションは有効だがロールが不足している

    どのロールなら通るかはメッセージに含めない。
    """

    def __init__(self) -> None:
        super().__init__(message="Insufficient privileges. Admin access required")


class SessionStoreError(ServiceUnavailableError):
    """セッションストアへの接続失敗・タイムアウト"""

    def __init__(
        self,
        message: str = "Session store unavailable",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message, details=details, code="session_store_unavailable"
        )
