"""
Presentation層のAPIエラークラス

FastAPI/Pydanticに依存するAPIエラークラス。
ドメインエラーをHTTPレスポンスに変換する。
"""

from typing import Any, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel

from ...domain.exceptions.base import (
    BadRequestError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)

# エラータイプに応じたHTTPステータスコードのマッピング
STATUS_MAP: dict[type, int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    BadRequestError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ServiceUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ErrorResponse(BaseModel):
    """
    標準エラーレスポンス

    API呼び出し時のエラーレスポンス形式を定義する。

    Attributes:
        status: ステータス（常に"error"）
        code: エラーコード
        message: エラーメッセージ
        details: エラーの詳細情報（オプション）
    """

    status: str = "error"
    code: str
    message: str
    details: Optional[list[dict[str, Any]] | dict[str, Any]] = None


class APIError(HTTPException):
    """
    API エラーの基底クラス

    FastAPIのHTTPExceptionを継承し、ドメインエラーを
    HTTPレスポンスに変換する。

    Attributes:
        status_code: HTTPステータスコード
        error_code: エラーコード
        error_message: エラーメッセージ
        details: エラーの詳細情報
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal_server_error"
    error_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[list[dict[str, Any]] | dict[str, Any]] = None,
    ) -> None:
        """
        Args:
            message: エラーメッセージ（オプション）
            details: エラーの詳細情報（オプション）
        """
        self.error_message = message or self.error_message
        self.details = details
        super().__init__(status_code=self.status_code, detail=self.error_message)

    def to_response(self) -> ErrorResponse:
        """
        標準エラーレスポンス形式に変換

        Returns:
            ErrorResponse: 標準エラーレスポンス
        """
        return ErrorResponse(
            code=self.error_code, message=self.error_message, details=self.details
        )


def domain_error_to_api_error(domain_error: DomainError) -> APIError:
    """
    ドメインエラーをAPIエラーに変換

    ドメイン層の例外をPresentation層のHTTP例外に変換する。
    エラーの種類に応じて適切なHTTPステータスコードを設定する。
    例: SessionStoreError は ServiceUnavailableError として503になる。

    Args:
        domain_error: ドメイン層のエラー

    Returns:
        APIError: API層のエラー

    Examples:
        >>> from campus_auth.domain.exceptions.base import NotFoundError
        >>> domain_err = NotFoundError("User not found")
        >>> api_err = domain_error_to_api_error(domain_err)
        >>> api_err.status_code
        404
    """
    # ステータスコードを決定（サブクラスは最も近い基底クラスの設定を使う）
    status_code = next(
        (
            STATUS_MAP[klass]
            for klass in type(domain_error).__mro__
            if klass in STATUS_MAP
        ),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

    # APIErrorを生成
    api_error = APIError(
        message=domain_error.message,
        details=domain_error.details,
    )
    api_error.status_code = status_code
    api_error.error_code = domain_error.code
    api_error.error_message = domain_error.message

    return api_error
