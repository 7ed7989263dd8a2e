"""システム関連のスキーマ定義"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class SessionStoreStatus(BaseModel):
    """
    セッションストアの状態

    Attributes:
        status: healthy/unhealthy（DB無効時もhealthy）
        connection: DB接続が確立されているか
        error: エラーメッセージ（エラー時・無効時のみ）
    """

    status: Literal["healthy", "unhealthy"]
    connection: bool
    error: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """
    ヘルスチェックレスポンス

    Attributes:
        status: 全体的なヘルス状態（ok/unhealthy）
        timestamp: レスポンス生成時刻
        uptime_seconds: アプリケーション起動からの経過秒数
        database: セッションストアの状態
        cleanup_scheduled: 期限切れセッション掃除のジョブが登録されているか
        environment: 実行環境（production/staging/local等）
    """

    status: Literal["ok", "unhealthy"]
    timestamp: datetime
    uptime_seconds: float
    database: SessionStoreStatus
    cleanup_scheduled: bool = False
    environment: str
