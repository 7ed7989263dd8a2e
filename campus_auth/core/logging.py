"""アプリケーション用のロギングユーティリティ。"""

import logging
import sys
from typing import Optional


def is_fastapi_context() -> bool:
    """
    FastAPI/uvicornコンテキストで実行中かどうかを判定する。

    Returns:
        bool: uvicornがロードされている場合True、そうでない場合False。
    """
    return "uvicorn" in sys.modules


def get_logger(name: str) -> logging.Logger:
    """
    ロガーインスタンスを取得する。

    FastAPI/uvicornコンテキスト（Webサーバー）で実行中の場合は"uvicorn"ロガーを使用し、
    FastAPIのロギングと一貫したフォーマット・出力を保証する。
    それ以外の場合（CLI・バッチ・マイグレーション）は呼び出し元のモジュール名を使用する。

    Args:
        name: ロガー名、通常は呼び出し元モジュールの__name__を指定。

    Returns:
        logging.Logger: 設定済みのロガーインスタンス。
    """
    if is_fastapi_context():
        return logging.getLogger("uvicorn")
    return logging.getLogger(name)


def mask_identifier(value: Optional[str], visible: int = 8) -> str:
    """
    ログ出力用に識別子をマスクする。

    セッションUUIDやトークンを平文のままログに残さないため、
    先頭の数文字だけを残して残りを省略する。

    Args:
        value: マスク対象の文字列
        visible: 残す先頭文字数

    Returns:
        str: マスク済み文字列（例: "3f2a9c1e..."）

    Examples:
        >>> mask_identifier("3f2a9c1e-0000-4000-8000-000000000000")
        '3f2a9c1e...'
    """
    if not value:
        return "<empty>"
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}..."
