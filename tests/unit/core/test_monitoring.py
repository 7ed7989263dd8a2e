"""
監視ツール初期化（Sentryイベントのスクラブ）の単体テスト
"""

from typing import Any
from unittest.mock import Mock, patch

from campus_auth.core.config import Settings
from campus_auth.core.monitoring import init_monitoring, scrub_event


class TestScrubEvent:
    """scrub_event()のテスト"""

    def test_session_headers_are_filtered(self) -> None:
        """JWT・Cookieを含むヘッダーがSentryに送られないこと"""
        event: dict[str, Any] = {
            "request": {
                "headers": {
                    "Authorization": "Bearer eyJ...",
                    "Cookie": "sessionId=abc",
                    "User-Agent": "Mozilla/5.0",
                },
                "cookies": {"sessionId": "abc"},
            }
        }

        result = scrub_event(event, {})

        assert result is not None
        headers = result["request"]["headers"]
        assert headers["Authorization"] == "[Filtered]"
        assert headers["Cookie"] == "[Filtered]"
        assert headers["User-Agent"] == "Mozilla/5.0"
        assert result["request"]["cookies"] == "[Filtered]"

    def test_event_without_request(self) -> None:
        event: dict[str, Any] = {"message": "boom"}
        assert scrub_event(event, {}) == {"message": "boom"}


class TestInitMonitoring:
    @patch("campus_auth.core.monitoring.sentry_sdk")
    @patch("campus_auth.core.monitoring.get_settings")
    def test_sentry_uses_scrubber(self, mock_get_settings: Mock, mock_sentry: Mock) -> None:
        mock_get_settings.return_value = Settings(
            _env_file=None, SENTRY_DSN="https://key@sentry.example.com/1"
        )

        init_monitoring()

        kwargs = mock_sentry.init.call_args.kwargs
        assert kwargs["send_default_pii"] is False
        assert kwargs["before_send"] is scrub_event

    @patch("campus_auth.core.monitoring.sentry_sdk")
    @patch("campus_auth.core.monitoring.get_settings")
    def test_sentry_skipped_without_dsn(
        self, mock_get_settings: Mock, mock_sentry: Mock
    ) -> None:
        mock_get_settings.return_value = Settings(_env_file=None, SENTRY_DSN="")

        init_monitoring()

        mock_sentry.init.assert_not_called()
