from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_API_KEY = "default_api_key_change_me_in_production"


class Settings(BaseSettings):
    """
    アプリケーション設定
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # 未定義のフィールドを無視
    )

    ENV_MODE: Literal["development", "production", "test", "local", "staging"] = (
        "development"
    )

    BACKEND_CORS_ORIGINS: str | list[str] = []

    @field_validator("BACKEND_CORS_ORIGINS")
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str]) -> list[str] | str:
        if v == "":
            return []
        if v == "*":
            return ["*"]
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        if isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    SECURITY_HEADERS: bool = False
    CSP_POLICY: str = (
        "default-src 'self'; img-src 'self' data:; script-src 'self'; style-src 'self'"
    )

    # サービス間連携（サインイン処理からのセッション登録）用
    API_KEY: str = DEFAULT_API_KEY

    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "main"
    POSTGRES_HOST: str = "db"
    POSTGRES_PORT: str = "5432"

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # 秒
    DB_STATEMENT_TIMEOUT_MS: int = 5000  # 0で無効

    @property
    def database_uri(self) -> str:
        """データベース接続URL"""
        # Kerberos設定済み環境だとタイムアウト待ちにハマるので、gssencmode=disableを設定
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            f"?gssencmode=disable"
        )

    @property
    def has_database(self) -> bool:
        """データベース設定有無"""
        return bool(
            self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_HOST
        )

    @property
    def is_supabase(self) -> bool:
        """Supabase使用判定"""
        return "supabase.co" in self.POSTGRES_HOST

    SESSION_COOKIE_NAME: str = "sessionId"
    SESSION_EXPIRE_HOURS: int = 24 * 7  # 7 days
    SESSION_CLEANUP_GRACE_HOURS: int = 24
    SESSION_CLEANUP_SCHEDULE: Optional[str] = "*/15 * * * *"  # cron形式

    @field_validator("SESSION_CLEANUP_SCHEDULE")
    @classmethod
    def cleanup_schedule_can_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v.strip() == "":
            return None
        return v

    # 64文字のHEX / 32文字の文字列 / それ以外はSHA-256で32バイトに正規化
    SESSION_ENCRYPTION_KEY: str = ""

    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"

    ADMIN_ROLES: list[str] = ["admin", "mod"]

    @model_validator(mode="after")
    def validate_secrets(self) -> "Settings":
        """本番環境では暗号化キー・JWTシークレット・APIキーを必須とする"""
        if self.ENV_MODE == "production":
            if not self.SESSION_ENCRYPTION_KEY:
                raise ValueError("SESSION_ENCRYPTION_KEY is required in production")
            if not self.JWT_SECRET:
                raise ValueError("JWT_SECRET is required in production")
            if not self.API_KEY or self.API_KEY == DEFAULT_API_KEY:
                raise ValueError("API_KEY must be changed in production")
        else:
            if not self.SESSION_ENCRYPTION_KEY:
                logger.warning(
                    "SESSION_ENCRYPTION_KEY is not set. Using development key."
                )
            if not self.JWT_SECRET:
                logger.warning("JWT_SECRET is not set. Using development secret.")
        return self

    @property
    def jwt_secret(self) -> str:
        """JWT署名用シークレット（未設定時は開発用の固定値）"""
        return self.JWT_SECRET or "development-jwt-secret"

    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 1.0

    @field_validator("SENTRY_DSN")
    @classmethod
    def sentry_dsn_can_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        return v

    NEW_RELIC_LICENSE_KEY: Optional[str] = None
    NEW_RELIC_APP_NAME: str = "Campus Auth"
    NEW_RELIC_HIGH_SECURITY: bool = False
    NEW_RELIC_MONITOR_MODE: bool = True

    @property
    def normalized_env_mode(self) -> str:
        """監視ツール向けの環境名（development/localはlocalに寄せる）"""
        if self.ENV_MODE in ("development", "local"):
            return "local"
        return self.ENV_MODE

    @property
    def is_development(self) -> bool:
        """開発環境かどうか"""
        return self.ENV_MODE == "development"

    @property
    def is_local(self) -> bool:
        """ローカル環境かどうか"""
        return self.ENV_MODE in ("development", "local")

    @property
    def is_staging(self) -> bool:
        """ステージング環境かどうか"""
        return self.ENV_MODE == "staging"

    @property
    def is_production(self) -> bool:
        """本番環境かどうか"""
        return self.ENV_MODE == "production"

    @property
    def is_test(self) -> bool:
        """テスト環境かどうか"""
        return self.ENV_MODE == "test"


@lru_cache
def get_settings() -> Settings:
    """
    アプリケーション設定を取得（キャッシュ）
    """
    return Settings()
