"""
pytest設定と共通フィクスチャ（SQLiteインメモリベース）
"""

import os
import secrets
from collections.abc import Callable
from typing import Any, Generator, Optional

# 設定はget_settings()の初回呼び出し時に読み込まれるため、
# アプリケーションのモジュールをインポートする前に環境変数を設定する
TEST_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff" * 2
TEST_JWT_SECRET = "test-jwt-secret-for-pytest"
TEST_API_KEY = "test-api-key"

os.environ["ENV_MODE"] = "test"
os.environ["POSTGRES_HOST"] = ""  # DBなし扱い（lifespanでマイグレーションを走らせない）
os.environ["SESSION_ENCRYPTION_KEY"] = TEST_ENCRYPTION_KEY
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["API_KEY"] = TEST_API_KEY

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from campus_auth.core.app_factory import create_app  # noqa: E402
from campus_auth.core.config import get_settings  # noqa: E402
from campus_auth.domain.entities import SessionProfile  # noqa: E402
from campus_auth.infrastructure.database import get_db  # noqa: E402
from campus_auth.infrastructure.database.models import Base, SessionCache  # noqa: E402
from campus_auth.infrastructure.repositories.session_repository import (  # noqa: E402
    SessionCacheRepository,
)
from campus_auth.infrastructure.security.encryption import (  # noqa: E402
    DeterministicCipher,
)
from campus_auth.infrastructure.security.tokens import (  # noqa: E402
    generate_session_token,
)
from campus_auth.infrastructure.services.authenticator import (  # noqa: E402
    SessionAuthenticator,
)
from campus_auth.infrastructure.services.session_issuer import (  # noqa: E402
    SessionIssuer,
)
from campus_auth.infrastructure.services.session_manager import (  # noqa: E402
    SessionManager,
)

SessionFactory = Callable[..., tuple[SessionCache, str]]


def pytest_configure(config: Any) -> None:
    """
    pytest実行前の設定

    環境変数を反映させるため、設定キャッシュをクリアしておく
    """
    get_settings.cache_clear()


@pytest.fixture(scope="function")
def test_engine() -> Generator[Engine, None, None]:
    """
    テスト用SQLAlchemy Engine（テストごとに新しいインメモリDB）

    StaticPoolで単一コネクションを共有し、TestClientのスレッドからも同じDBを参照させる。
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine: Engine) -> Generator[Session, None, None]:
    """テスト用DBセッション"""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture
def cipher() -> DeterministicCipher:
    """テスト用キーの暗号化インスタンス"""
    return DeterministicCipher(TEST_ENCRYPTION_KEY)


@pytest.fixture
def repository(
    db_session: Session, cipher: DeterministicCipher
) -> SessionCacheRepository:
    return SessionCacheRepository(db_session, cipher=cipher)


@pytest.fixture
def manager(repository: SessionCacheRepository) -> SessionManager:
    return SessionManager(repository)


@pytest.fixture
def authenticator(repository: SessionCacheRepository) -> SessionAuthenticator:
    return SessionAuthenticator(repository)


@pytest.fixture
def issuer(repository: SessionCacheRepository) -> SessionIssuer:
    return SessionIssuer(repository)


@pytest.fixture
def make_session(repository: SessionCacheRepository) -> SessionFactory:
    """
    セッションを作成するファクトリー

    Returns:
        (セッション, 平文のセッショントークン) を返す関数
    """

    def _make(
        user_id: str = "user-1",
        email: str = "student@example.edu",
        role: str = "student",
        ttl_hours: float = 168,
        session_token: Optional[str] = None,
        **profile: Any,
    ) -> tuple[SessionCache, str]:
        token = session_token or generate_session_token()
        session = repository.create_session(
            user_id=user_id,
            email=email,
            session_token=token,
            ttl_hours=ttl_hours,
            device_info="pytest",
            ip_address="127.0.0.1",
            profile=SessionProfile(role=role, **profile),
        )
        return session, token

    return _make


@pytest.fixture(scope="function")
def app() -> FastAPI:
    return create_app()


@pytest.fixture(scope="function")
def client(app: FastAPI, db_session: Session) -> Generator[TestClient, None, None]:
    """
    テスト用FastAPIクライアント

    Args:
        app: テスト用アプリケーション
        db_session: テスト用DBセッション

    Yields:
        FastAPI TestClient
    """

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def api_key() -> str:
    """テスト用APIキー"""
    return TEST_API_KEY


@pytest.fixture
def random_token() -> str:
    return secrets.token_hex(32)
