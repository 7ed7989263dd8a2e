"""
セッショントークン・アクセストークン(JWT)の単体テスト
"""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from campus_auth.domain.exceptions import InvalidTokenError, TokenExpiredError
from campus_auth.infrastructure.security.tokens import (
    SESSION_TOKEN_CLAIM,
    create_access_token,
    decode_access_token,
    generate_session_token,
    generate_session_uuid,
    parse_bearer_token,
)

SECRET = "unit-test-secret"


class TestGenerateTokens:
    def test_session_token_is_64_hex(self) -> None:
        token = generate_session_token()
        assert len(token) == 64
        int(token, 16)

    def test_session_tokens_are_unique(self) -> None:
        assert len({generate_session_token() for _ in range(50)}) == 50

    def test_session_uuid_is_uuid4(self) -> None:
        assert uuid.UUID(generate_session_uuid()).version == 4


class TestAccessToken:
    """JWTの発行と検証"""

    def test_round_trip(self) -> None:
        """発行したJWTからユーザー情報とセッショントークンが取り出せること"""
        token = create_access_token(
            {"id": "u1", "role": "student"}, "abc", timedelta(hours=1), secret=SECRET
        )

        payload = decode_access_token(token, secret=SECRET)

        assert payload["user"] == {"id": "u1", "role": "student"}
        assert payload[SESSION_TOKEN_CLAIM] == "abc"
        assert payload["exp"] > payload["iat"]

    def test_expired_token(self) -> None:
        token = create_access_token({}, "abc", timedelta(seconds=-10), secret=SECRET)
        with pytest.raises(TokenExpiredError) as exc_info:
            decode_access_token(token, secret=SECRET)
        assert exc_info.value.code == "token_expired"

    def test_expired_is_also_invalid_token(self) -> None:
        """期限切れはInvalidTokenErrorのサブクラスとして捕捉できること"""
        token = create_access_token({}, "abc", timedelta(seconds=-10), secret=SECRET)
        with pytest.raises(InvalidTokenError):
            decode_access_token(token, secret=SECRET)

    def test_wrong_secret(self) -> None:
        token = create_access_token({}, "abc", timedelta(hours=1), secret=SECRET)
        with pytest.raises(InvalidTokenError) as exc_info:
            decode_access_token(token, secret="another-secret")
        assert exc_info.value.code == "invalid_token"

    def test_malformed_token(self) -> None:
        with pytest.raises(InvalidTokenError):
            decode_access_token("not-a-jwt", secret=SECRET)

    def test_missing_session_token_claim(self) -> None:
        """sessionTokenクレームがないJWTは拒否されること"""
        token = jwt.encode({"user": {"id": "u1"}}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError) as exc_info:
            decode_access_token(token, secret=SECRET)
        assert "session" in exc_info.value.message

    def test_empty_session_token_claim(self) -> None:
        token = jwt.encode({SESSION_TOKEN_CLAIM: ""}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            decode_access_token(token, secret=SECRET)


class TestParseBearerToken:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc", "abc"),
            ("  Bearer   abc  ", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
            ("Bearer ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, header: object, expected: object) -> None:
        assert parse_bearer_token(header) == expected  # type: ignore[arg-type]
