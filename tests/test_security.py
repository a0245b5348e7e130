import uuid
from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from comicapi.core.exceptions import AuthenticationError
from comicapi.core.security import (
    TokenService,
    generate_one_time_code,
    hash_password,
    hash_token,
    verify_password,
)


def _principal(role="user"):
    return SimpleNamespace(id=uuid.uuid4(), email="reader@example.com", role=role)


class TestHashing:
    def test_hash_token_is_deterministic_sha256_hex(self):
        digest = hash_token("123456")
        assert digest == hash_token("123456")
        assert len(digest) == 64
        assert digest != "123456"

    def test_one_time_code_is_six_digits(self):
        for _ in range(200):
            code = generate_one_time_code()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999

    def test_password_hash_roundtrip(self):
        hashed = hash_password("secret123", rounds=4)
        assert hashed != "secret123"
        assert verify_password("secret123", hashed) is True
        assert verify_password("wrong-pass", hashed) is False

    def test_verify_password_without_hash(self):
        assert verify_password("secret123", None) is False
        assert verify_password("secret123", "not-a-bcrypt-hash") is False


class TestTokenService:
    def test_access_token_carries_identity_claims(self, token_service, settings):
        user = _principal(role="admin")
        token = token_service.create_access_token(user)

        payload = token_service.decode_access_token(token)
        assert payload.sub == user.id
        assert payload.email == user.email
        assert payload.role == "admin"

        raw = jwt.get_unverified_claims(token)
        assert raw["iss"] == settings.JWT_ISSUER
        assert raw["aud"] == settings.JWT_AUDIENCE
        assert raw["exp"] > raw["iat"]

    def test_expired_token_rejected(self, token_service):
        token = token_service.create_access_token(
            _principal(), expires_delta=timedelta(seconds=-5)
        )
        with pytest.raises(AuthenticationError):
            token_service.decode_access_token(token)

    def test_tampered_token_rejected(self, token_service):
        header, _, signature = token_service.create_access_token(_principal()).split(".")
        _, elevated, _ = token_service.create_access_token(_principal("admin")).split(".")
        with pytest.raises(AuthenticationError):
            token_service.decode_access_token(f"{header}.{elevated}.{signature}")

    def test_token_signed_with_other_key_rejected(self, token_service, settings):
        other = TokenService(
            settings.model_copy(update={"SECRET_KEY": "another-secret-key-of-sufficient-length"})
        )
        with pytest.raises(AuthenticationError):
            token_service.decode_access_token(other.create_access_token(_principal()))

    def test_wrong_audience_rejected(self, token_service, settings):
        other = TokenService(settings.model_copy(update={"JWT_AUDIENCE": "someone-else"}))
        with pytest.raises(AuthenticationError):
            token_service.decode_access_token(other.create_access_token(_principal()))

    def test_refresh_tokens_are_unique_and_long(self, token_service):
        tokens = {token_service.generate_refresh_token() for _ in range(50)}
        assert len(tokens) == 50
        assert all(len(t) >= 80 for t in tokens)

    def test_refresh_expiry_uses_configured_days(self, token_service, settings):
        from comicapi.utils.date_utils import utcnow

        now = utcnow()
        assert token_service.refresh_token_expiry(now) - now == timedelta(
            days=settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
