"""Tests for session token verification."""

from __future__ import annotations

import pytest

from lifesync.auth.tokens import AuthError, create_session_token, verify_token
from tests.conftest import TEST_JWT_SECRET, make_token


class TestVerifyToken:
    def test_valid_token_yields_user_id(self, fake_settings):
        assert verify_token(make_token("user-1"), fake_settings) == "user-1"

    def test_created_token_roundtrips(self, fake_settings):
        token = create_session_token("user-2", settings=fake_settings)
        assert verify_token(token, fake_settings) == "user-2"

    def test_expired_token(self, fake_settings):
        with pytest.raises(AuthError) as exc_info:
            verify_token(make_token("user-1", expires_in=-1), fake_settings)
        assert exc_info.value.message == "Invalid Token"

    def test_wrong_secret(self, fake_settings):
        token = make_token("user-1", secret=TEST_JWT_SECRET + "-rotated")
        with pytest.raises(AuthError):
            verify_token(token, fake_settings)

    @pytest.mark.parametrize("claim", [None, "", 42])
    def test_unusable_user_id_claim(self, fake_settings, claim):
        token = make_token("ignored", extra={"userId": claim})
        with pytest.raises(AuthError):
            verify_token(token, fake_settings)

    def test_malformed_token(self, fake_settings):
        with pytest.raises(AuthError):
            verify_token("a.b.c", fake_settings)


class TestAuthError:
    def test_default_message(self):
        assert AuthError().message == "Unauthorized"
