"""Unit tests for the session cookie configuration."""

import pytest

from app.auth.config import AuthConfig
from app.security.session import SecureSessionConfig


@pytest.fixture
def cookie_config(auth_config: AuthConfig) -> SecureSessionConfig:
    """Create a cookie configuration."""
    return SecureSessionConfig(auth_config)


class TestSecureSessionConfig:
    """Tests for SecureSessionConfig."""

    def test_sign_and_unsign(self, cookie_config: SecureSessionConfig) -> None:
        """Test that a signed session id can be read back."""
        signed = cookie_config.sign_session_id("session-123")

        assert signed != "session-123"
        assert cookie_config.unsign_session_id(signed) == "session-123"

    def test_tampered_cookie_rejected(self, cookie_config: SecureSessionConfig) -> None:
        """Test that a modified cookie is rejected."""
        signed = cookie_config.sign_session_id("session-123")
        tampered = "session-456" + signed[len("session-123") :]

        assert cookie_config.unsign_session_id(tampered) is None

    def test_other_secret_rejected(
        self,
        cookie_config: SecureSessionConfig,
        auth_config: AuthConfig,
    ) -> None:
        """Test that cookies signed with another secret are rejected."""
        auth_config.SECRET_KEY = "another-secret"
        other = SecureSessionConfig(auth_config)

        assert cookie_config.unsign_session_id(other.sign_session_id("abc")) is None

    @pytest.mark.parametrize("value", [None, "", "garbage"])
    def test_empty_or_garbage(
        self, cookie_config: SecureSessionConfig, value
    ) -> None:
        """Test that missing or malformed cookies yield no session id."""
        assert cookie_config.unsign_session_id(value) is None

    def test_cookie_kwargs(self, cookie_config: SecureSessionConfig) -> None:
        """Test cookie attributes."""
        kwargs = cookie_config.get_cookie_kwargs("session-123")

        assert kwargs["key"] == "session_id"
        assert kwargs["max_age"] == 86400
        assert kwargs["httponly"] is True
        assert kwargs["secure"] is False
        assert kwargs["samesite"] == "lax"
        assert cookie_config.unsign_session_id(kwargs["value"]) == "session-123"

    def test_cookie_secure_under_tls(self, auth_config: AuthConfig) -> None:
        """Test that the cookie is secure-only when TLS is configured."""
        auth_config.COOKIE_SECURE = True
        cookie_config = SecureSessionConfig(auth_config)

        assert cookie_config.get_cookie_kwargs("abc")["secure"] is True
        assert cookie_config.get_delete_cookie_kwargs()["secure"] is True
