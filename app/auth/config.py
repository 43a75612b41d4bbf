"""Authentication configuration."""

import logging
import os
import secrets
from typing import Optional

from dotenv import load_dotenv

from app.auth.errors import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


class AuthConfig:
    """Authentication configuration settings."""

    # Google OAuth endpoints
    GOOGLE_AUTHORIZE_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_USERINFO_URL: str = "https://openidconnect.googleapis.com/v1/userinfo"
    GOOGLE_SCOPES: str = "profile email"

    # Session lifetime: 24 hours
    SESSION_LIFETIME_SECONDS: int = 24 * 60 * 60

    def __init__(self) -> None:
        """Load settings from the environment."""
        # Google OAuth settings
        self.GOOGLE_CLIENT_ID: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")
        self.GOOGLE_CLIENT_SECRET: Optional[str] = os.getenv("GOOGLE_CLIENT_SECRET")

        # Application settings
        self.BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000").rstrip(
            "/"
        )
        self.GOOGLE_CALLBACK_URL: str = os.getenv(
            "GOOGLE_CALLBACK_URL", f"{self.BASE_URL}/auth/callback"
        )
        self.PORT: int = int(os.getenv("PORT", "8000"))
        self.ENVIRONMENT: str = (
            os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development"
        )
        self.OAUTH_TIMEOUT_SECONDS: float = float(
            os.getenv("OAUTH_TIMEOUT_SECONDS", "10")
        )

        # Cookies are secure-only under TLS
        cookie_secure = _env_flag("COOKIE_SECURE")
        if cookie_secure is None:
            cookie_secure = self.BASE_URL.startswith("https://")
        self.COOKIE_SECURE: bool = cookie_secure

        # Session signing secret
        secret_key = os.getenv("SECRET_KEY")
        if not secret_key:
            logger.warning(
                "SECRET_KEY is not set; using a random key, sessions will not "
                "survive a restart"
            )
            secret_key = secrets.token_urlsafe(32)
        self.SECRET_KEY: str = secret_key

    @property
    def google_configured(self) -> bool:
        """Whether both Google OAuth credentials are present."""
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)

    def validate_config(self) -> None:
        """Validate required configuration values."""
        if not self.GOOGLE_CLIENT_ID:
            raise ConfigurationError(
                "GOOGLE_CLIENT_ID environment variable is required"
            )
        if not self.GOOGLE_CLIENT_SECRET:
            raise ConfigurationError(
                "GOOGLE_CLIENT_SECRET environment variable is required"
            )


auth_config = AuthConfig()
