"""Secure session cookie configuration."""

from typing import Optional

from itsdangerous import BadSignature, TimestampSigner

from app.auth.config import AuthConfig


class SecureSessionConfig:
    """Configuration for the session id cookie.

    The cookie only ever carries the signed session id; the session itself
    stays in the server-side store.
    """

    # Session settings
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_COOKIE_HTTPONLY: bool = True  # Prevent JS access
    # Must be sent on the cross-site redirect back from Google
    SESSION_COOKIE_SAMESITE: str = "lax"
    SESSION_COOKIE_PATH: str = "/"
    SESSION_COOKIE_DOMAIN: Optional[str] = None

    def __init__(self, config: AuthConfig) -> None:
        self.config = config
        self.signer = TimestampSigner(config.SECRET_KEY, salt="siftpilot-session")

    @property
    def max_age(self) -> int:
        return self.config.SESSION_LIFETIME_SECONDS

    @property
    def secure(self) -> bool:
        return self.config.COOKIE_SECURE

    def sign_session_id(self, session_id: str) -> str:
        """Sign a session id for use as a cookie value."""
        return self.signer.sign(session_id).decode("utf-8")

    def unsign_session_id(self, value: Optional[str]) -> Optional[str]:
        """Return the session id from a cookie value, or None if it is invalid."""
        if not value:
            return None
        try:
            return self.signer.unsign(value, max_age=self.max_age).decode("utf-8")
        except BadSignature:
            return None

    def get_cookie_kwargs(self, session_id: str) -> dict:
        """Get kwargs for Response.set_cookie."""
        return {
            "key": self.SESSION_COOKIE_NAME,
            "value": self.sign_session_id(session_id),
            "max_age": self.max_age,
            "httponly": self.SESSION_COOKIE_HTTPONLY,
            "secure": self.secure,
            "samesite": self.SESSION_COOKIE_SAMESITE,
            "path": self.SESSION_COOKIE_PATH,
            "domain": self.SESSION_COOKIE_DOMAIN,
        }

    def get_delete_cookie_kwargs(self) -> dict:
        """Get kwargs for Response.delete_cookie."""
        return {
            "key": self.SESSION_COOKIE_NAME,
            "httponly": self.SESSION_COOKIE_HTTPONLY,
            "secure": self.secure,
            "samesite": self.SESSION_COOKIE_SAMESITE,
            "path": self.SESSION_COOKIE_PATH,
            "domain": self.SESSION_COOKIE_DOMAIN,
        }

