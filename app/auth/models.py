"""Authentication models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email


class Provider(str, Enum):
    """Supported identity providers."""

    GOOGLE = "google"


class Principal(BaseModel):
    """Verified identity attached to an authenticated session."""

    model_config = ConfigDict(frozen=True)

    external_id: str = Field(min_length=1)  # provider subject
    email: str
    display_name: str
    provider: Provider = Provider.GOOGLE
    avatar_url: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        """Reject malformed addresses but keep the provider's spelling."""
        validate_email(value)
        return value


class Session(BaseModel):
    """Server-side session record.

    Records are immutable; the session store replaces them on every change.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    created_at: datetime
    expires_at: datetime
    principal: Optional[Principal] = None
    login_state: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        """Whether a principal has been attached."""
        return self.principal is not None

    def is_expired(self, now: datetime) -> bool:
        """Whether the session has reached its expiry time."""
        return now >= self.expires_at


class UserResponse(BaseModel):
    """Public representation of the signed-in user."""

    id: str
    email: str
    name: str
    provider: str
    avatarUrl: Optional[str] = None
