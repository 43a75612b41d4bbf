"""Conversion between provider profiles and principals."""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.auth.errors import AuthenticationError
from app.auth.models import Principal, Provider, UserResponse


def _first_verified_email(profile: Dict[str, Any]) -> Optional[str]:
    """Return the first email the provider has not marked as unverified."""
    emails = profile.get("emails")
    if isinstance(emails, list):
        for entry in emails:
            if not isinstance(entry, dict):
                continue
            value = entry.get("value")
            if value and entry.get("verified", True) is not False:
                return str(value)
        return None

    email = profile.get("email")
    # Providers that omit email_verified are trusted as-is
    if email and profile.get("email_verified", True) is not False:
        return str(email)
    return None


def _first_photo(profile: Dict[str, Any]) -> Optional[str]:
    photos = profile.get("photos")
    if isinstance(photos, list):
        for entry in photos:
            if isinstance(entry, dict) and entry.get("value"):
                return str(entry["value"])
    picture = profile.get("picture")
    return str(picture) if picture else None


def principal_from_profile(
    profile: Any, provider: Provider = Provider.GOOGLE
) -> Principal:
    """Build a principal from a raw identity provider profile.

    Accepts OpenID Connect userinfo (``sub``, ``email``, ``name``,
    ``picture``) as well as profiles with ``id``, ``displayName``,
    ``emails`` and ``photos`` lists.

    Raises:
        AuthenticationError: if the profile is malformed or has no verified
            email.
    """
    if not isinstance(profile, dict):
        raise AuthenticationError("Provider profile is not an object")

    external_id = profile.get("sub") or profile.get("id")
    if not external_id:
        raise AuthenticationError("Provider profile has no subject identifier")

    email = _first_verified_email(profile)
    if not email:
        raise AuthenticationError("Provider profile has no verified email")

    display_name = profile.get("name") or profile.get("displayName") or email

    try:
        return Principal(
            external_id=str(external_id),
            email=email,
            display_name=str(display_name),
            provider=provider,
            avatar_url=_first_photo(profile),
        )
    except ValidationError as e:
        raise AuthenticationError(f"Provider profile is invalid: {e}") from e


def principal_to_api(principal: Principal) -> Dict[str, Any]:
    """Render a principal as the ``/api/user`` payload."""
    return UserResponse(
        id=principal.external_id,
        email=principal.email,
        name=principal.display_name,
        provider=principal.provider.value,
        avatarUrl=principal.avatar_url,
    ).model_dump()
