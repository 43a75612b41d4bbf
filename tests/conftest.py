"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient

from app.auth.config import AuthConfig
from app.auth.models import Principal, Provider
from app.auth.oauth import GoogleOAuth
from app.auth.session_store import SessionStore
from app.main import create_app

GOOGLE_PROFILE = {
    "sub": "42",
    "email": "a@x.com",
    "name": "A",
    "picture": "http://img",
}


class FakeClock:
    """Controllable replacement for the session store clock."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now += timedelta(**kwargs)


class FakeGoogle:
    """Records requests and answers like Google's token and userinfo endpoints."""

    def __init__(self) -> None:
        self.valid_code = "validcode"
        self.access_token = "test-access-token"
        self.profile: Any = dict(GOOGLE_PROFILE)
        self.userinfo_status = 200
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/token":
            form = dict(httpx.QueryParams(request.content.decode("utf-8")))
            if form.get("code") != self.valid_code:
                return httpx.Response(400, json={"error": "invalid_grant"})
            return httpx.Response(
                200,
                json={
                    "access_token": self.access_token,
                    "token_type": "Bearer",
                    "expires_in": 3600,
                },
            )
        if request.url.path == "/v1/userinfo":
            if request.headers.get("Authorization") != f"Bearer {self.access_token}":
                return httpx.Response(401, json={"error": "invalid_token"})
            return httpx.Response(self.userinfo_status, json=self.profile)
        return httpx.Response(404)


@pytest.fixture
def sample_secret_key() -> str:
    """Provide a sample secret key for testing."""
    return "test-secret-key-12345"


@pytest.fixture
def configured_env(monkeypatch: pytest.MonkeyPatch, sample_secret_key: str) -> None:
    """Set Google credentials in the environment."""
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("BASE_URL", "http://localhost:8000")
    monkeypatch.setenv("SECRET_KEY", sample_secret_key)
    monkeypatch.delenv("GOOGLE_CALLBACK_URL", raising=False)
    monkeypatch.delenv("COOKIE_SECURE", raising=False)
    monkeypatch.delenv("OAUTH_TIMEOUT_SECONDS", raising=False)


@pytest.fixture
def auth_config(configured_env: None) -> AuthConfig:
    """Provide a fully configured AuthConfig."""
    return AuthConfig()


@pytest.fixture
def unconfigured_auth_config(
    monkeypatch: pytest.MonkeyPatch, sample_secret_key: str
) -> AuthConfig:
    """Provide an AuthConfig without Google credentials."""
    monkeypatch.delenv("GOOGLE_CLIENT_ID", raising=False)
    monkeypatch.delenv("GOOGLE_CLIENT_SECRET", raising=False)
    monkeypatch.setenv("SECRET_KEY", sample_secret_key)
    monkeypatch.delenv("COOKIE_SECURE", raising=False)
    return AuthConfig()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def session_store(clock: FakeClock) -> SessionStore:
    """Provide a session store driven by the fake clock."""
    return SessionStore(clock=clock)


@pytest.fixture
def fake_google() -> FakeGoogle:
    """Provide a fake Google backend."""
    return FakeGoogle()


@pytest.fixture
def oauth_client_kwargs(fake_google: FakeGoogle) -> Dict[str, Any]:
    """Route OAuth HTTP traffic to the fake Google backend."""
    return {"transport": httpx.MockTransport(fake_google.handler)}


@pytest.fixture
def google_oauth(
    session_store: SessionStore,
    auth_config: AuthConfig,
    oauth_client_kwargs: Dict[str, Any],
) -> GoogleOAuth:
    """Provide a GoogleOAuth handler wired to the fake backend."""
    return GoogleOAuth(
        session_store, config=auth_config, client_kwargs=oauth_client_kwargs
    )


@pytest.fixture
def test_client(
    auth_config: AuthConfig,
    session_store: SessionStore,
    oauth_client_kwargs: Dict[str, Any],
) -> Generator[TestClient, None, None]:
    """Provide a test client for a configured application."""
    app = create_app(
        config=auth_config,
        session_store=session_store,
        oauth_client_kwargs=oauth_client_kwargs,
    )
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_principal() -> Callable[..., Principal]:
    """Build principals with overridable fields."""

    def _make(**overrides: Any) -> Principal:
        fields = {
            "external_id": "google-123456",
            "email": "test@example.com",
            "display_name": "Test User",
            "provider": Provider.GOOGLE,
            "avatar_url": "https://example.com/picture.jpg",
        }
        fields.update(overrides)
        return Principal(**fields)

    return _make


@pytest.fixture
def mock_principal(make_principal: Callable[..., Principal]) -> Principal:
    """Provide a sample principal."""
    return make_principal()
