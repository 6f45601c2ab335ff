"""Shared test fixtures for the clinic relay tests.

The upstream clinic API is replaced by ``FakeClinicAPI`` served through
``httpx.MockTransport``; everything else runs as real components.
"""

import asyncio
import urllib.parse
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from pydantic import SecretStr

from clinicrelay.auth.cache import TokenCache
from clinicrelay.auth.manager import CredentialsManager
from clinicrelay.config.auth import AuthSettings, OAuthSettings
from clinicrelay.config.settings import Settings
from clinicrelay.config.upstream import UpstreamSettings


BASE_URL = "https://clinic.test"
TOKEN_URL = f"{BASE_URL}/oauth2/token"
VALIDATION_URL = f"{BASE_URL}/api/v1/practice"


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeClinicAPI:
    """Scriptable stand-in for the upstream token, validation and business API."""

    def __init__(self) -> None:
        self.token_requests: list[dict[str, str]] = []
        self.validation_tokens: list[str] = []
        self.api_requests: list[httpx.Request] = []
        self.token_responses: list[httpx.Response | Exception] = []
        self.validation_status = 200
        self.token_delay = 0.0
        self.expires_in = 3600
        self.rotate_refresh_token = True
        self.api_handler: Callable[[httpx.Request], httpx.Response] | None = None
        self.issued = 0

    @property
    def call_count(self) -> int:
        return (
            len(self.token_requests)
            + len(self.validation_tokens)
            + len(self.api_requests)
        )

    def issue_token(self) -> httpx.Response:
        self.issued += 1
        body: dict[str, Any] = {
            "access_token": f"access-{self.issued}",
            "token_type": "Bearer",
            "expires_in": self.expires_in,
        }
        if self.rotate_refresh_token:
            body["refresh_token"] = f"refresh-{self.issued}"
        return httpx.Response(200, json=body)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth2/token":
            self.token_requests.append(
                dict(urllib.parse.parse_qsl(request.content.decode()))
            )
            if self.token_delay:
                await asyncio.sleep(self.token_delay)
            if self.token_responses:
                scripted = self.token_responses.pop(0)
                if isinstance(scripted, Exception):
                    raise scripted
                return scripted
            return self.issue_token()

        if request.url.path == "/api/v1/practice":
            token = request.headers.get("Authorization", "").removeprefix("Bearer ")
            self.validation_tokens.append(token)
            return httpx.Response(self.validation_status, json={"id": "practice-1"})

        self.api_requests.append(request)
        if self.api_handler is not None:
            return self.api_handler(request)
        return httpx.Response(200, json={"ok": True})


def make_settings(**oauth: Any) -> Settings:
    oauth_defaults: dict[str, Any] = {
        "client_id": "relay-client",
        "client_secret": SecretStr("relay-secret"),
        "refresh_token": SecretStr("bootstrap-refresh"),
    }
    oauth_defaults.update(oauth)
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        upstream=UpstreamSettings(base_url=BASE_URL),
        oauth=OAuthSettings(**oauth_defaults),
        auth=AuthSettings(acquire_on_startup=False),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def clinic_api() -> FakeClinicAPI:
    return FakeClinicAPI()


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build settings with OAuth overrides, e.g. refresh_token=None."""
    return make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def http_client(
    clinic_api: FakeClinicAPI,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(clinic_api.handler)
    ) as client:
        yield client


@pytest.fixture
def cache(settings: Settings, clock: FakeClock) -> TokenCache:
    return TokenCache(renewal_skew=settings.auth.renewal_skew_seconds, clock=clock)


@pytest.fixture
def manager(
    settings: Settings, http_client: httpx.AsyncClient, cache: TokenCache
) -> CredentialsManager:
    return CredentialsManager(settings, http_client=http_client, cache=cache)


@pytest.fixture
def manager_factory(
    http_client: httpx.AsyncClient, clock: FakeClock
) -> Callable[..., CredentialsManager]:
    """Build a manager sharing the fake upstream and clock."""

    def factory(settings: Settings, **kwargs: Any) -> CredentialsManager:
        cache = TokenCache(
            renewal_skew=settings.auth.renewal_skew_seconds, clock=clock
        )
        return CredentialsManager(
            settings, http_client=http_client, cache=cache, **kwargs
        )

    return factory
