"""Credentials manager wiring the token lifecycle components together."""

from datetime import UTC, datetime
from typing import Any

import httpx

from clinicrelay.auth.acquirer import TokenAcquirer
from clinicrelay.auth.cache import TokenCache
from clinicrelay.auth.gate import AuthGate
from clinicrelay.auth.models import CredentialStatus
from clinicrelay.auth.oauth.client import OAuthClient
from clinicrelay.auth.source import CredentialSource
from clinicrelay.auth.storage import JsonFileTokenStorage, TokenStorage
from clinicrelay.auth.validator import TokenValidator
from clinicrelay.config.settings import Settings
from clinicrelay.core.logging import get_logger


logger = get_logger(__name__)


class CredentialsManager:
    """Owns the single upstream credential of the process."""

    # ==================== Initialization ====================

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        storage: TokenStorage | None = None,
        cache: TokenCache | None = None,
    ):
        """Initialize credentials manager.

        Args:
            settings: Application settings
            http_client: Shared HTTP client (created and owned if not provided)
            storage: Credential store (JSON file from settings if not provided)
            cache: Token cache (created from settings if not provided)
        """
        self.settings = settings
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            verify=settings.upstream.verify_tls
        )

        if storage is None and settings.auth.storage_path is not None:
            storage = JsonFileTokenStorage(settings.auth.storage_path)

        self.cache = cache or TokenCache(
            renewal_skew=settings.auth.renewal_skew_seconds
        )
        self.source = CredentialSource(settings.oauth, self.cache)
        self.oauth_client = OAuthClient(
            self.http_client, settings.oauth, settings.upstream
        )
        self.validator = TokenValidator(self.http_client, settings.upstream)
        self.acquirer = TokenAcquirer(
            self.cache,
            self.source,
            self.oauth_client,
            self.validator,
            storage=storage,
        )
        self.gate = AuthGate(self.acquirer)

    async def __aenter__(self) -> "CredentialsManager":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self.http_client.aclose()

    # ==================== Lifecycle ====================

    async def initialize(self) -> bool:
        """Startup hook: restore stored credentials and try a first acquisition."""
        missing = self.settings.missing_credentials()
        if missing:
            logger.warning("oauth_client_credentials_missing", missing=missing)

        if not self.source.resolve_refresh_token() and not (
            self.source.has_fallback_password_grant()
            or self.settings.auth.storage_path
        ):
            logger.warning(
                "no_bootstrap_credential_configured",
                hint="Set OAUTH__REFRESH_TOKEN or OAUTH__USERNAME/OAUTH__PASSWORD",
            )

        return await self.acquirer.initialize(
            acquire=self.settings.auth.acquire_on_startup
        )

    async def get_access_token(self) -> str:
        return await self.gate.ensure_authorized()

    async def refresh_token(self) -> str:
        """Acquire a new token regardless of the cached one."""
        logger.info("token_refresh_forced")
        return await self.gate.reauthorize()

    # ==================== Status ====================

    def status(self) -> CredentialStatus:
        snapshot = self.cache.snapshot()
        storage = self.acquirer.storage
        remaining = self.cache.seconds_remaining()
        return CredentialStatus(
            state=self.acquirer.state,
            has_access_token=snapshot.access_token is not None,
            has_refresh_token=self.source.resolve_refresh_token() is not None,
            expires_at=snapshot.expires_at_datetime,
            seconds_remaining=round(remaining, 1) if remaining is not None else None,
            fresh=self.cache.is_valid(),
            storage=storage.get_location() if storage else None,
            last_error=self.acquirer.last_error,
        )

    def checked_at(self) -> datetime:
        return datetime.fromtimestamp(self.cache.now(), tz=UTC)
