"""Token acquisition state machine with single-flight coordination."""

import asyncio

from clinicrelay.auth.cache import TokenCache
from clinicrelay.auth.exceptions import (
    CredentialError,
    CredentialsStorageError,
    GrantRejectedError,
    NoCredentialAvailableError,
    TokenInvalidError,
    UpstreamUnreachableError,
)
from clinicrelay.auth.models import AcquisitionState
from clinicrelay.auth.oauth.client import OAuthClient
from clinicrelay.auth.oauth.models import (
    GrantError,
    GrantSuccess,
    GrantUnreachable,
    TokenGrant,
)
from clinicrelay.auth.source import CredentialSource
from clinicrelay.auth.storage.base import TokenStorage
from clinicrelay.auth.validator import TokenValidator
from clinicrelay.core.logging import get_logger


logger = get_logger(__name__)


class TokenAcquirer:
    """Obtains, validates and commits upstream bearer tokens.

    At most one acquisition runs at a time. Callers arriving while one is in
    flight await its outcome instead of issuing their own token request.
    A failed acquisition clears the cache and is not retried here; the next
    caller starts a fresh attempt.
    """

    def __init__(
        self,
        cache: TokenCache,
        source: CredentialSource,
        oauth_client: OAuthClient,
        validator: TokenValidator,
        storage: TokenStorage | None = None,
    ):
        self.cache = cache
        self.source = source
        self._oauth_client = oauth_client
        self._validator = validator
        self._storage = storage
        self._inflight: asyncio.Task[str] | None = None
        self._state = AcquisitionState.NEEDS_TOKEN
        self.last_error: str | None = None

    @property
    def state(self) -> AcquisitionState:
        if self._state is AcquisitionState.SUCCESS and not self.cache.is_valid():
            return AcquisitionState.NEEDS_TOKEN
        return self._state

    @property
    def storage(self) -> TokenStorage | None:
        return self._storage

    async def initialize(self, acquire: bool = True) -> bool:
        """Restore persisted credentials and perform the startup acquisition.

        Failures are logged and reported through the return value; requests
        will retry acquisition lazily.

        Returns:
            True if a token was acquired
        """
        if self._storage is not None:
            try:
                credential = await self._storage.load()
            except CredentialsStorageError as e:
                logger.warning("stored_credentials_unreadable", error=str(e))
                credential = None
            if credential is not None and credential.refresh_token is not None:
                self.source.stored_refresh_token = (
                    credential.refresh_token.get_secret_value()
                )
                logger.info(
                    "stored_refresh_token_restored",
                    location=self._storage.get_location(),
                )

        if not acquire:
            return False

        try:
            await self.acquire()
        except CredentialError as e:
            logger.warning(
                "startup_token_acquisition_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            return False
        return True

    async def acquire(self, force_refresh: bool = False) -> str:
        """Return a fresh access token, acquiring one if needed.

        Args:
            force_refresh: Ignore the cached token, e.g. after an upstream 401

        Raises:
            NoCredentialAvailableError: Nothing to present to the token endpoint
            GrantRejectedError: The token endpoint refused the grant
            TokenInvalidError: The issued token failed validation
            UpstreamUnreachableError: Token or validation endpoint unreachable
        """
        if not force_refresh and self.cache.is_valid():
            return self.cache.access_token  # type: ignore[return-value]

        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._acquire(force_refresh))
            task.add_done_callback(self._on_acquisition_done)
            self._inflight = task
        else:
            logger.debug("token_acquisition_joined", forced=force_refresh)

        # A waiter going away must not cancel the shared acquisition
        return await asyncio.shield(task)

    def select_grant(self) -> TokenGrant:
        """Pick the grant for the next token request.

        A refresh token is always preferred; the password grant is only used
        when no refresh token is known at all.
        """
        refresh_token = self.source.resolve_refresh_token()
        if refresh_token:
            return TokenGrant.from_refresh_token(refresh_token)

        password_credentials = self.source.password_credentials()
        if password_credentials is not None:
            username, password = password_credentials
            return TokenGrant.from_password(username, password)

        raise NoCredentialAvailableError(
            "No refresh token available and no password fallback configured"
        )

    async def _acquire(self, forced: bool) -> str:
        self._state = AcquisitionState.ACQUIRING
        grant: TokenGrant | None = None
        try:
            grant = self.select_grant()
            logger.info(
                "token_acquisition_started",
                grant_type=grant.grant_type,
                forced=forced,
            )
            result = await self._oauth_client.request_token(
                grant, self.source.client_id, self.source.client_secret
            )
            success = self._check_grant_result(grant, result)

            if not await self._validator.validate(success.access_token):
                raise TokenInvalidError(
                    "Issued token was rejected by the upstream validation endpoint"
                )
        except Exception as e:
            await self._fail(e, grant)
            raise

        # Keep the refresh token that was presented when the server does not rotate it
        refresh_token = success.refresh_token
        if refresh_token is None and grant.refresh_token is not None:
            refresh_token = grant.refresh_token.get_secret_value()
        self.cache.set(
            success.access_token,
            refresh_token,
            expires_in=success.expires_in,
        )
        self._state = AcquisitionState.SUCCESS
        self.last_error = None
        logger.info(
            "token_acquisition_succeeded",
            grant_type=grant.grant_type,
            expires_in=success.expires_in,
            refresh_token_rotated=success.refresh_token is not None,
        )
        await self._persist()
        return success.access_token

    def _check_grant_result(
        self, grant: TokenGrant, result: GrantSuccess | GrantError | GrantUnreachable
    ) -> GrantSuccess:
        if isinstance(result, GrantUnreachable):
            raise UpstreamUnreachableError(result.reason)
        if isinstance(result, GrantError):
            raise GrantRejectedError(
                result.description,
                grant_type=grant.grant_type,
                status_code=result.status_code,
                body=result.body,
            )
        if result.expires_in <= self.cache.renewal_skew:
            raise GrantRejectedError(
                f"Token lifetime {result.expires_in}s does not exceed the "
                f"renewal skew of {self.cache.renewal_skew:.0f}s",
                grant_type=grant.grant_type,
                status_code=200,
            )
        return result

    async def _fail(self, error: Exception, grant: TokenGrant | None) -> None:
        self.cache.clear()
        self.source.forget_stored_refresh_token()
        self._state = AcquisitionState.FAILED
        self.last_error = f"{type(error).__name__}: {error}"

        grant_type = grant.grant_type if grant else None
        if isinstance(error, NoCredentialAvailableError):
            logger.error("no_credential_available", error=str(error))
        elif isinstance(error, GrantRejectedError):
            logger.error(
                "token_grant_rejected",
                grant_type=grant_type,
                status_code=error.status_code,
                body=error.body,
                error=str(error),
            )
        elif isinstance(error, TokenInvalidError):
            logger.error("token_validation_failed", grant_type=grant_type)
        elif isinstance(error, UpstreamUnreachableError):
            logger.error(
                "token_upstream_unreachable", grant_type=grant_type, error=str(error)
            )
        else:
            logger.exception("token_acquisition_error", grant_type=grant_type)

        if self._storage is not None:
            try:
                await self._storage.delete()
            except CredentialsStorageError as e:
                logger.warning("credentials_delete_failed", error=str(e))

    async def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            await self._storage.save(self.cache.snapshot())
        except CredentialsStorageError as e:
            logger.warning("credentials_save_failed", error=str(e))

    def _on_acquisition_done(self, task: "asyncio.Task[str]") -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            # Mark the exception as retrieved; waiters re-raise it themselves
            task.exception()
