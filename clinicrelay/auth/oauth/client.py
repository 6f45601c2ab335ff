"""OAuth client for the upstream token endpoint."""

from typing import Any

import httpx

from clinicrelay.auth.oauth.models import (
    GrantError,
    GrantSuccess,
    GrantUnreachable,
    TokenGrant,
    TokenGrantResult,
)
from clinicrelay.config.auth import OAuthSettings
from clinicrelay.config.upstream import UpstreamSettings
from clinicrelay.core.logging import get_logger, truncate_body


logger = get_logger(__name__)


class OAuthClient:
    """Issues refresh-token and password grants against the upstream API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: OAuthSettings,
        upstream: UpstreamSettings,
    ):
        """Initialize OAuth client.

        Args:
            http_client: Shared HTTP client
            settings: OAuth client configuration
            upstream: Upstream API settings providing the base URL
        """
        self._http_client = http_client
        self.settings = settings
        self.token_url = upstream.url(settings.token_path)

    async def request_token(
        self, grant: TokenGrant, client_id: str, client_secret: str
    ) -> TokenGrantResult:
        """Perform a single token request.

        HTTP-level failures are returned as ``GrantError`` and network
        failures as ``GrantUnreachable``; this method does not raise for
        either.

        Args:
            grant: Grant to present to the token endpoint
            client_id: OAuth client id
            client_secret: OAuth client secret

        Returns:
            Tagged token endpoint result
        """
        logger.debug(
            "token_request_started",
            grant_type=grant.grant_type,
            token_url=self.token_url,
        )
        try:
            response = await self._http_client.post(
                self.token_url,
                data=grant.form_data(client_id, client_secret),
                headers={"Accept": "application/json"},
                timeout=self.settings.token_timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "token_request_timeout",
                grant_type=grant.grant_type,
                timeout=self.settings.token_timeout,
            )
            return GrantUnreachable(reason=f"Token endpoint timed out: {e!r}")
        except httpx.RequestError as e:
            logger.warning(
                "token_request_unreachable",
                grant_type=grant.grant_type,
                error=str(e),
            )
            return GrantUnreachable(reason=f"Token endpoint unreachable: {e!r}")

        return self._parse_response(grant, response)

    def _parse_response(
        self, grant: TokenGrant, response: httpx.Response
    ) -> TokenGrantResult:
        body = truncate_body(response.text)

        if response.status_code != 200:
            description = self._error_description(response) or (
                f"Token endpoint returned HTTP {response.status_code}"
            )
            return GrantError(
                description=description, status_code=response.status_code, body=body
            )

        try:
            data: Any = response.json()
        except ValueError:
            return GrantError(
                description="Token endpoint returned a non-JSON body",
                status_code=response.status_code,
                body=body,
            )

        if not isinstance(data, dict):
            return GrantError(
                description="Token endpoint returned an unexpected JSON shape",
                status_code=response.status_code,
                body=body,
            )

        # Some servers report failures with HTTP 200 and an error object
        if data.get("error"):
            return GrantError(
                description=str(data.get("error_description") or data["error"]),
                status_code=response.status_code,
                body=body,
            )

        access_token = data.get("access_token")
        if not access_token:
            return GrantError(
                description="Token response has no access_token",
                status_code=response.status_code,
                body=f"keys={sorted(data.keys())}",
            )

        return GrantSuccess(
            access_token=str(access_token),
            expires_in=self._expires_in(data.get("expires_in")),
            refresh_token=str(data["refresh_token"])
            if data.get("refresh_token")
            else None,
        )

    def _expires_in(self, value: Any) -> int:
        try:
            expires_in = int(value)
        except (TypeError, ValueError):
            return self.settings.default_expires_in
        return expires_in if expires_in > 0 else self.settings.default_expires_in

    @staticmethod
    def _error_description(response: httpx.Response) -> str | None:
        try:
            data = response.json()
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        error = data.get("error_description") or data.get("error")
        return str(error) if error else None
