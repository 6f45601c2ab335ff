"""Confirms that a freshly issued token is accepted by the upstream API."""

import httpx

from clinicrelay.auth.exceptions import UpstreamUnreachableError
from clinicrelay.config.upstream import UpstreamSettings
from clinicrelay.core.logging import get_logger, truncate_body


logger = get_logger(__name__)


class TokenValidator:
    """Probe a cheap authenticated endpoint with a candidate token.

    The token endpoint can issue well-formed tokens that are not bound to a
    usable account, so a token is only trusted once a real API call with it
    returns 200.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: UpstreamSettings):
        self._http_client = http_client
        self.settings = settings
        self.validation_url = settings.url(settings.validation_path)

    async def validate(self, access_token: str) -> bool:
        """Return True iff the upstream accepts the token.

        Raises:
            UpstreamUnreachableError: On timeout or connection failure
        """
        try:
            response = await self._http_client.get(
                self.validation_url,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
                timeout=self.settings.validation_timeout,
            )
        except httpx.RequestError as e:
            raise UpstreamUnreachableError(
                f"Token validation request failed: {e!r}"
            ) from e

        if response.status_code == 200:
            return True

        logger.warning(
            "token_validation_rejected",
            status_code=response.status_code,
            url=self.validation_url,
            body=truncate_body(response.text),
        )
        return False
