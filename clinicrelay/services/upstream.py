"""Authorized client for business calls to the upstream clinic API."""

from typing import Any

import httpx

from clinicrelay.auth.gate import AuthGate
from clinicrelay.config.upstream import UpstreamSettings
from clinicrelay.core.errors import UpstreamCallFailedError
from clinicrelay.core.logging import get_logger, truncate_body


logger = get_logger(__name__)


class UpstreamClient:
    """Sends upstream requests with a verified bearer token.

    A 401 answer triggers one forced re-acquisition and exactly one retry.
    A second 401 is surfaced as ``UpstreamCallFailedError``.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        gate: AuthGate,
        settings: UpstreamSettings,
    ):
        self._http_client = http_client
        self.gate = gate
        self.settings = settings

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a request and return the upstream response.

        Raises:
            CredentialError: No fresh token could be obtained
            UpstreamCallFailedError: Network failure, or 401 after the retry
        """
        url = self.settings.url(path)
        token = await self.gate.ensure_authorized()
        response = await self._send_once(
            method, url, token, params, json, content, headers, timeout
        )

        if response.status_code != 401:
            return response

        logger.warning("upstream_unauthorized_retrying", method=method, url=url)
        token = await self.gate.reauthorize()
        response = await self._send_once(
            method, url, token, params, json, content, headers, timeout
        )

        if response.status_code == 401:
            logger.error("upstream_unauthorized_after_retry", method=method, url=url)
            raise UpstreamCallFailedError(
                "Upstream rejected the refreshed token",
                status_code=401,
                body=truncate_body(response.text),
            )
        return response

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
    ) -> Any:
        """Send a request and decode a successful response body.

        Returns:
            Decoded JSON, or the raw text when the body is not JSON

        Raises:
            CredentialError: No fresh token could be obtained
            UpstreamCallFailedError: Network failure or non-2xx status
        """
        response = await self.send(method, path, params=params, json=json)

        if not response.is_success:
            body = truncate_body(response.text)
            logger.warning(
                "upstream_call_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                body=body,
            )
            raise UpstreamCallFailedError(
                f"Upstream returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _send_once(
        self,
        method: str,
        url: str,
        token: str,
        params: Any,
        json: Any,
        content: bytes | None,
        headers: dict[str, str] | None,
        timeout: float | None,
    ) -> httpx.Response:
        request_headers = {"Accept": "application/json", **(headers or {})}
        request_headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._http_client.request(
                method,
                url,
                params=params,
                json=json,
                content=content,
                headers=request_headers,
                timeout=timeout or self.settings.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error("upstream_timeout", method=method, url=url)
            raise UpstreamCallFailedError(
                "Upstream API did not respond in time", timed_out=True, cause=e
            ) from e
        except httpx.RequestError as e:
            logger.error("upstream_unreachable", method=method, url=url, error=str(e))
            raise UpstreamCallFailedError(
                f"Upstream API unreachable: {e!r}", cause=e
            ) from e

        logger.debug(
            "upstream_response",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        return response
