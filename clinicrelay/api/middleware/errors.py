"""Error handlers for the relay API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clinicrelay.auth.exceptions import CredentialError
from clinicrelay.core.errors import RelayError, UpstreamCallFailedError
from clinicrelay.core.logging import get_logger


logger = get_logger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Setup error handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(CredentialError)
    async def credential_error_handler(
        request: Request, exc: CredentialError
    ) -> JSONResponse:
        """No verified token could be obtained for the upstream call."""
        logger.error(
            "credential_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return JSONResponse(
            status_code=503,
            content={
                "error": {
                    "type": "upstream_authentication_error",
                    "message": str(exc),
                }
            },
        )

    @app.exception_handler(UpstreamCallFailedError)
    async def upstream_error_handler(
        request: Request, exc: UpstreamCallFailedError
    ) -> JSONResponse:
        """Handle failed upstream calls."""
        if exc.timed_out or exc.status_code is None:
            return JSONResponse(
                status_code=504,
                content={
                    "error": {
                        "type": "gateway_timeout",
                        "message": "Upstream API did not respond",
                    }
                },
            )
        return JSONResponse(
            status_code=502,
            content={
                "error": {
                    "type": "upstream_error",
                    "message": str(exc),
                    "remote_status": exc.status_code,
                }
            },
        )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        logger.error("relay_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"error": {"type": "relay_error", "message": str(exc)}},
        )
