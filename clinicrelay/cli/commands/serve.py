"""Run the relay HTTP server."""

from typing import Annotated

import typer
import uvicorn

from clinicrelay.config.settings import get_settings
from clinicrelay.core.logging import get_logger, setup_logging


logger = get_logger(__name__)


def serve(
    host: Annotated[
        str | None, typer.Option("--host", help="Host to bind (SERVER__HOST)")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="Port to bind (SERVER__PORT)")
    ] = None,
    reload: Annotated[
        bool, typer.Option("--reload", help="Reload on code changes")
    ] = False,
) -> None:
    """Start the relay server."""
    settings = get_settings()
    setup_logging(
        json_logs=settings.server.json_logs, log_level=settings.server.log_level
    )

    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    logger.info(
        "server_starting",
        host=bind_host,
        port=bind_port,
        reload=reload,
        category="lifecycle",
    )

    uvicorn.run(
        "clinicrelay.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_config=None,
    )
