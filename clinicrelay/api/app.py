"""FastAPI application factory for the clinic relay."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from clinicrelay import __version__
from clinicrelay.api.middleware.cors import setup_cors_middleware
from clinicrelay.api.middleware.errors import setup_error_handlers
from clinicrelay.api.routes.health import router as health_router
from clinicrelay.api.routes.proxy import router as proxy_router
from clinicrelay.api.routes.tools import router as tools_router
from clinicrelay.auth.manager import CredentialsManager
from clinicrelay.config.settings import Settings, get_settings
from clinicrelay.core.logging import get_logger
from clinicrelay.services.tools import ToolDispatcher, ToolRegistry
from clinicrelay.services.upstream import UpstreamClient


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup acquisition and shutdown of the shared HTTP client."""
    settings: Settings = app.state.settings
    manager: CredentialsManager = app.state.credentials_manager

    logger.info(
        "relay_starting",
        version=__version__,
        upstream=settings.upstream.base_url,
        tools=app.state.tool_dispatcher.registry.names(),
        proxy_enabled=settings.proxy.enabled,
        category="lifecycle",
    )

    acquired = await manager.initialize()
    logger.info(
        "startup_credential_status",
        acquired=acquired,
        state=manager.acquirer.state.value,
        category="lifecycle",
    )

    yield

    await manager.aclose()
    logger.info("relay_stopped", category="lifecycle")


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the relay application.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        http_client: Shared upstream HTTP client (created and owned if omitted)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Clinic Relay",
        description="Relay between a voice-assistant platform and a clinic API",
        version=__version__,
        lifespan=lifespan,
    )

    manager = CredentialsManager(settings, http_client=http_client)
    upstream = UpstreamClient(manager.http_client, manager.gate, settings.upstream)
    registry = ToolRegistry.from_settings(settings.tools)
    if not len(registry):
        logger.warning("no_tools_configured")

    app.state.settings = settings
    app.state.credentials_manager = manager
    app.state.upstream_client = upstream
    app.state.tool_dispatcher = ToolDispatcher(registry, upstream)

    setup_cors_middleware(app, settings)
    setup_error_handlers(app)

    app.include_router(health_router)
    app.include_router(tools_router)
    if settings.proxy.enabled:
        app.include_router(proxy_router)

    return app
