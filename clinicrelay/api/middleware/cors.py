"""CORS middleware for the relay."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinicrelay.config.settings import Settings
from clinicrelay.core.logging import get_logger


logger = get_logger(__name__)


def setup_cors_middleware(app: FastAPI, settings: Settings) -> None:
    """Setup CORS middleware for the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Application settings containing CORS configuration
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=settings.cors.credentials,
        allow_methods=settings.cors.methods,
        allow_headers=settings.cors.headers,
    )

    logger.debug("cors_middleware_configured", origins=settings.cors.origins)
