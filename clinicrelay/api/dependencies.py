"""FastAPI dependency injection for relay services."""

import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from clinicrelay.auth.manager import CredentialsManager
from clinicrelay.config.settings import Settings
from clinicrelay.services.tools import ToolDispatcher
from clinicrelay.services.upstream import UpstreamClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def get_credentials_manager(request: Request) -> CredentialsManager:
    return request.app.state.credentials_manager  # type: ignore[no-any-return]


def get_upstream_client(request: Request) -> UpstreamClient:
    return request.app.state.upstream_client  # type: ignore[no-any-return]


def get_tool_dispatcher(request: Request) -> ToolDispatcher:
    return request.app.state.tool_dispatcher  # type: ignore[no-any-return]


async def verify_webhook_secret(
    settings: Annotated[Settings, Depends(get_settings)],
    x_vapi_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Reject webhook calls that do not carry the configured shared secret.

    Raises:
        HTTPException: If a secret is configured and the header does not match
    """
    expected = settings.security.webhook_secret
    if expected is None or not expected.get_secret_value():
        return
    if x_vapi_secret is None or not secrets.compare_digest(
        x_vapi_secret.encode(), expected.get_secret_value().encode()
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook secret",
        )


# Type aliases for common dependencies
SettingsDep = Annotated[Settings, Depends(get_settings)]
CredentialsManagerDep = Annotated[CredentialsManager, Depends(get_credentials_manager)]
UpstreamClientDep = Annotated[UpstreamClient, Depends(get_upstream_client)]
ToolDispatcherDep = Annotated[ToolDispatcher, Depends(get_tool_dispatcher)]
