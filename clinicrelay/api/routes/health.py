"""Health check endpoints for the relay."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from clinicrelay import __version__
from clinicrelay.api.dependencies import CredentialsManagerDep
from clinicrelay.auth.models import AcquisitionState


router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Clinic relay is running!"


@router.get("/health")
async def health(manager: CredentialsManagerDep) -> dict[str, Any]:
    """Report service and credential status without secret material.

    The relay stays up when the credential is missing; ``status`` is
    ``degraded`` until a token has been acquired.
    """
    credential = manager.status()
    healthy = credential.fresh or credential.state is AcquisitionState.ACQUIRING
    return {
        "status": "pass" if healthy else "degraded",
        "version": __version__,
        "checked_at": manager.checked_at().isoformat(),
        "credential": credential.model_dump(mode="json"),
    }
