"""Passthrough proxy settings."""

from pydantic import BaseModel, Field


class ProxySettings(BaseModel):
    """Settings for the authenticated /api passthrough."""

    enabled: bool = Field(default=True, description="Expose the /api passthrough")

    timeout: float = Field(
        default=15.0,
        description="Timeout in seconds for passthrough calls",
        gt=0.0,
    )
