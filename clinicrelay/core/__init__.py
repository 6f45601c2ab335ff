"""Core abstractions for the clinic relay."""

from clinicrelay.core.errors import (
    RelayError,
    ToolArgumentError,
    ToolError,
    ToolNotFoundError,
    UpstreamCallFailedError,
)


__all__ = [
    "RelayError",
    "ToolArgumentError",
    "ToolError",
    "ToolNotFoundError",
    "UpstreamCallFailedError",
]
