"""Upstream call and tool dispatch services."""

from clinicrelay.services.tools import (
    ToolCall,
    ToolDefinition,
    ToolDispatcher,
    ToolRegistry,
    ToolResult,
    ToolResultsEnvelope,
    parse_tool_calls,
)
from clinicrelay.services.upstream import UpstreamClient


__all__ = [
    "ToolCall",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolRegistry",
    "ToolResult",
    "ToolResultsEnvelope",
    "UpstreamClient",
    "parse_tool_calls",
]
