"""Tool-call dispatch from the voice-assistant webhook to the upstream API."""

import json
import string
import urllib.parse
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from clinicrelay.auth.exceptions import CredentialError
from clinicrelay.config.tools import ToolSettings
from clinicrelay.core.errors import (
    ToolArgumentError,
    ToolError,
    ToolNotFoundError,
    UpstreamCallFailedError,
)
from clinicrelay.core.logging import get_logger
from clinicrelay.services.upstream import UpstreamClient


logger = get_logger(__name__)


class ToolCall(BaseModel):
    """One resolved tool invocation from the webhook body."""

    call_id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    arguments_invalid: bool = False


class ToolResult(BaseModel):
    """One entry of the results envelope."""

    model_config = ConfigDict(populate_by_name=True)

    tool_call_id: str = Field(alias="toolCallId")
    result: str | None = None
    error: str | None = None


class ToolResultsEnvelope(BaseModel):
    """Response body returned to the voice-assistant platform."""

    results: list[ToolResult] = Field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def _parse_arguments(raw: Any) -> tuple[dict[str, Any], bool]:
    if raw is None or raw == "":
        return {}, False
    if isinstance(raw, dict):
        return raw, False
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return {}, True
        if isinstance(decoded, dict):
            return decoded, False
    return {}, True


def parse_tool_calls(payload: Any) -> list[ToolCall]:
    """Extract tool calls from a webhook body.

    Accepts ``message.toolCallList`` and the older ``message.toolCalls``.
    Entries without an id cannot be answered and are skipped.
    """
    if not isinstance(payload, dict):
        return []
    message = payload.get("message")
    if not isinstance(message, dict):
        return []

    entries = message.get("toolCallList") or message.get("toolCalls") or []
    if not isinstance(entries, list):
        return []

    calls = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("id"):
            logger.warning("tool_call_without_id_skipped")
            continue
        function = entry.get("function") or {}
        if not isinstance(function, dict):
            function = {}
        arguments, invalid = _parse_arguments(function.get("arguments"))
        calls.append(
            ToolCall(
                call_id=str(entry["id"]),
                name=str(function.get("name") or entry.get("name") or ""),
                arguments=arguments,
                arguments_invalid=invalid,
            )
        )
    return calls


class ToolDefinition(BaseModel):
    """Maps a tool name onto an upstream endpoint."""

    name: str
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"] = "GET"
    path: str
    required: list[str] = Field(default_factory=list)
    description: str = ""

    @property
    def path_parameters(self) -> list[str]:
        return [
            field
            for _, field, _, _ in string.Formatter().parse(self.path)
            if field
        ]

    def build_request(
        self, arguments: dict[str, Any]
    ) -> tuple[str, dict[str, Any] | None, dict[str, Any] | None]:
        """Resolve the upstream path, query parameters and JSON body.

        Path placeholders are filled from the arguments; the remaining
        arguments become query parameters for GET/DELETE and the JSON body
        otherwise.

        Raises:
            ToolArgumentError: A required or path argument is missing
        """
        path_params = self.path_parameters
        needed = list(dict.fromkeys([*self.required, *path_params]))
        missing = [name for name in needed if arguments.get(name) in (None, "")]
        if missing:
            raise ToolArgumentError(
                f"Missing required arguments for {self.name}: {', '.join(missing)}",
                tool_name=self.name,
                missing=missing,
            )

        path = self.path.format(
            **{
                name: urllib.parse.quote(str(arguments[name]), safe="")
                for name in path_params
            }
        )
        rest = {k: v for k, v in arguments.items() if k not in path_params}

        if self.method in ("GET", "DELETE"):
            return path, rest or None, None
        return path, None, rest


class ToolRegistry:
    """Registered tools keyed by name."""

    def __init__(self, tools: list[ToolDefinition] | None = None):
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    @classmethod
    def from_settings(cls, tools: dict[str, ToolSettings]) -> "ToolRegistry":
        return cls(
            [
                ToolDefinition(name=name, **tool.model_dump())
                for name, tool in tools.items()
            ]
        )

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self:
            logger.warning("tool_definition_replaced", tool=tool.name)
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(f"Unknown tool: {name}", tool_name=name) from None

    def names(self) -> list[str]:
        return sorted(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


class ToolDispatcher:
    """Runs tool calls against the upstream API and builds the envelope.

    Every call yields exactly one result entry; failures become ``error``
    entries instead of exceptions so the platform never retries the webhook.
    """

    def __init__(self, registry: ToolRegistry, upstream: UpstreamClient):
        self.registry = registry
        self.upstream = upstream

    async def dispatch(self, calls: list[ToolCall]) -> ToolResultsEnvelope:
        results = []
        for call in calls:
            results.append(await self.run(call))
        return ToolResultsEnvelope(results=results)

    async def run(self, call: ToolCall) -> ToolResult:
        log = logger.bind(tool=call.name, tool_call_id=call.call_id)
        try:
            if call.arguments_invalid:
                raise ToolArgumentError(
                    f"Arguments for {call.name} are not a JSON object",
                    tool_name=call.name,
                    missing=[],
                )
            tool = self.registry.get(call.name)
            path, params, body = tool.build_request(call.arguments)
            data = await self.upstream.request_json(
                tool.method, path, params=params, json=body
            )
        except ToolError as e:
            log.warning("tool_call_rejected", error=str(e))
            return ToolResult(tool_call_id=call.call_id, error=str(e))
        except CredentialError as e:
            log.error(
                "tool_call_unauthorized", error_type=type(e).__name__, error=str(e)
            )
            return ToolResult(
                tool_call_id=call.call_id,
                error="Could not authenticate with the clinic system, please try again later",
            )
        except UpstreamCallFailedError as e:
            log.error("tool_call_upstream_failed", status_code=e.status_code)
            return ToolResult(
                tool_call_id=call.call_id,
                error=f"Clinic system request failed: {e}",
            )
        except Exception:
            log.exception("tool_call_error")
            return ToolResult(
                tool_call_id=call.call_id, error="Internal relay error"
            )

        log.info("tool_call_completed")
        return ToolResult(tool_call_id=call.call_id, result=self._render(data))

    @staticmethod
    def _render(data: Any) -> str:
        if data is None:
            return "Success"
        if isinstance(data, str):
            return data
        return json.dumps(data, ensure_ascii=False)
