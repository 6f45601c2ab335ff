"""Tests for tool-call parsing, request building and dispatch."""

import json

import httpx
import pytest

from clinicrelay.config.tools import default_tools
from clinicrelay.core.errors import ToolArgumentError, ToolNotFoundError
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


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry.from_settings(default_tools())


@pytest.fixture
def dispatcher(manager, http_client, settings, registry) -> ToolDispatcher:
    upstream = UpstreamClient(http_client, manager.gate, settings.upstream)
    return ToolDispatcher(registry, upstream)


class TestParseToolCalls:
    def test_tool_call_list(self) -> None:
        payload = {
            "message": {
                "type": "tool-calls",
                "toolCallList": [
                    {
                        "id": "call-1",
                        "type": "function",
                        "function": {
                            "name": "find_patient",
                            "arguments": {"last_name": "Doe"},
                        },
                    }
                ],
            }
        }

        assert parse_tool_calls(payload) == [
            ToolCall(call_id="call-1", name="find_patient", arguments={"last_name": "Doe"})
        ]

    def test_legacy_tool_calls_with_string_arguments(self) -> None:
        payload = {
            "message": {
                "toolCalls": [
                    {
                        "id": "call-2",
                        "function": {
                            "name": "check_availability",
                            "arguments": '{"date": "2026-11-02"}',
                        },
                    }
                ]
            }
        }

        (call,) = parse_tool_calls(payload)

        assert call.arguments == {"date": "2026-11-02"}
        assert call.arguments_invalid is False

    def test_unparseable_arguments_flagged(self) -> None:
        payload = {
            "message": {
                "toolCallList": [
                    {"id": "c", "function": {"name": "x", "arguments": "[1, 2"}}
                ]
            }
        }

        (call,) = parse_tool_calls(payload)

        assert call.arguments == {}
        assert call.arguments_invalid is True

    def test_entries_without_id_are_skipped(self) -> None:
        payload = {
            "message": {
                "toolCallList": [
                    {"function": {"name": "find_patient"}},
                    {"id": "call-3", "function": {"name": "find_patient"}},
                ]
            }
        }

        assert [c.call_id for c in parse_tool_calls(payload)] == ["call-3"]

    @pytest.mark.parametrize(
        "payload",
        [None, [], {}, {"message": "text"}, {"message": {"toolCallList": "x"}}],
    )
    def test_malformed_payloads(self, payload) -> None:
        assert parse_tool_calls(payload) == []


class TestToolDefinition:
    def test_query_parameters_for_get(self) -> None:
        tool = ToolDefinition(
            name="find_patient",
            path="/api/v1/patients",
            required=["last_name"],
        )

        path, params, body = tool.build_request({"last_name": "Doe", "limit": 5})

        assert path == "/api/v1/patients"
        assert params == {"last_name": "Doe", "limit": 5}
        assert body is None

    def test_path_parameters_are_substituted_and_quoted(self) -> None:
        tool = ToolDefinition(
            name="cancel_appointment",
            method="DELETE",
            path="/api/v1/appointments/{appointment_id}",
        )

        path, params, body = tool.build_request({"appointment_id": "a/1"})

        assert tool.path_parameters == ["appointment_id"]
        assert path == "/api/v1/appointments/a%2F1"
        assert params is None
        assert body is None

    def test_json_body_for_post(self) -> None:
        tool = ToolDefinition(
            name="book_appointment", method="POST", path="/api/v1/appointments"
        )

        _, params, body = tool.build_request({"patient_id": "p1", "start": "09:00"})

        assert params is None
        assert body == {"patient_id": "p1", "start": "09:00"}

    def test_missing_arguments(self) -> None:
        tool = ToolDefinition(
            name="find_patient",
            path="/api/v1/patients",
            required=["last_name", "date_of_birth"],
        )

        with pytest.raises(ToolArgumentError) as exc_info:
            tool.build_request({"last_name": ""})

        assert exc_info.value.missing == ["last_name", "date_of_birth"]
        assert exc_info.value.tool_name == "find_patient"


class TestToolRegistry:
    def test_default_tools(self, registry: ToolRegistry) -> None:
        assert registry.names() == [
            "book_appointment",
            "cancel_appointment",
            "check_availability",
            "find_patient",
        ]
        assert "find_patient" in registry
        assert len(registry) == 4

    def test_unknown_tool(self, registry: ToolRegistry) -> None:
        with pytest.raises(ToolNotFoundError, match="Unknown tool: order_pizza"):
            registry.get("order_pizza")

    def test_register_replaces_existing_tool(self, registry: ToolRegistry) -> None:
        registry.register(
            ToolDefinition(name="find_patient", path="/api/v2/patients")
        )

        assert len(registry) == 4
        assert registry.get("find_patient").path == "/api/v2/patients"


class TestToolDispatcher:
    @pytest.mark.asyncio
    async def test_one_result_per_call_in_order(
        self, dispatcher: ToolDispatcher, clinic_api
    ) -> None:
        def api(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/v1/patients":
                return httpx.Response(200, json=[{"id": "p1"}])
            return httpx.Response(204)

        clinic_api.api_handler = api
        calls = [
            ToolCall(
                call_id="a",
                name="find_patient",
                arguments={"last_name": "Doe", "date_of_birth": "1980-01-01"},
            ),
            ToolCall(call_id="b", name="order_pizza"),
            ToolCall(
                call_id="c",
                name="cancel_appointment",
                arguments={"appointment_id": "42"},
            ),
        ]

        envelope = await dispatcher.dispatch(calls)

        assert envelope.to_response() == {
            "results": [
                {"toolCallId": "a", "result": json.dumps([{"id": "p1"}])},
                {"toolCallId": "b", "error": "Unknown tool: order_pizza"},
                {"toolCallId": "c", "result": "Success"},
            ]
        }
        assert [r.url.path for r in clinic_api.api_requests] == [
            "/api/v1/patients",
            "/api/v1/appointments/42",
        ]

    @pytest.mark.asyncio
    async def test_missing_arguments_skip_upstream(
        self, dispatcher: ToolDispatcher, clinic_api
    ) -> None:
        result = await dispatcher.run(
            ToolCall(call_id="a", name="check_availability", arguments={})
        )

        assert result.error == "Missing required arguments for check_availability: date"
        assert clinic_api.call_count == 0

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, dispatcher: ToolDispatcher) -> None:
        result = await dispatcher.run(
            ToolCall(call_id="a", name="find_patient", arguments_invalid=True)
        )

        assert result.error == "Arguments for find_patient are not a JSON object"

    @pytest.mark.asyncio
    async def test_credential_failure_becomes_error_entry(
        self, dispatcher: ToolDispatcher, clinic_api
    ) -> None:
        clinic_api.token_responses.append(
            httpx.Response(400, json={"error": "invalid_grant"})
        )

        result = await dispatcher.run(
            ToolCall(call_id="a", name="check_availability", arguments={"date": "d"})
        )

        assert result.result is None
        assert result.error.startswith("Could not authenticate")
        assert clinic_api.api_requests == []

    @pytest.mark.asyncio
    async def test_upstream_failure_becomes_error_entry(
        self, dispatcher: ToolDispatcher, clinic_api
    ) -> None:
        clinic_api.api_handler = lambda request: httpx.Response(500, text="boom")

        result = await dispatcher.run(
            ToolCall(call_id="a", name="check_availability", arguments={"date": "d"})
        )

        assert result.error == "Clinic system request failed: Upstream returned HTTP 500"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_error_entry(
        self, dispatcher: ToolDispatcher, monkeypatch
    ) -> None:
        async def broken(*args, **kwargs):
            raise RuntimeError("bug")

        monkeypatch.setattr(dispatcher.upstream, "request_json", broken)

        result = await dispatcher.run(
            ToolCall(call_id="a", name="check_availability", arguments={"date": "d"})
        )

        assert result == ToolResult(tool_call_id="a", error="Internal relay error")


def test_empty_envelope() -> None:
    assert ToolResultsEnvelope().to_response() == {"results": []}
