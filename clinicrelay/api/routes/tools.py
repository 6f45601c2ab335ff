"""Webhook endpoint receiving tool calls from the voice-assistant platform."""

from typing import Any

from fastapi import APIRouter, Depends, Request

from clinicrelay.api.dependencies import ToolDispatcherDep, verify_webhook_secret
from clinicrelay.core.logging import get_logger
from clinicrelay.services.tools import ToolResultsEnvelope, parse_tool_calls


router = APIRouter(tags=["tools"])
logger = get_logger(__name__)


@router.post("/vapi/tools", dependencies=[Depends(verify_webhook_secret)])
async def tool_calls(
    request: Request, dispatcher: ToolDispatcherDep
) -> dict[str, Any]:
    """Run every tool call of the webhook and answer with the results envelope.

    Always answers HTTP 200 so the platform does not retry; failures are
    reported per call in the ``error`` field.
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("tool_webhook_invalid_json")
        return ToolResultsEnvelope().to_response()

    calls = parse_tool_calls(payload)
    logger.info(
        "tool_webhook_received",
        call_count=len(calls),
        tools=[call.name for call in calls],
    )
    envelope = await dispatcher.dispatch(calls)
    return envelope.to_response()
