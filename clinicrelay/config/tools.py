"""Tool definitions exposed to the voice-assistant platform."""

from typing import Literal

from pydantic import BaseModel, Field


class ToolSettings(BaseModel):
    """Mapping of one tool name onto an upstream endpoint."""

    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"] = "GET"
    path: str
    required: list[str] = Field(default_factory=list)
    description: str = ""


def default_tools() -> dict[str, ToolSettings]:
    return {
        "find_patient": ToolSettings(
            method="GET",
            path="/api/v1/patients",
            required=["last_name", "date_of_birth"],
            description="Look up a patient by surname and date of birth",
        ),
        "check_availability": ToolSettings(
            method="GET",
            path="/api/v1/appointments/availability",
            required=["date"],
            description="List free appointment slots for a day",
        ),
        "book_appointment": ToolSettings(
            method="POST",
            path="/api/v1/appointments",
            required=["patient_id", "start"],
            description="Book an appointment slot for a patient",
        ),
        "cancel_appointment": ToolSettings(
            method="DELETE",
            path="/api/v1/appointments/{appointment_id}",
            required=["appointment_id"],
            description="Cancel an existing appointment",
        ),
    }
