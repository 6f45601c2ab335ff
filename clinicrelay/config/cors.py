"""CORS configuration settings."""

from pydantic import BaseModel, Field


class CORSSettings(BaseModel):
    """CORS policy applied to every route."""

    origins: list[str] = Field(default_factory=lambda: ["*"])

    methods: list[str] = Field(
        default_factory=lambda: [
            "GET",
            "HEAD",
            "PUT",
            "PATCH",
            "POST",
            "DELETE",
            "OPTIONS",
        ]
    )

    headers: list[str] = Field(
        default_factory=lambda: ["Content-Type", "Authorization", "Accept"]
    )

    credentials: bool = False
