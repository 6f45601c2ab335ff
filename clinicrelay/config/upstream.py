"""Upstream clinic API settings."""

from pydantic import BaseModel, Field, field_validator


class UpstreamSettings(BaseModel):
    """Connection settings for the upstream clinic-management API."""

    base_url: str = Field(
        default="https://localhost:6500",
        description="Base URL of the upstream API",
    )

    timeout: float = Field(
        default=15.0,
        description="Timeout in seconds for business calls to the upstream API",
        gt=0.0,
    )

    verify_tls: bool = Field(
        default=True,
        description="Verify the upstream TLS certificate",
    )

    validation_path: str = Field(
        default="/api/v1/practice",
        description="Cheap authenticated GET endpoint used to validate new tokens",
    )

    validation_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for the token validation call",
        gt=0.0,
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def url(self, path: str) -> str:
        """Join a path onto the base URL."""
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"
