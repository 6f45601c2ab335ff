"""Security configuration settings."""

from pydantic import BaseModel, Field, SecretStr


class SecuritySettings(BaseModel):
    """Security-specific configuration settings."""

    webhook_secret: SecretStr | None = Field(
        default=None,
        description="Shared secret expected in the X-Vapi-Secret header (optional)",
    )
