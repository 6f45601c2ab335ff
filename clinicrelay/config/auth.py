"""Authentication-related settings."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class OAuthSettings(BaseModel):
    """OAuth2 confidential client used to authenticate against the upstream API."""

    model_config = ConfigDict(extra="ignore")

    client_id: str | None = Field(
        default=None,
        description="OAuth client id (OAUTH__CLIENT_ID)",
    )

    client_secret: SecretStr | None = Field(
        default=None,
        description="OAuth client secret (OAUTH__CLIENT_SECRET)",
    )

    refresh_token: SecretStr | None = Field(
        default=None,
        description="Long-lived bootstrap refresh token (OAUTH__REFRESH_TOKEN)",
    )

    username: str | None = Field(
        default=None,
        description="Fallback username for the password grant",
    )

    password: SecretStr | None = Field(
        default=None,
        description="Fallback password for the password grant",
    )

    token_path: str = Field(
        default="/oauth2/token",
        description="Token endpoint path relative to the upstream base URL",
    )

    token_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for token endpoint requests",
        gt=0.0,
    )

    default_expires_in: int = Field(
        default=3600,
        description="Token lifetime assumed when the grant response omits expires_in",
        gt=0,
    )


class AuthSettings(BaseModel):
    """Configuration for credential caching and persistence."""

    model_config = ConfigDict(extra="ignore")

    renewal_skew_seconds: float = Field(
        300.0,
        description=(
            "Safety margin before token expiry after which the token is renewed. "
            "Use nested env var AUTH__RENEWAL_SKEW_SECONDS to override."
        ),
        ge=0.0,
    )

    storage_path: Path | None = Field(
        default=None,
        description="Optional JSON file used to persist credentials across restarts",
    )

    acquire_on_startup: bool = Field(
        default=True,
        description="Attempt a token acquisition when the server starts",
    )


__all__ = ["AuthSettings", "OAuthSettings"]
