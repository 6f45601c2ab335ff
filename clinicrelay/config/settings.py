from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth import AuthSettings, OAuthSettings
from .cors import CORSSettings
from .proxy import ProxySettings
from .security import SecuritySettings
from .server import ServerSettings
from .tools import ToolSettings, default_tools
from .upstream import UpstreamSettings


__all__ = ["Settings", "get_settings"]


class Settings(BaseSettings):
    """
    Configuration settings for the clinic relay.

    Settings are loaded from environment variables and a .env file.
    Environment variables take precedence over .env file values. Nested
    settings use a double underscore, e.g. OAUTH__CLIENT_ID.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="Server configuration settings",
    )

    upstream: UpstreamSettings = Field(
        default_factory=UpstreamSettings,
        description="Upstream clinic API connection settings",
    )

    oauth: OAuthSettings = Field(
        default_factory=OAuthSettings,
        description="OAuth client credentials and token endpoint settings",
    )

    auth: AuthSettings = Field(
        default_factory=AuthSettings,
        description="Credential caching and persistence settings",
    )

    security: SecuritySettings = Field(
        default_factory=SecuritySettings,
        description="Inbound webhook security settings",
    )

    cors: CORSSettings = Field(
        default_factory=CORSSettings,
        description="CORS configuration settings",
    )

    proxy: ProxySettings = Field(
        default_factory=ProxySettings,
        description="Passthrough proxy settings",
    )

    tools: dict[str, ToolSettings] = Field(
        default_factory=default_tools,
        description="Tool name to upstream endpoint mapping",
    )

    def model_dump_safe(self) -> dict[str, Any]:
        """
        Dump model data with sensitive information masked.

        Returns:
            dict: Configuration with secret values rendered as asterisks
        """
        return self.model_dump(mode="json")

    def missing_credentials(self) -> list[str]:
        """List the OAuth settings required for any grant that are unset."""
        missing = []
        if not self.oauth.client_id:
            missing.append("OAUTH__CLIENT_ID")
        if not self.oauth.client_secret:
            missing.append("OAUTH__CLIENT_SECRET")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
