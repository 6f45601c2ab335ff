"""Configuration module for the clinic relay."""

from .auth import AuthSettings, OAuthSettings
from .cors import CORSSettings
from .proxy import ProxySettings
from .security import SecuritySettings
from .server import ServerSettings
from .settings import Settings, get_settings
from .tools import ToolSettings
from .upstream import UpstreamSettings


__all__ = [
    "Settings",
    "get_settings",
    "AuthSettings",
    "CORSSettings",
    "OAuthSettings",
    "ProxySettings",
    "SecuritySettings",
    "ServerSettings",
    "ToolSettings",
    "UpstreamSettings",
]
