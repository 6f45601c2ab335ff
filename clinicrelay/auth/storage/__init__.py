"""Credential storage backends."""

from .base import TokenStorage
from .json_file import JsonFileTokenStorage


__all__ = ["TokenStorage", "JsonFileTokenStorage"]
