"""Command-line interface for the clinic relay."""

from .main import app, main


__all__ = ["app", "main"]
