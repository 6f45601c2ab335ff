"""Relay between a voice-assistant platform and a clinic-management API."""

from clinicrelay.core._version import __version__


__all__ = ["__version__"]
