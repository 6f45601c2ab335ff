"""HTTP surface of the relay."""

from clinicrelay.api.app import create_app


__all__ = ["create_app"]
