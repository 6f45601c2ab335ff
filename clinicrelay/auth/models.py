"""Credential models shared by the cache, storage and status reporting."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_serializer


class AcquisitionState(str, Enum):
    """States of the token acquisition state machine."""

    NEEDS_TOKEN = "needs_token"
    ACQUIRING = "acquiring"
    SUCCESS = "success"
    FAILED = "failed"


def _mask(value: SecretStr | None) -> str:
    if value is None:
        return "None"
    raw = value.get_secret_value()
    return f"'{raw[:4]}...{raw[-4:]}'" if len(raw) > 16 else "'***'"


class Credential(BaseModel):
    """Point-in-time copy of the cached upstream credential."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_token: SecretStr | None = Field(default=None, alias="accessToken")
    refresh_token: SecretStr | None = Field(default=None, alias="refreshToken")
    expires_at: float | None = Field(default=None, alias="expiresAt")

    @field_serializer("access_token", "refresh_token")
    def serialize_secret(self, value: SecretStr | None) -> str | None:
        """Serialize SecretStr to plain string for the credential store."""
        return value.get_secret_value() if value else None

    @property
    def expires_at_datetime(self) -> datetime | None:
        if self.expires_at is None:
            return None
        return datetime.fromtimestamp(self.expires_at, tz=UTC)

    @property
    def is_empty(self) -> bool:
        return (
            self.access_token is None
            and self.refresh_token is None
            and self.expires_at is None
        )

    def __repr__(self) -> str:
        return (
            f"Credential(access_token={_mask(self.access_token)}, "
            f"refresh_token={_mask(self.refresh_token)}, "
            f"expires_at={self.expires_at_datetime})"
        )

    __str__ = __repr__


class CredentialStatus(BaseModel):
    """Credential health without secret material."""

    state: AcquisitionState
    has_access_token: bool
    has_refresh_token: bool
    expires_at: datetime | None = None
    seconds_remaining: float | None = None
    fresh: bool = False
    storage: str | None = None
    last_error: str | None = None
