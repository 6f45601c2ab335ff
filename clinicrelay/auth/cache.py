"""In-memory holder for the upstream bearer credential."""

import time
from collections.abc import Callable

from pydantic import SecretStr

from clinicrelay.auth.models import Credential


DEFAULT_RENEWAL_SKEW = 300.0


class TokenCache:
    """Process-wide access/refresh token pair with its expiry.

    Only the token acquirer mutates the cache. ``expires_at`` is the absolute
    expiry reported by the token endpoint; the renewal skew is applied when
    checking freshness.
    """

    def __init__(
        self,
        renewal_skew: float = DEFAULT_RENEWAL_SKEW,
        clock: Callable[[], float] = time.time,
    ):
        self.renewal_skew = renewal_skew
        self._clock = clock
        self.access_token: str | None = None
        self.refresh_token: str | None = None
        self.expires_at: float | None = None

    def now(self) -> float:
        return self._clock()

    def is_valid(self, skew: float | None = None) -> bool:
        """Check that an access token is present and outside the renewal window."""
        if self.access_token is None or self.expires_at is None:
            return False
        margin = self.renewal_skew if skew is None else skew
        return self.now() < self.expires_at - margin

    def set(
        self,
        access_token: str,
        refresh_token: str | None = None,
        *,
        expires_in: float,
    ) -> None:
        """Store a new access token.

        A missing ``refresh_token`` keeps the previous one, since grant
        servers may omit it when they do not rotate refresh tokens.
        """
        self.access_token = access_token
        if refresh_token:
            self.refresh_token = refresh_token
        self.expires_at = self.now() + expires_in

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.expires_at = None

    def seconds_remaining(self) -> float | None:
        if self.expires_at is None:
            return None
        return self.expires_at - self.now()

    def snapshot(self) -> Credential:
        return Credential(
            access_token=SecretStr(self.access_token) if self.access_token else None,
            refresh_token=SecretStr(self.refresh_token)
            if self.refresh_token
            else None,
            expires_at=self.expires_at,
        )
