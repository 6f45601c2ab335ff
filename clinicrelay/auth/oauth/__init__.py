"""OAuth token endpoint client."""

from .client import OAuthClient
from .models import (
    GrantError,
    GrantSuccess,
    GrantUnreachable,
    TokenGrant,
    TokenGrantResult,
)


__all__ = [
    "OAuthClient",
    "GrantError",
    "GrantSuccess",
    "GrantUnreachable",
    "TokenGrant",
    "TokenGrantResult",
]
