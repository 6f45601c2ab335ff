"""Upstream credential lifecycle: cache, grants, validation and gating."""

from clinicrelay.auth.acquirer import TokenAcquirer
from clinicrelay.auth.cache import TokenCache
from clinicrelay.auth.exceptions import (
    AuthenticationError,
    CredentialError,
    CredentialsInvalidError,
    CredentialsStorageError,
    GrantRejectedError,
    NoCredentialAvailableError,
    TokenInvalidError,
    UpstreamUnreachableError,
)
from clinicrelay.auth.gate import AuthGate
from clinicrelay.auth.manager import CredentialsManager
from clinicrelay.auth.models import AcquisitionState, Credential, CredentialStatus
from clinicrelay.auth.source import CredentialSource
from clinicrelay.auth.storage import JsonFileTokenStorage, TokenStorage
from clinicrelay.auth.validator import TokenValidator


__all__ = [
    # Lifecycle components
    "AuthGate",
    "CredentialSource",
    "CredentialsManager",
    "TokenAcquirer",
    "TokenCache",
    "TokenValidator",
    # Models
    "AcquisitionState",
    "Credential",
    "CredentialStatus",
    # Storage
    "TokenStorage",
    "JsonFileTokenStorage",
    # Exceptions
    "AuthenticationError",
    "CredentialError",
    "CredentialsInvalidError",
    "CredentialsStorageError",
    "GrantRejectedError",
    "NoCredentialAvailableError",
    "TokenInvalidError",
    "UpstreamUnreachableError",
]
