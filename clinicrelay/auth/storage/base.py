"""Abstract base class for credential storage."""

from abc import ABC, abstractmethod

from clinicrelay.auth.models import Credential


class TokenStorage(ABC):
    """Abstract interface for persisting the upstream credential."""

    @abstractmethod
    async def load(self) -> Credential | None:
        """Load the stored credential, or None when nothing is stored."""

    @abstractmethod
    async def save(self, credential: Credential) -> bool:
        """Persist a credential."""

    @abstractmethod
    async def exists(self) -> bool:
        """Check whether a stored credential exists."""

    @abstractmethod
    async def delete(self) -> bool:
        """Remove the stored credential."""

    @abstractmethod
    def get_location(self) -> str:
        """Describe where the credential is stored."""
