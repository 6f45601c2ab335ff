"""Per-request authorization gate for upstream calls."""

from clinicrelay.auth.acquirer import TokenAcquirer


class AuthGate:
    """Every upstream-bound call obtains its bearer token here.

    Credential failures propagate as ``CredentialError``; the gate never hands
    out a stale or absent token.
    """

    def __init__(self, acquirer: TokenAcquirer):
        self.acquirer = acquirer

    async def ensure_authorized(self) -> str:
        return await self.acquirer.acquire()

    async def reauthorize(self) -> str:
        """Force a new acquisition, used after the upstream answered 401."""
        return await self.acquirer.acquire(force_refresh=True)

    async def authorization_headers(self, force_refresh: bool = False) -> dict[str, str]:
        token = await (self.reauthorize() if force_refresh else self.ensure_authorized())
        return {"Authorization": f"Bearer {token}"}
