"""Lookup of the client credentials and grant material."""

from clinicrelay.auth.cache import TokenCache
from clinicrelay.config.auth import OAuthSettings


class CredentialSource:
    """Resolves refresh tokens and client credentials from config and cache."""

    def __init__(self, settings: OAuthSettings, cache: TokenCache):
        self.settings = settings
        self.cache = cache
        self.stored_refresh_token: str | None = None

    @property
    def client_id(self) -> str:
        return self.settings.client_id or ""

    @property
    def client_secret(self) -> str:
        secret = self.settings.client_secret
        return secret.get_secret_value() if secret else ""

    @property
    def bootstrap_refresh_token(self) -> str | None:
        token = self.settings.refresh_token
        if token is None:
            return None
        return token.get_secret_value() or None

    def resolve_refresh_token(self) -> str | None:
        """Return the refresh token to use for the next grant.

        Priority: the cached token, then one restored from the credential
        store, then the bootstrap token from configuration.
        """
        return (
            self.cache.refresh_token
            or self.stored_refresh_token
            or self.bootstrap_refresh_token
        )

    def has_fallback_password_grant(self) -> bool:
        return self.password_credentials() is not None

    def password_credentials(self) -> tuple[str, str] | None:
        username = self.settings.username
        password = self.settings.password
        if not username or password is None or not password.get_secret_value():
            return None
        return username, password.get_secret_value()

    def forget_stored_refresh_token(self) -> None:
        self.stored_refresh_token = None
