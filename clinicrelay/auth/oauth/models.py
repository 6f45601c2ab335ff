"""OAuth grant requests and tagged token endpoint results."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, SecretStr


GrantType = Literal["refresh_token", "password"]


class TokenGrant(BaseModel):
    """A single OAuth2 token request."""

    grant_type: GrantType
    refresh_token: SecretStr | None = None
    username: str | None = None
    password: SecretStr | None = None

    @classmethod
    def from_refresh_token(cls, refresh_token: str) -> "TokenGrant":
        return cls(grant_type="refresh_token", refresh_token=SecretStr(refresh_token))

    @classmethod
    def from_password(cls, username: str, password: str) -> "TokenGrant":
        return cls(grant_type="password", username=username, password=SecretStr(password))

    def form_data(self, client_id: str, client_secret: str) -> dict[str, str]:
        """Build the URL-encoded form body for the token endpoint."""
        data = {
            "grant_type": self.grant_type,
            "client_id": client_id,
            "client_secret": client_secret,
        }
        if self.grant_type == "refresh_token" and self.refresh_token is not None:
            data["refresh_token"] = self.refresh_token.get_secret_value()
        elif self.grant_type == "password" and self.password is not None:
            data["username"] = self.username or ""
            data["password"] = self.password.get_secret_value()
        return data


class GrantSuccess(BaseModel):
    """The token endpoint issued a token."""

    kind: Literal["success"] = "success"
    access_token: str
    expires_in: int
    refresh_token: str | None = None


class GrantError(BaseModel):
    """The token endpoint answered but refused the grant."""

    kind: Literal["error"] = "error"
    description: str
    status_code: int | None = None
    body: str | None = None


class GrantUnreachable(BaseModel):
    """The token endpoint could not be reached."""

    kind: Literal["unreachable"] = "unreachable"
    reason: str


TokenGrantResult = Annotated[
    GrantSuccess | GrantError | GrantUnreachable, Field(discriminator="kind")
]
