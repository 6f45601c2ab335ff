"""Authentication exceptions."""


class AuthenticationError(Exception):
    """Base authentication error."""

    pass


class CredentialError(AuthenticationError):
    """A bearer token for the upstream API could not be obtained."""

    pass


class NoCredentialAvailableError(CredentialError):
    """No refresh token and no password fallback are configured."""

    pass


class GrantRejectedError(CredentialError):
    """The token endpoint refused the grant or returned an unusable answer."""

    def __init__(
        self,
        message: str,
        grant_type: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.grant_type = grant_type
        self.status_code = status_code
        self.body = body


class TokenInvalidError(CredentialError):
    """The token endpoint issued a token the upstream API does not accept."""

    pass


class UpstreamUnreachableError(CredentialError):
    """Network-level failure talking to the token or validation endpoint."""

    pass


class CredentialsStorageError(AuthenticationError):
    """Error reading or writing the credential store."""

    pass


class CredentialsInvalidError(CredentialsStorageError):
    """The credential store holds data that cannot be parsed."""

    pass
