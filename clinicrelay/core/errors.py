"""Core error types for the relay."""


class RelayError(Exception):
    """Base exception for all relay-related errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize with a message and optional cause.

        Args:
            message: The error message
            cause: The underlying exception that caused this error
        """
        super().__init__(message)
        self.cause = cause
        if cause:
            # Use Python's exception chaining
            self.__cause__ = cause


class UpstreamCallFailedError(RelayError):
    """Error raised when an authorized call to the upstream API fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        timed_out: bool = False,
        cause: Exception | None = None,
    ):
        """Initialize with a message, upstream status and body excerpt.

        Args:
            message: The error message
            status_code: Upstream HTTP status, None when no response arrived
            body: Truncated upstream response body
            timed_out: Whether the call hit its timeout
            cause: The underlying exception
        """
        super().__init__(message, cause)
        self.status_code = status_code
        self.body = body
        self.timed_out = timed_out


class ToolError(RelayError):
    """Error raised while dispatching a tool call."""

    def __init__(
        self, message: str, tool_name: str | None = None, cause: Exception | None = None
    ):
        super().__init__(message, cause)
        self.tool_name = tool_name


class ToolNotFoundError(ToolError):
    """The requested tool is not registered."""

    pass


class ToolArgumentError(ToolError):
    """A tool call is missing required arguments."""

    def __init__(self, message: str, tool_name: str, missing: list[str]):
        super().__init__(message, tool_name)
        self.missing = missing
