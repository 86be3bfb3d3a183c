"""
Domain exceptions for the Nexon login strategy.

Only ConfigurationError escapes the strategy; the others are caught in
NexonStrategy.authenticate and reported through the host's error outcome.
"""


class ConfigurationError(ValueError):
    """
    Raised at construction time when the strategy cannot be configured.

    Covers missing required options and verify callbacks whose signature
    matches none of the supported calling conventions.
    """

    pass


class NexonAuthError(Exception):
    """Base exception for errors raised while running the login flow."""

    pass


class UpstreamCallError(NexonAuthError):
    """
    Raised when a call to a Nexon endpoint fails.

    Wraps transport failures, error statuses and unusable response bodies
    from the ticket, token and profile endpoints. The original exception is
    kept on `cause` (and chained as __cause__).
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class ProfileParseError(NexonAuthError):
    """Raised when the user profile body is not a JSON object."""

    pass
