"""
Port definitions (interfaces) for the core domain.

Ports define the contracts between the login strategy and the outside
world. The host framework implements StrategyHost; infrastructure
adapters implement NexonGateway.
"""

from typing import Any, Protocol

from nexon_auth.core.domain import TokenBundle


class StrategyHost(Protocol):
    """
    Port (interface) for reporting the outcome of an authentication attempt.

    Implemented by whatever host framework integrates the strategy (see
    OutcomeRecorder and the FastAPI router). Exactly one of these methods
    is called per request.
    """

    def redirect(self, url: str) -> None:
        """Send the user agent to `url`."""
        ...

    def success(self, user: Any, info: Any = None) -> None:
        """Authentication succeeded for `user`."""
        ...

    def fail(self, info: Any = None) -> None:
        """Authentication failed; `info` describes why."""
        ...

    def error(self, error: BaseException) -> None:
        """An error prevented authentication from completing."""
        ...


class NexonGateway(Protocol):
    """
    Port (interface) for the three outbound Nexon calls.

    Implementations raise UpstreamCallError for any failure.
    """

    async def fetch_ticket(
        self, username: str, password: str
    ) -> tuple[str, dict[str, Any]]:
        """
        Exchange a username/password pair for a ticket.

        Returns:
            The ticket and the full parsed response
        """
        ...

    async def fetch_token(self, ticket: str) -> TokenBundle:
        """Exchange a ticket for an access token."""
        ...

    async def fetch_profile(self, access_token: str) -> str:
        """
        Fetch the raw user profile body.

        Returns:
            The response body text, unparsed
        """
        ...

    def authorize_url(self, params: dict[str, Any]) -> str:
        """Build the authorization endpoint URL carrying `params`."""
        ...


class TicketProcess(Protocol):
    """Application hook that obtains a ticket without a login form."""

    def __call__(self) -> Any:
        """Return a ticket, or an awaitable resolving to one."""
        ...
