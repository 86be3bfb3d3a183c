"""
Core domain models for the Nexon login flow.

These models represent the data handed between the flow dispatcher,
the outbound client and the application's verify callback. They are
independent of any host framework.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from nexon_auth.core.exceptions import ProfileParseError


PROVIDER_NAME = "nexon"


def _scalar_text(value: Any) -> Any:
    """Stringify numeric and boolean values; anything else is returned as is."""
    if isinstance(value, (bool, int, float)):
        return str(value)
    return value


@dataclass(frozen=True)
class RequestSnapshot:
    """
    Read-only view of the inbound request.

    `body` and `query` are nested mappings (see locator.expand_bracket_keys).
    `native` is the host's own request object; it is only forwarded to verify
    callbacks that asked for it.
    """

    body: Optional[Mapping[str, Any]] = None
    query: Optional[Mapping[str, Any]] = None
    native: Any = None


class TokenBundle(BaseModel):
    """
    Result of the ticket-for-token exchange.

    `params` is the parsed token response with `refresh_token` removed.
    """

    access_token: str = Field(description="Nexon access token")
    refresh_token: str | None = Field(default=None, description="Refresh token, if issued")
    params: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_token_response(cls, results: dict[str, Any]) -> "TokenBundle":
        """
        Split a token endpoint response into token, refresh token and params.

        Args:
            results: Parsed JSON body from the token endpoint

        Numeric token values are stringified.

        Returns:
            TokenBundle whose params no longer carry refresh_token
        """
        params = dict(results)
        refresh_token = params.pop("refresh_token", None)
        return cls(
            access_token=_scalar_text(params["token"]),
            refresh_token=_scalar_text(refresh_token),
            params=params,
        )


class NexonProfile(BaseModel):
    """
    Normalized Nexon user profile.

    Serializes with the conventional identity keys (`displayName`, `_raw`,
    `_json`) when dumped by alias.
    """

    model_config = ConfigDict(populate_by_name=True)

    provider: str = Field(default=PROVIDER_NAME)
    id: str | None = Field(default=None, description="Nexon user number")
    display_name: str | None = Field(default=None, alias="displayName")
    raw: str = Field(alias="_raw", description="Profile body as received")
    parsed: dict[str, Any] = Field(alias="_json", description="Parsed profile body")

    @classmethod
    def from_response(cls, body: str) -> "NexonProfile":
        """
        Build a profile from the profile endpoint body.

        Raises:
            ProfileParseError: If the body is not a JSON object
        """
        try:
            data = json.loads(body)
        except ValueError as e:
            raise ProfileParseError(f"Failed to parse user profile: {e}") from e

        if not isinstance(data, dict):
            raise ProfileParseError(
                f"Failed to parse user profile: expected an object, got {type(data).__name__}"
            )

        user_no = data.get("user_no")
        return cls(
            id=str(user_no) if user_no is not None else None,
            display_name=_scalar_text(data.get("profile_name")),
            raw=body,
            parsed=data,
        )


class OutcomeKind(str, Enum):
    """Terminal outcomes a strategy can report to its host."""

    REDIRECT = "redirect"
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


@dataclass
class AuthOutcome:
    """A single reported outcome and its payload."""

    kind: OutcomeKind
    url: Optional[str] = None
    user: Any = None
    info: Any = None
    error: Optional[BaseException] = field(default=None, repr=False)
