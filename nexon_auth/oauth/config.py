"""
Nexon strategy configuration.

Holds the endpoints, product credentials and flow options the strategy
needs. Validates required settings on construction so a misconfigured
strategy fails at startup rather than on the first login.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Sequence, Union

from nexon_auth.core.exceptions import ConfigurationError
from nexon_auth.core.ports import TicketProcess


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("authorization_url", "token_url", "product_id", "client_secret")

FIELD_DEFAULTS = {
    "username_field": "username",
    "password_field": "password",
    "ticket_field": "ticket",
}


@dataclass(frozen=True)
class NexonConfig:
    """
    Nexon strategy options.

    Required: authorization_url, token_url, product_id, client_secret.

    The redirect leg of the flow runs only when callback_url is set. Without
    it, the strategy uses get_ticket_process if given, else the login form.
    """

    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    product_id: Optional[str] = None
    client_secret: Optional[str] = None

    ticket_url: Optional[str] = None
    user_profile_url: Optional[str] = None
    callback_url: Optional[str] = None

    username_field: str = FIELD_DEFAULTS["username_field"]
    password_field: str = FIELD_DEFAULTS["password_field"]
    ticket_field: str = FIELD_DEFAULTS["ticket_field"]

    scope: Union[str, Sequence[str], None] = None
    scope_separator: str = ","
    state: Optional[str] = None

    # bool, zero-argument callable, or callable taking the access token
    skip_user_profile: Any = False
    get_ticket_process: Optional[TicketProcess] = None
    pass_req_to_callback: bool = False

    timeout: float = 10.0
    profile_token_placement: str = "uri"

    def __post_init__(self):
        self.validate()
        for name, default in FIELD_DEFAULTS.items():
            if not getattr(self, name):
                object.__setattr__(self, name, default)
        if self.skip_user_profile is None:
            object.__setattr__(self, "skip_user_profile", False)

    def validate(self) -> None:
        """
        Check required settings.

        Raises:
            ConfigurationError: Naming the first missing required option
        """
        for name in REQUIRED_FIELDS:
            if not getattr(self, name):
                raise ConfigurationError(f"NexonStrategy requires a {name} option")
        if self.profile_token_placement not in ("uri", "header"):
            raise ConfigurationError(
                f"profile_token_placement must be 'uri' or 'header', "
                f"got {self.profile_token_placement!r}"
            )

    @property
    def uses_redirect(self) -> bool:
        """Whether requests without a ticket are sent to the authorization page."""
        return bool(self.callback_url)

    @classmethod
    def from_env(cls, **overrides: Any) -> "NexonConfig":
        """
        Load configuration from environment variables.

        Keyword overrides take precedence; use them for the options that
        can only be set in code (callables, pass_req_to_callback).
        """
        values: dict[str, Any] = {
            "authorization_url": os.getenv("NEXON_AUTHORIZATION_URL"),
            "token_url": os.getenv("NEXON_TOKEN_URL"),
            "product_id": os.getenv("NEXON_PRODUCT_ID"),
            "client_secret": os.getenv("NEXON_CLIENT_SECRET"),
            "ticket_url": os.getenv("NEXON_TICKET_URL"),
            "user_profile_url": os.getenv("NEXON_USER_PROFILE_URL"),
            "callback_url": os.getenv("NEXON_CALLBACK_URL"),
            "scope": os.getenv("NEXON_SCOPE"),
            "scope_separator": os.getenv("NEXON_SCOPE_SEPARATOR", ","),
            "state": os.getenv("NEXON_STATE"),
            "skip_user_profile": os.getenv("NEXON_SKIP_USER_PROFILE", "false").lower()
            == "true",
            "timeout": float(os.getenv("NEXON_TIMEOUT", "10")),
        }
        values.update(overrides)
        return cls(**values)


@lru_cache()
def get_nexon_config() -> NexonConfig:
    """Get Nexon configuration singleton."""
    config = NexonConfig.from_env()
    logger.info(
        "Loaded Nexon configuration",
        extra={
            "product_id": config.product_id,
            "redirect_mode": config.uses_redirect,
            "ticket_url_configured": bool(config.ticket_url),
        },
    )
    return config
