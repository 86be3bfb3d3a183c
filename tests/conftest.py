"""
Shared test configuration and fixtures.
"""

from typing import Any

import pytest

from nexon_auth.core.domain import TokenBundle
from nexon_auth.core.outcomes import OutcomeRecorder
from nexon_auth.core.strategy import NexonStrategy
from nexon_auth.infrastructure.nexon_client import NexonClient
from nexon_auth.oauth.config import NexonConfig


PROFILE_BODY = '{"user_no": "123", "profile_name": "Alice"}'


class FakeGateway(NexonClient):
    """
    In-memory stand-in for the Nexon endpoints.

    Records every outbound call in `calls`. Set the *_error attributes to
    make a stage raise. URL building is inherited from NexonClient.
    """

    def __init__(self, config: NexonConfig):
        super().__init__(config)
        self.calls: list[tuple] = []
        self.ticket = "ticket-abc"
        self.token_response: dict[str, Any] = {
            "token": "access-xyz",
            "refresh_token": "refresh-xyz",
            "expires_in": 3600,
        }
        self.profile_body = PROFILE_BODY
        self.ticket_error: Exception | None = None
        self.token_error: Exception | None = None
        self.profile_error: Exception | None = None

    async def fetch_ticket(self, username: str, password: str) -> tuple[str, dict[str, Any]]:
        self.calls.append(("ticket", username, password))
        if self.ticket_error:
            raise self.ticket_error
        return self.ticket, {"ticket": self.ticket}

    async def fetch_token(self, ticket: str) -> TokenBundle:
        self.calls.append(("token", ticket))
        if self.token_error:
            raise self.token_error
        return TokenBundle.from_token_response(self.token_response)

    async def fetch_profile(self, access_token: str) -> str:
        self.calls.append(("profile", access_token))
        if self.profile_error:
            raise self.profile_error
        return self.profile_body

    @property
    def stages(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def config_values() -> dict[str, Any]:
    """Minimal options for a login-form strategy."""
    return {
        "authorization_url": "https://accounts.nexon.test/auth/login",
        "token_url": "https://api.nexon.test/auth/token",
        "ticket_url": "https://api.nexon.test/auth/ticket",
        "user_profile_url": "https://api.nexon.test/users/me/profile",
        "product_id": "10000",
        "client_secret": "secret-key",
    }


@pytest.fixture
def config(config_values) -> NexonConfig:
    return NexonConfig(**config_values)


@pytest.fixture
def gateway(config) -> FakeGateway:
    return FakeGateway(config)


@pytest.fixture
def host() -> OutcomeRecorder:
    return OutcomeRecorder()


@pytest.fixture
def verify_calls() -> list[tuple]:
    return []


@pytest.fixture
def accepting_verify(verify_calls):
    """Four-argument verify callback that accepts any loaded profile."""

    def verify(access_token, refresh_token, profile, done):
        verify_calls.append((access_token, refresh_token, profile))
        done(None, {"id": profile.id if profile else None}, {"message": "welcome"})

    return verify


@pytest.fixture
def make_strategy(config_values, accepting_verify):
    """
    Build a strategy wired to a FakeGateway.

    Keyword arguments override config options; `verify=` replaces the
    callback. Returns (strategy, gateway).
    """

    def _make(verify=None, **overrides):
        cfg = NexonConfig(**{**config_values, **overrides})
        fake = FakeGateway(cfg)
        strategy = NexonStrategy(cfg, verify or accepting_verify, gateway=fake)
        return strategy, fake

    return _make
