"""
FastAPI dependencies for the Nexon login endpoints.

Provides dependency injection for configuration, the outbound client,
the application verify callback and the strategy itself.
"""

import logging
from typing import Annotated, Any, Callable

from fastapi import Depends

from nexon_auth.core.domain import NexonProfile
from nexon_auth.core.strategy import NexonStrategy
from nexon_auth.infrastructure.nexon_client import NexonClient
from nexon_auth.oauth.config import NexonConfig, get_nexon_config


logger = logging.getLogger(__name__)


def accept_profile(
    access_token: str,
    refresh_token: str | None,
    profile: NexonProfile | None,
    done: Callable[..., None],
) -> None:
    """
    Default verify callback.

    Accepts any user whose profile was loaded. Applications replace it by
    overriding get_verify_callback.
    """
    if profile is None or profile.id is None:
        done(None, None, {"message": "Nexon profile unavailable"})
        return
    done(None, {"id": profile.id, "display_name": profile.display_name}, None)


def get_verify_callback() -> Callable[..., Any]:
    """Provide the application verify callback."""
    return accept_profile


def get_gateway(
    config: Annotated[NexonConfig, Depends(get_nexon_config)],
) -> NexonClient:
    """Provide the outbound Nexon client."""
    return NexonClient(config)


def get_strategy(
    config: Annotated[NexonConfig, Depends(get_nexon_config)],
    verify: Annotated[Callable[..., Any], Depends(get_verify_callback)],
    gateway: Annotated[NexonClient, Depends(get_gateway)],
) -> NexonStrategy:
    """
    Provide the Nexon strategy.

    Built per request from cached config; construction only inspects the
    verify callback, so this is cheap.
    """
    return NexonStrategy(config, verify, gateway=gateway)


# Type aliases for cleaner dependency injection
Strategy = Annotated[NexonStrategy, Depends(get_strategy)]
