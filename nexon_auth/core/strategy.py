"""
Nexon login strategy.

Runs one authentication attempt per request and reports a single outcome
to the host:

    locate ticket -> (redirect | ticket process | login form) -> token
    -> optional profile -> verify callback -> success / fail / error
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from nexon_auth.core.callbacks import (
    VerifyCallback,
    maybe_await,
    resolve_skip_profile,
)
from nexon_auth.core.domain import NexonProfile, RequestSnapshot, TokenBundle
from nexon_auth.core.exceptions import (
    ConfigurationError,
    NexonAuthError,
    UpstreamCallError,
)
from nexon_auth.core.locator import lookup_first
from nexon_auth.core.ports import NexonGateway, StrategyHost
from nexon_auth.infrastructure.nexon_client import NexonClient
from nexon_auth.oauth.config import NexonConfig


logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = "Missing credentials"

Scope = Union[str, Sequence[str], None]


class NexonStrategy:
    """
    Authentication strategy for Nexon accounts.

    Args:
        config: Strategy options, as a NexonConfig or a mapping of its fields
        verify: Application verify callback, either a VerifyCallback or a
            plain callable whose parameter count selects the call shape
        gateway: Outbound client; defaults to NexonClient(config)
    """

    name = "nexon"

    def __init__(
        self,
        config: NexonConfig | Mapping[str, Any],
        verify: Any,
        gateway: Optional[NexonGateway] = None,
    ):
        if config is None:
            raise ConfigurationError("NexonStrategy requires options")
        if isinstance(config, Mapping):
            config = NexonConfig(**config)

        self.config = config
        self._verify = VerifyCallback.coerce(verify, pass_request=config.pass_req_to_callback)
        self._skip_profile = resolve_skip_profile(config.skip_user_profile)

        self._gateway = gateway if gateway is not None else NexonClient(config)

    # ------------------------------------------------------------------
    # Flow dispatch
    # ------------------------------------------------------------------

    async def authenticate(
        self,
        request: RequestSnapshot,
        host: StrategyHost,
        *,
        scope: Scope = None,
        state: Optional[str] = None,
    ) -> None:
        """
        Run one authentication attempt and report its outcome to `host`.

        Priority: inbound ticket, then redirect (callback_url set), then
        get_ticket_process, then login form. Per-call scope/state override
        the configured ones for the redirect leg.
        """
        cfg = self.config
        ticket = lookup_first(cfg.ticket_field, request.body, request.query)

        try:
            if ticket:
                logger.info("Authenticating with inbound ticket", extra={"provider": self.name})
                await self.session_with_ticket(request, ticket, host)
                return

            if cfg.uses_redirect:
                url = self.authorization_url(scope=scope, state=state)
                logger.info("Redirecting to Nexon login", extra={"provider": self.name})
                host.redirect(url)
                return

            if cfg.get_ticket_process is not None:
                ticket = await self._run_ticket_process()
                await self.session_with_ticket(request, ticket, host)
                return

            username = lookup_first(cfg.username_field, request.body, request.query)
            password = lookup_first(cfg.password_field, request.body, request.query)
            if not username or not password:
                logger.info("Login form is missing credentials", extra={"provider": self.name})
                host.fail(MISSING_CREDENTIALS)
                return

            ticket, _ = await self._gateway.fetch_ticket(username, password)
            await self.session_with_ticket(request, ticket, host)

        except ConfigurationError:
            raise
        except NexonAuthError as e:
            logger.warning(f"Nexon login failed: {e}", extra={"provider": self.name})
            host.error(e)
        except Exception as e:
            logger.error(f"Nexon login failed unexpectedly: {e}", exc_info=True)
            host.error(e)

    def authorization_url(self, scope: Scope = None, state: Optional[str] = None) -> str:
        """Build the Nexon login URL for the redirect leg."""
        cfg = self.config
        params: dict[str, Any] = {
            "prod_id": cfg.product_id,
            "redirect_uri": cfg.callback_url,
        }

        scope = scope or cfg.scope
        if scope:
            if not isinstance(scope, str):
                scope = cfg.scope_separator.join(scope)
            params["scope"] = scope

        state = state or cfg.state
        if state:
            params["state"] = state

        return self._gateway.authorize_url(params)

    async def _run_ticket_process(self) -> str:
        try:
            ticket = await maybe_await(self.config.get_ticket_process())
        except Exception as e:
            raise UpstreamCallError("ticket process failed", e) from e

        if not ticket:
            raise UpstreamCallError("ticket process returned no ticket")
        return ticket

    # ------------------------------------------------------------------
    # Token / profile chain
    # ------------------------------------------------------------------

    async def session_with_ticket(
        self, request: RequestSnapshot, ticket: str, host: StrategyHost
    ) -> None:
        """
        Exchange `ticket` for tokens, load the profile and run verify.

        Raises:
            UpstreamCallError: If the token or profile call fails
            ProfileParseError: If the profile body is malformed
        """
        tokens = await self._gateway.fetch_token(ticket)
        profile = await self.load_user_profile(tokens.access_token)
        await self._run_verify(request, tokens, profile, host)

    async def load_user_profile(self, access_token: str) -> Optional[NexonProfile]:
        """Fetch the profile unless the skip predicate says otherwise."""
        try:
            skip = await self._skip_profile(access_token)
        except Exception as e:
            raise UpstreamCallError("skip_user_profile predicate failed", e) from e

        if skip:
            logger.debug("Skipping user profile", extra={"provider": self.name})
            return None
        return await self.user_profile(access_token)

    async def user_profile(self, access_token: str) -> NexonProfile:
        """
        Fetch and normalize the Nexon user profile.

        Raises:
            UpstreamCallError: If the request fails
            ProfileParseError: If the body is not a JSON object
        """
        body = await self._gateway.fetch_profile(access_token)
        return NexonProfile.from_response(body)

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    async def _run_verify(
        self,
        request: RequestSnapshot,
        tokens: TokenBundle,
        profile: Optional[NexonProfile],
        host: StrategyHost,
    ) -> None:
        def verified(error: Any = None, user: Any = None, info: Any = None) -> None:
            if error:
                host.error(error)
            elif not user:
                host.fail(info)
            else:
                host.success(user, info)

        try:
            forwarded = request.native if request.native is not None else request
            await self._verify.invoke(forwarded, tokens, profile, verified)
        except Exception as e:
            logger.error(f"Verify callback raised: {e}", exc_info=True)
            host.error(e)
