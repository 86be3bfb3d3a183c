"""
Client for the Nexon ticket, token and profile endpoints.

Implements the NexonGateway port on top of authlib's httpx integration.
Every failure is raised as UpstreamCallError with the original exception
attached.
"""

import logging
from typing import Any

import httpx
from authlib.common.urls import add_params_to_uri
from authlib.integrations.httpx_client import AsyncOAuth2Client

from nexon_auth.core.domain import TokenBundle
from nexon_auth.core.exceptions import UpstreamCallError
from nexon_auth.oauth.config import NexonConfig


logger = logging.getLogger(__name__)


class NexonClient:
    """
    Outbound calls for the Nexon login flow.

    Each call opens its own AsyncOAuth2Client; nothing is shared between
    requests apart from the read-only config.
    """

    def __init__(self, config: NexonConfig):
        self._config = config

    def _client(self, token: dict[str, Any] | None = None) -> AsyncOAuth2Client:
        return AsyncOAuth2Client(
            client_id=self._config.product_id,
            client_secret=self._config.client_secret,
            token=token,
            token_placement=self._config.profile_token_placement,
            timeout=self._config.timeout,
        )

    async def _post_form(self, url: str | None, data: dict[str, Any], stage: str) -> dict[str, Any]:
        """
        POST `data` form-encoded to `url` and parse the JSON reply.

        Raises:
            UpstreamCallError: On network errors, error statuses or a non-object body
        """
        if not url:
            raise UpstreamCallError(f"No {stage} endpoint configured")

        try:
            async with self._client() as client:
                response = await client.request("POST", url, data=data, withhold_token=True)
                response.raise_for_status()
                results = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Nexon {stage} request failed: {e.response.status_code}",
                extra={"stage": stage, "url": url},
            )
            raise UpstreamCallError(f"{stage} request failed", e) from e
        except httpx.HTTPError as e:
            logger.error(f"Nexon {stage} network error: {e}", extra={"stage": stage, "url": url})
            raise UpstreamCallError(f"{stage} request failed", e) from e
        except ValueError as e:
            logger.error(f"Nexon {stage} returned invalid JSON", extra={"stage": stage, "url": url})
            raise UpstreamCallError(f"{stage} response is not valid JSON", e) from e

        if not isinstance(results, dict):
            raise UpstreamCallError(f"{stage} response is not a JSON object")
        return results

    async def fetch_ticket(self, username: str, password: str) -> tuple[str, dict[str, Any]]:
        """
        Exchange a username/password pair for a ticket.

        Returns:
            The ticket and the full parsed response

        Raises:
            UpstreamCallError: If the call fails or no ticket is returned
        """
        results = await self._post_form(
            self._config.ticket_url,
            {
                "user_id": username,
                "user_pw": password,
                "product_id": self._config.product_id,
            },
            stage="ticket",
        )

        ticket = results.get("ticket")
        if not ticket:
            raise UpstreamCallError("ticket response did not include a ticket")

        logger.debug("Obtained Nexon ticket", extra={"stage": "ticket"})
        return ticket, results

    async def fetch_token(self, ticket: str) -> TokenBundle:
        """
        Exchange a ticket for an access token.

        Raises:
            UpstreamCallError: If the call fails or no token is returned
        """
        results = await self._post_form(
            self._config.token_url,
            {
                "ticket": ticket,
                "secret_key": self._config.client_secret,
                "product_id": self._config.product_id,
            },
            stage="token",
        )

        if not results.get("token"):
            raise UpstreamCallError("token response did not include a token")

        bundle = TokenBundle.from_token_response(results)
        logger.debug(
            "Obtained Nexon access token",
            extra={"stage": "token", "has_refresh_token": bundle.refresh_token is not None},
        )
        return bundle

    async def fetch_profile(self, access_token: str) -> str:
        """
        GET the user profile with the access token.

        Returns:
            The response body, unparsed

        Raises:
            UpstreamCallError: On network errors or error statuses
        """
        url = self._config.user_profile_url
        if not url:
            raise UpstreamCallError("failed to fetch user profile: no user_profile_url configured")

        token = {"access_token": access_token, "token_type": "bearer"}
        try:
            async with self._client(token=token) as client:
                response = await client.request("GET", url)
                response.raise_for_status()
                return response.text
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Nexon profile request failed: {e.response.status_code}",
                extra={"stage": "profile", "url": url},
            )
            raise UpstreamCallError("failed to fetch user profile", e) from e
        except httpx.HTTPError as e:
            logger.error(f"Nexon profile network error: {e}", extra={"stage": "profile", "url": url})
            raise UpstreamCallError("failed to fetch user profile", e) from e

    def authorize_url(self, params: dict[str, Any]) -> str:
        """Append `params` and the client id to the authorization endpoint."""
        query = dict(params)
        query["client_id"] = self._config.product_id
        return add_params_to_uri(self._config.authorization_url, query)
