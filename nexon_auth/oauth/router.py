"""
Nexon login API endpoints.

Provides the HTTP surface that runs the Nexon strategy:
- GET /auth/nexon - Start the login (redirect) or accept an inbound ticket
- GET /auth/nexon/callback - Provider return leg, carrying the ticket
- POST /auth/nexon/login - Login form (username/password or ticket)

The router is the strategy's host: it snapshots the request, records the
single outcome and translates it into a response.
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse, Response

from nexon_auth.core.domain import OutcomeKind, RequestSnapshot
from nexon_auth.core.exceptions import UpstreamCallError
from nexon_auth.core.locator import expand_bracket_keys
from nexon_auth.core.outcomes import OutcomeRecorder
from nexon_auth.core.strategy import NexonStrategy
from nexon_auth.oauth.dependencies import Strategy


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/nexon", tags=["nexon"])


class ResponseHost(OutcomeRecorder):
    """Strategy host that renders the recorded outcome as a FastAPI response."""

    def to_response(self) -> Response:
        outcome = self.outcome
        if outcome is None:
            logger.error("Nexon strategy finished without reporting an outcome")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"status": "error", "message": "Authentication did not complete"},
            )

        if outcome.kind is OutcomeKind.REDIRECT:
            return RedirectResponse(url=outcome.url, status_code=status.HTTP_302_FOUND)

        if outcome.kind is OutcomeKind.SUCCESS:
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content=jsonable_encoder(
                    {"status": "success", "user": outcome.user, "info": outcome.info}
                ),
            )

        if outcome.kind is OutcomeKind.FAIL:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content=jsonable_encoder({"status": "fail", "info": outcome.info}),
            )

        upstream = isinstance(outcome.error, UpstreamCallError)
        return JSONResponse(
            status_code=(
                status.HTTP_502_BAD_GATEWAY
                if upstream
                else status.HTTP_500_INTERNAL_SERVER_ERROR
            ),
            content={"status": "error", "message": str(outcome.error)},
        )


async def snapshot_request(request: Request, include_form: bool = False) -> RequestSnapshot:
    """
    Build a RequestSnapshot from a Starlette request.

    Bracketed keys such as `user[name]` are nested so strategy field paths
    resolve against them.
    """
    body = None
    if include_form:
        form = await request.form()
        body = expand_bracket_keys(form.multi_items())
    query = expand_bracket_keys(request.query_params.multi_items())
    return RequestSnapshot(body=body, query=query, native=request)


async def _run(strategy: NexonStrategy, snapshot: RequestSnapshot) -> Response:
    host = ResponseHost()
    await strategy.authenticate(snapshot, host)

    if host.outcome is not None:
        logger.info(
            f"Nexon authentication outcome: {host.outcome.kind.value}",
            extra={"provider": strategy.name, "outcome": host.outcome.kind.value},
        )
    return host.to_response()


@router.get("")
async def start(request: Request, strategy: Strategy):
    """
    Start a Nexon login.

    Redirects to the Nexon login page when a callback URL is configured,
    or completes the login directly when the query carries a ticket.
    """
    return await _run(strategy, await snapshot_request(request))


@router.get("/callback")
async def callback(request: Request, strategy: Strategy):
    """Handle the provider's return leg; the ticket arrives in the query."""
    return await _run(strategy, await snapshot_request(request))


@router.post("/login")
async def login(request: Request, strategy: Strategy):
    """
    Handle the login form.

    Reads ticket or username/password from the form body, falling back to
    the query string.
    """
    return await _run(strategy, await snapshot_request(request, include_form=True))
