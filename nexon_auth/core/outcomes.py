"""
Outcome recording for strategy hosts.

OutcomeRecorder implements the StrategyHost port by storing the first
outcome it receives. Hosts subclass it (or read `outcome`) to turn the
result into their own response type.
"""

import logging
from typing import Any, Optional

from nexon_auth.core.domain import AuthOutcome, OutcomeKind


logger = logging.getLogger(__name__)


class OutcomeRecorder:
    """
    StrategyHost that keeps exactly one outcome per request.

    Later reports are dropped with a warning, so a verify callback that
    calls `done` twice cannot produce two responses.
    """

    def __init__(self):
        self.outcome: Optional[AuthOutcome] = None

    @property
    def reported(self) -> bool:
        return self.outcome is not None

    def _record(self, outcome: AuthOutcome) -> None:
        if self.outcome is not None:
            logger.warning(
                f"Ignoring {outcome.kind.value} outcome; "
                f"{self.outcome.kind.value} was already reported",
                extra={"first_outcome": self.outcome.kind.value},
            )
            return
        self.outcome = outcome

    def redirect(self, url: str) -> None:
        self._record(AuthOutcome(kind=OutcomeKind.REDIRECT, url=url))

    def success(self, user: Any, info: Any = None) -> None:
        self._record(AuthOutcome(kind=OutcomeKind.SUCCESS, user=user, info=info))

    def fail(self, info: Any = None) -> None:
        self._record(AuthOutcome(kind=OutcomeKind.FAIL, info=info))

    def error(self, error: BaseException) -> None:
        self._record(AuthOutcome(kind=OutcomeKind.ERROR, error=error))
