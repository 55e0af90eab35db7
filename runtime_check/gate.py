"""Startup gate — runs a set of checks before the app starts serving.

Subclass ``RuntimeCheck`` and call ``start()`` once the rest of the app is
wired (config loaded, flag store set), e.g. from a FastAPI lifespan::

    class Checks(RuntimeCheck):
        def checks(self):
            return [check("db", ping_db), feature_check("search", [env_var("SEARCH_URL")])]

    Checks().start()  # raises RuntimeCheckFailed when a check fails

``start()`` returns ``None`` when there is nothing to do; it never keeps
anything running.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .check import LOG_PREFIX, Check, Outcome, evaluate
from .config import settings

logger = logging.getLogger(__name__)

FAILURE_REASON = "runtime_check_failed"


class RuntimeCheckFailed(Exception):
    """Raised by ``RuntimeCheck.start()`` when checks fail.

    The message is always ``runtime_check_failed``; see the log for details
    or ``outcome.report`` for the structured report.
    """

    def __init__(self, outcome: Outcome) -> None:
        super().__init__(FAILURE_REASON)
        self.outcome = outcome


def run(checks: Sequence[Check] | Check, *, log: bool | None = None) -> Outcome:
    """Run the checks and log a trace.

    Returns the ``Outcome``: ``outcome.ok`` tells whether every check passed
    or was ignored, ``outcome.report`` holds the ignored and failed ones.
    """
    if isinstance(checks, Check):
        checks = [checks]
    log = settings.log if log is None else log

    if log:
        logger.info("%s starting...", LOG_PREFIX)

    outcome = evaluate(list(checks), 0, log)

    if log:
        if outcome.ok:
            logger.info("%s done", LOG_PREFIX)
        else:
            logger.error("%s some checks failed!", LOG_PREFIX)
    return outcome


class RuntimeCheck:
    """Base class for an app's startup checks.

    Override ``checks()``; override ``should_run()`` to skip the checks in
    some environments (defaults to ``RUNTIME_CHECK_ENABLED``).
    """

    log: bool | None = None

    def __init__(self) -> None:
        self.outcome: Outcome | None = None  # set by start()

    def should_run(self) -> bool:
        return settings.enabled

    def checks(self) -> Sequence[Check]:
        raise NotImplementedError

    def run(self) -> Outcome:
        return run(self.checks(), log=self.log)

    def start(self) -> None:
        """Run the checks if enabled. Raises ``RuntimeCheckFailed`` on failure."""
        self.outcome = None
        if not self.should_run():
            logger.info("%s skipped for %s", LOG_PREFIX, type(self).__name__)
            return None

        self.outcome = self.run()
        if not self.outcome.ok:
            raise RuntimeCheckFailed(self.outcome)
        return None
