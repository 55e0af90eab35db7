"""Check tree engine — runs checks, nested checks, and builds the sparse report.

A ``Check`` has a name, an optional zero-arg checker, and nested checks that
only run when the checker passes. The checker returns one of:

- ``None`` or ``Ok(value)``: passed, nested checks run
- ``IGNORE``: ignored, nested checks are skipped
- ``Error(reason)``: failed, nested checks are skipped

Only ignored and failed checks (or checks with such descendants) show up in
the report. A check that raises is reported as failed with a ``CheckFault``.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

logger = logging.getLogger(__name__)

LOG_PREFIX = "[RuntimeCheck]"


# ── Checker results ──────────────────────────────────────────────────────────


class Status(str, Enum):
    PASSED = "passed"
    IGNORED = "ignored"
    FAILED = "failed"


class _Ignore:
    """Singleton returned by a checker to skip itself and its nested checks."""

    _instance: _Ignore | None = None

    def __new__(cls) -> _Ignore:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "IGNORE"


IGNORE = _Ignore()


@dataclass(frozen=True)
class Ok:
    """Passing result carrying a value. The value is discarded by the engine."""

    value: Any = None


@dataclass(frozen=True)
class Error:
    """Failing result with an opaque reason, stored verbatim in the report."""

    reason: Any


@dataclass(frozen=True)
class CheckFault:
    """Failure reason for a checker that raised instead of returning."""

    kind: str
    exception: BaseException
    traceback: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> CheckFault:
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(kind=type(exc).__name__, exception=exc, traceback=tb)

    def __str__(self) -> str:
        return f"{self.kind}: {self.exception}"


CheckerResult = Union[None, Ok, _Ignore, Error]
Checker = Callable[[], CheckerResult]


class Report(dict):
    """Sparse ``name -> Status.IGNORED | reason | Report`` map of a check list.

    Nested reports are always ``Report``; a failure reason that is a plain
    dict stays a plain dict.
    """


# ── Check ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Check:
    """A named system check.

    - name: label in logs, key in the parent's report (unique among siblings)
    - checker: function run for the check, ``None`` behaves like a passing one
    - nested_checks: checks run only if ``checker`` passed
    """

    name: str
    checker: Checker | None = None
    nested_checks: tuple[Check, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Freeze lists handed in by callers so later mutation can't leak in
        if not isinstance(self.nested_checks, tuple):
            object.__setattr__(self, "nested_checks", tuple(self.nested_checks or ()))


@dataclass(frozen=True)
class Outcome:
    """Result of evaluating a check or a list of checks.

    ``detail`` is the report for passed checks and lists, ``None`` for an
    ignored check, and the reason (or nested report) for a failed one.
    """

    status: Status
    detail: Any = None

    @property
    def ok(self) -> bool:
        return self.status is not Status.FAILED

    @property
    def report(self) -> Report:
        return self.detail if isinstance(self.detail, Report) else Report()


# ── Engine ───────────────────────────────────────────────────────────────────


def evaluate(
    check_or_checks: Check | Sequence[Check],
    depth: int = 0,
    log: bool = False,
) -> Outcome:
    """Run the given check(s). Logs the result of each check if ``log`` is true."""
    if isinstance(check_or_checks, Check):
        return _evaluate_check(check_or_checks, depth, log)
    return _evaluate_list(check_or_checks, depth, log)


def _evaluate_check(check: Check, depth: int, log: bool) -> Outcome:
    result = _execute_checker(check.checker)

    if result is IGNORE:
        _log(check, depth, log, logging.WARNING, "ignored")
        return Outcome(Status.IGNORED)

    if isinstance(result, Error):
        _log(check, depth, log, logging.ERROR, f"failed. Reason: {format_reason(result.reason)}")
        return Outcome(Status.FAILED, result.reason)

    return _evaluate_nested(check, depth, log)


def _evaluate_list(checks: Sequence[Check], depth: int, log: bool) -> Outcome:
    ok = True
    report = Report()

    for check in checks:
        outcome = _evaluate_check(check, depth, log)
        if outcome.status is Status.IGNORED:
            report[check.name] = Status.IGNORED
        elif outcome.status is Status.FAILED:
            ok = False
            report[check.name] = outcome.detail
        elif outcome.detail:
            report[check.name] = outcome.detail

    return Outcome(Status.PASSED if ok else Status.FAILED, report)


def _evaluate_nested(check: Check, depth: int, log: bool) -> Outcome:
    if not check.nested_checks:
        _log(check, depth, log, logging.INFO, "passed")
        return Outcome(Status.PASSED, Report())

    _log(check, depth, log, logging.INFO, "")
    outcome = _evaluate_list(check.nested_checks, depth + 1, log)

    if outcome.ok:
        _log(check, depth, log, logging.INFO, "passed")
    else:
        _log(check, depth, log, logging.ERROR, "failed")
    return outcome


def _execute_checker(checker: Checker | None) -> None | _Ignore | Error:
    """Call the checker and normalise its result. Exceptions become errors."""
    if checker is None:
        return None

    try:
        result = checker()
        if result is None or isinstance(result, Ok):
            return None
        if result is IGNORE or isinstance(result, Error):
            return result
        raise TypeError(f"unexpected checker result: {result!r}")
    except Exception as e:
        return Error(CheckFault.from_exception(e))


# ── Formatting / logging ─────────────────────────────────────────────────────


def format_reason(reason: Any) -> str:
    """Readable form of a failure reason: full traceback for faults, repr otherwise."""
    if isinstance(reason, CheckFault):
        return reason.traceback.rstrip()
    return repr(reason)


def _log(check: Check, depth: int, log: bool, level: int, msg: str) -> None:
    if not log:
        return

    spaces = "" if depth == 0 else ">" * depth + " "
    prefix = f"{LOG_PREFIX} {spaces}{check.name}"
    if msg:
        logger.log(level, "%s: %s", prefix, msg)
    else:
        logger.log(level, "%s:", prefix)
