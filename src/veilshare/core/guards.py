"""Precondition guards for registry operations.

Each guard returns a ``GuardResult`` instead of raising, so an operation can
compose its checks at the top and fail on the first one that does not pass:

    require(
        check(score <= 100, "score too high", lambda: ValidationError(...)),
        check(caller == owner, "not owner", lambda: AuthorizationError(...)),
    )

Guard arguments are evaluated eagerly, so a guard that needs a record to
exist belongs in a later ``require`` call than the existence guard.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .exceptions import VeilshareException


@dataclass(frozen=True)
class GuardResult:
    """Outcome of a single precondition check.

    Attributes:
        passed: True when the precondition holds.
        reason: Human-readable failure reason. None when passed.
        error:  Zero-argument factory building the exception to raise.
    """

    passed: bool
    reason: str | None = None
    error: Callable[[], VeilshareException] | None = None

    def raise_if_failed(self) -> None:
        if self.passed:
            return
        if self.error is not None:
            raise self.error()
        raise VeilshareException(self.reason or "Precondition failed")


PASSED = GuardResult(passed=True)


def passed() -> GuardResult:
    return PASSED


def failed(reason: str, error: Callable[[], VeilshareException]) -> GuardResult:
    return GuardResult(passed=False, reason=reason, error=error)


def check(condition: bool, reason: str, error: Callable[[], VeilshareException]) -> GuardResult:
    """Build a GuardResult from a boolean condition."""
    return PASSED if condition else failed(reason, error)


def require(*results: GuardResult) -> None:
    """Raise the exception of the first failed guard, in order."""
    for result in results:
        result.raise_if_failed()
