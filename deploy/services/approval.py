"""Waiting on an external approval (macOS notarization).

The wait is a poll loop over an injectable status check, clock and sleep,
so tests complete instantly and production can swap in a real status query.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from deploy.core.result import Err, Ok, Result

__all__ = [
    "ApprovalCheck",
    "ApprovalTimedOut",
    "await_approval",
    "fixed_delay_check",
]

ApprovalCheck = Callable[[], bool]

_INITIAL_INTERVAL_SECONDS = 15.0
_MAX_INTERVAL_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ApprovalTimedOut:
    what: str
    waited_seconds: float

    def __str__(self) -> str:
        return f"Timed out after {self.waited_seconds:.0f}s waiting for {self.what}"


def fixed_delay_check(
    seconds: float, *, clock: Callable[[], float] = time.monotonic
) -> ApprovalCheck:
    """A check that passes once `seconds` have elapsed since it was created.

    Stands in for a real notarization status query, which the release
    process does not have yet.
    """
    ready_at = clock() + seconds

    def check() -> bool:
        return clock() >= ready_at

    return check


def await_approval(
    check: ApprovalCheck,
    *,
    what: str,
    timeout: float,
    expected: float = 0.0,
    initial_interval: float = _INITIAL_INTERVAL_SECONDS,
    max_interval: float = _MAX_INTERVAL_SECONDS,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[float, ApprovalTimedOut]:
    """Poll `check` with doubling intervals until it passes or time runs out.

    No sleep runs past `expected` seconds after the start, so a check that
    becomes true exactly then is seen without an extra interval.

    Returns:
        Ok(seconds waited) or Err(ApprovalTimedOut).
    """
    started = clock()
    deadline = started + timeout
    expected_at = started + expected
    interval = initial_interval

    while not check():
        now = clock()
        if now >= deadline:
            return Err(ApprovalTimedOut(what=what, waited_seconds=now - started))
        pause = min(interval, deadline - now)
        if now < expected_at:
            pause = min(pause, expected_at - now)
        sleep(max(0.0, pause))
        interval = min(interval * 2, max_interval)

    return Ok(clock() - started)
