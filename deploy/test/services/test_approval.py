"""Tests for deploy.services.approval module."""

from __future__ import annotations

from deploy.core.result import Err, Ok
from deploy.services.approval import ApprovalTimedOut, await_approval, fixed_delay_check


class FakeTime:
    """Clock and sleep that only advance when slept."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestAwaitApproval:
    def test_ready_immediately(self) -> None:
        t = FakeTime()

        result = await_approval(
            lambda: True, what="notarisation", timeout=10, clock=t.clock, sleep=t.sleep
        )

        assert result == Ok(0.0)
        assert t.sleeps == []

    def test_intervals_double_up_to_max(self) -> None:
        t = FakeTime()
        check = fixed_delay_check(300, clock=t.clock)

        result = await_approval(
            check, what="notarisation", timeout=2100, clock=t.clock, sleep=t.sleep
        )

        assert isinstance(result, Ok)
        assert result.value >= 300
        assert t.sleeps[:4] == [15, 30, 60, 60]
        assert max(t.sleeps) == 60

    def test_fixed_wait_is_not_overshot(self) -> None:
        t = FakeTime()
        check = fixed_delay_check(300, clock=t.clock)

        result = await_approval(
            check,
            what="notarisation",
            timeout=2100,
            expected=300,
            clock=t.clock,
            sleep=t.sleep,
        )

        assert result == Ok(300.0)
        assert t.sleeps == [15, 30, 60, 60, 60, 60, 15]

    def test_times_out(self) -> None:
        t = FakeTime()

        result = await_approval(
            lambda: False, what="notarisation", timeout=100, clock=t.clock, sleep=t.sleep
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, ApprovalTimedOut)
        assert result.error.waited_seconds == 100
        # never sleeps past the deadline
        assert sum(t.sleeps) == 100
        assert "notarisation" in str(result.error)


class TestFixedDelayCheck:
    def test_passes_after_delay(self) -> None:
        t = FakeTime()
        check = fixed_delay_check(5, clock=t.clock)

        assert check() is False
        t.now = 5
        assert check() is True
