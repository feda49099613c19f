from __future__ import annotations

from dataclasses import dataclass

import pytest

from type_ace.clock import ClockTickScheduler, SessionClock


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


def test_session_clock_reports_zero_before_start() -> None:
    clock = FakeClock(t=100.0)
    sc = SessionClock(clock)
    clock.advance(5.0)
    assert sc.started is False
    assert sc.elapsed() == 0.0


def test_session_clock_start_is_idempotent() -> None:
    clock = FakeClock(t=10.0)
    sc = SessionClock(clock)
    sc.start()
    clock.advance(3.0)
    sc.start()
    assert sc.started_at_s == 10.0
    assert sc.elapsed() == pytest.approx(3.0)


def test_elapsed_is_independent_of_sampling_frequency() -> None:
    clock = FakeClock()
    sc = SessionClock(clock)
    sc.start()
    # Irregular sampling must not change the result.
    for dt in (0.01, 0.7, 0.003, 1.5, 0.287):
        clock.advance(dt)
        sc.elapsed()
    assert sc.elapsed() == pytest.approx(2.5)


def test_stop_freezes_elapsed_and_keeps_start() -> None:
    clock = FakeClock()
    sc = SessionClock(clock)
    sc.start()
    clock.advance(4.0)
    sc.stop()
    clock.advance(100.0)
    assert sc.stopped is True
    assert sc.started_at_s == 0.0
    assert sc.elapsed() == pytest.approx(4.0)


def test_stop_before_start_is_noop() -> None:
    clock = FakeClock()
    sc = SessionClock(clock)
    sc.stop()
    assert sc.stopped is False
    assert sc.elapsed() == 0.0


def test_scheduler_fires_only_when_due() -> None:
    clock = FakeClock()
    sched = ClockTickScheduler(clock)
    calls: list[float] = []
    sched.schedule_repeating(1.0, lambda: calls.append(clock.now()))

    clock.advance(0.5)
    assert sched.pump() == 0
    clock.advance(0.5)
    assert sched.pump() == 1
    clock.advance(1.0)
    assert sched.pump() == 1
    assert calls == [1.0, 2.0]


def test_scheduler_coalesces_missed_intervals() -> None:
    clock = FakeClock()
    sched = ClockTickScheduler(clock)
    calls: list[int] = []
    sched.schedule_repeating(0.25, lambda: calls.append(1))

    clock.advance(10.0)
    assert sched.pump() == 1
    assert sched.pump() == 0
    assert len(calls) == 1


def test_cancelled_handle_never_fires() -> None:
    clock = FakeClock()
    sched = ClockTickScheduler(clock)
    calls: list[int] = []
    handle = sched.schedule_repeating(1.0, lambda: calls.append(1))

    handle.cancel()
    assert handle.active is False
    assert sched.pending_count == 0

    clock.advance(5.0)
    assert sched.pump() == 0
    assert calls == []


def test_cancel_from_inside_another_callback_in_same_pump() -> None:
    clock = FakeClock()
    sched = ClockTickScheduler(clock)
    calls: list[str] = []
    handles = {}

    def first() -> None:
        calls.append("first")
        handles["second"].cancel()

    handles["first"] = sched.schedule_repeating(1.0, first)
    handles["second"] = sched.schedule_repeating(1.0, lambda: calls.append("second"))

    clock.advance(1.0)
    assert sched.pump() == 1
    assert calls == ["first"]
    assert sched.pending_count == 1


def test_scheduler_rejects_non_positive_interval() -> None:
    sched = ClockTickScheduler(FakeClock())
    with pytest.raises(ValueError):
        sched.schedule_repeating(0.0, lambda: None)
