from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class SessionClock:
    """Elapsed time for one test session.

    Elapsed time is always ``now - started_at`` (or ``stopped_at - started_at``
    once stopped), never a sum of tick deltas, so irregular sampling cannot
    make it drift.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._started_at_s: float | None = None
        self._stopped_at_s: float | None = None

    @property
    def started(self) -> bool:
        return self._started_at_s is not None

    @property
    def stopped(self) -> bool:
        return self._stopped_at_s is not None

    @property
    def started_at_s(self) -> float | None:
        return self._started_at_s

    def start(self) -> None:
        # Idempotent: the first start wins.
        if self._started_at_s is not None:
            return
        self._started_at_s = self._clock.now()

    def stop(self) -> None:
        """Freeze the end point. The start timestamp is kept for final metrics."""
        if self._started_at_s is None or self._stopped_at_s is not None:
            return
        self._stopped_at_s = self._clock.now()

    def elapsed(self) -> float:
        if self._started_at_s is None:
            return 0.0
        end = self._stopped_at_s if self._stopped_at_s is not None else self._clock.now()
        return max(0.0, end - self._started_at_s)


class TickHandle:
    """Handle to a repeating scheduled callback. ``cancel()`` is the only way to stop it."""

    def __init__(self, interval_s: float, callback: Callable[[], None], due_at_s: float) -> None:
        self._interval_s = float(interval_s)
        self._callback = callback
        self._due_at_s = float(due_at_s)
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    @property
    def due_at_s(self) -> float:
        return self._due_at_s

    def cancel(self) -> None:
        self._cancelled = True

    def _fire(self, now_s: float) -> None:
        # Missed intervals coalesce into a single call.
        self._due_at_s = now_s + self._interval_s
        self._callback()


class TickScheduler(Protocol):
    def schedule_repeating(self, interval_s: float, callback: Callable[[], None]) -> TickHandle: ...


class ClockTickScheduler:
    """Cooperative scheduler pumped from the host loop.

    Callbacks run on the caller's thread inside :meth:`pump`, so they are
    serialized with input handling. Cancelled handles never fire again, even
    when cancelled from inside another callback of the same pump.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._handles: list[TickHandle] = []

    @property
    def pending_count(self) -> int:
        return sum(1 for h in self._handles if h.active)

    def schedule_repeating(self, interval_s: float, callback: Callable[[], None]) -> TickHandle:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        handle = TickHandle(interval_s, callback, self._clock.now() + float(interval_s))
        self._handles.append(handle)
        logger.debug("scheduled tick every %.3fs", interval_s)
        return handle

    def pump(self) -> int:
        """Fire every due callback once. Returns the number fired."""
        now = self._clock.now()
        fired = 0
        for handle in list(self._handles):
            if not handle.active:
                continue
            if now >= handle.due_at_s:
                handle._fire(now)
                fired += 1
        self._handles = [h for h in self._handles if h.active]
        return fired
