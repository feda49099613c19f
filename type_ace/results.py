from __future__ import annotations

from dataclasses import dataclass

from .session import TypingTestEngine
from .typing_core import Status


@dataclass(frozen=True, slots=True)
class TypingResult:
    """Final numbers for a finished test, as shown on the results screen."""

    passage_id: str
    duration_s: float
    elapsed_s: float
    wpm_gross: int
    wpm_net: int
    accuracy_percent: int
    error_count: int
    correct_words: int
    completed_words: int
    finished_early: bool


@dataclass(frozen=True, slots=True)
class PerformanceTier:
    title: str
    blurb: str


_TIERS: tuple[tuple[int, PerformanceTier], ...] = (
    (90, PerformanceTier("Elite Typer", "Unstoppable! Nobody is keeping up with you.")),
    (70, PerformanceTier("Fast Fingers", "You're quick! Just a few more rounds to hit elite speed.")),
    (50, PerformanceTier("Getting Stronger", "Solid work! Keep the rhythm going.")),
    (0, PerformanceTier("Warming Up", "Everyone starts somewhere. Let's level you up!")),
)


def performance_tier(wpm_net: int) -> PerformanceTier:
    for threshold, tier in _TIERS:
        if wpm_net >= threshold:
            return tier
    return _TIERS[-1][1]


def result_from_engine(engine: TypingTestEngine) -> TypingResult:
    """Build a TypingResult from a finished TypingTestEngine."""

    snap = engine.snapshot()
    if snap.status is not Status.FINISHED:
        raise ValueError("test is not finished")
    m = snap.metrics
    return TypingResult(
        passage_id=snap.passage_id,
        duration_s=float(snap.duration_s),
        elapsed_s=float(snap.elapsed_s),
        wpm_gross=int(m.wpm_gross),
        wpm_net=int(m.wpm_net),
        accuracy_percent=int(m.accuracy_percent),
        error_count=int(m.error_count),
        correct_words=int(m.correct_words),
        completed_words=int(m.completed_words),
        finished_early=snap.elapsed_s < snap.duration_s,
    )


def summary_line(result: TypingResult) -> str:
    if result.wpm_net > 0:
        return f"You typed at {result.wpm_net} WPM with {result.accuracy_percent}% accuracy."
    return "Ready to take the test again?"
