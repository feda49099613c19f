from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .clock import Clock, SessionClock, TickHandle, TickScheduler
from .config import TypingTestConfig
from .corpus import Difficulty, Passage, PassageCorpus
from .typing_core import (
    InputMode,
    Metrics,
    ScrollWindow,
    Status,
    WordState,
    clamp_typed,
    compute_metrics,
    current_word_index,
    evaluate_words,
    passage_exhausted,
    split_words,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TestSession:
    """Mutable state of one test attempt. Owned by a single ``TypingTestEngine``."""

    passage: Passage
    words: tuple[str, ...]
    duration_s: float
    clock: SessionClock
    status: Status = Status.WAITING
    typed_text: str = ""

    @property
    def target_text(self) -> str:
        return self.passage.text

    def elapsed_s(self) -> float:
        return min(self.duration_s, self.clock.elapsed())


@dataclass(frozen=True, slots=True)
class TypingSnapshot:
    """View model for the UI (pure data)."""

    status: Status
    passage_id: str
    passage_name: str
    difficulty: Difficulty
    typed_text: str
    duration_s: float
    elapsed_s: float
    remaining_s: float
    words: tuple[WordState, ...]
    metrics: Metrics
    visible_line: int
    words_per_line: int
    current_word_index: int
    lines: tuple[tuple[WordState, ...], ...] = ()

    @property
    def remaining_whole_s(self) -> int:
        # Counts down to 0 exactly at expiry.
        return max(0, math.ceil(self.remaining_s))

    def visible_lines(self, count: int) -> tuple[tuple[WordState, ...], ...]:
        return self.lines[self.visible_line : self.visible_line + count]

    @property
    def progress(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return min(1.0, self.elapsed_s / self.duration_s)


class TypingTestEngine:
    """Session lifecycle for the timed typing test: waiting -> running -> finished.

    - The engine is the only writer of the session's status and typed text.
    - Time is entirely via the injected Clock; the live tick comes from the
      injected scheduler and is cancelled on every exit from RUNNING.
    - Every input or tick re-derives word states, metrics and the scroll
      position from scratch.
    """

    def __init__(
        self,
        *,
        passage: Passage,
        clock: Clock,
        scheduler: TickScheduler,
        duration_s: float = 30.0,
        words_per_line: int = 10,
        tick_interval_s: float = 0.25,
        input_mode: InputMode = InputMode.CHARACTER,
        corpus: PassageCorpus | None = None,
    ) -> None:
        if duration_s <= 0:
            raise ValueError("duration_s must be > 0")
        if tick_interval_s <= 0:
            raise ValueError("tick_interval_s must be > 0")

        self._clock = clock
        self._scheduler = scheduler
        self._duration_s = float(duration_s)
        self._tick_interval_s = float(tick_interval_s)
        self._input_mode = input_mode
        self._corpus = corpus if corpus is not None else PassageCorpus()
        self._scroll = ScrollWindow(words_per_line)
        self._tick_handle: TickHandle | None = None

        self._session = self._new_session(passage)
        self._states: tuple[WordState, ...] = ()
        self._metrics = Metrics()
        self._elapsed_s = 0.0
        self._evaluate()

    @property
    def status(self) -> Status:
        return self._session.status

    @property
    def typed_text(self) -> str:
        return self._session.typed_text

    @property
    def passage(self) -> Passage:
        return self._session.passage

    @property
    def duration_s(self) -> float:
        return self._duration_s

    @property
    def input_mode(self) -> InputMode:
        return self._input_mode

    @property
    def metrics(self) -> Metrics:
        return self._metrics

    @property
    def tick_active(self) -> bool:
        return self._tick_handle is not None and self._tick_handle.active

    def submit_input(self, raw: str) -> bool:
        """Replace the typed text with ``raw`` (the full input value). Returns True if accepted."""

        s = self._session
        if s.status is Status.FINISHED:
            return False

        if s.status is Status.RUNNING and s.clock.elapsed() >= s.duration_s:
            # Time ran out before the next tick got to it.
            self._finish(reason="time")
            return False

        accepted = clamp_typed(s.words, s.target_text, raw, self._input_mode)
        if len(accepted) < len(raw):
            logger.debug("dropped %d chars past the end of the passage", len(raw) - len(accepted))

        if s.status is Status.WAITING:
            if accepted == "":
                return False
            self._start()

        s.typed_text = accepted
        if passage_exhausted(s.words, s.target_text, s.typed_text, self._input_mode):
            self._finish(reason="passage")
        else:
            self._evaluate()
        return True

    def tick(self) -> None:
        s = self._session
        if s.status is not Status.RUNNING:
            return
        if s.clock.elapsed() >= s.duration_s:
            self._finish(reason="time")
        else:
            self._evaluate()

    def restart(self, passage: Passage | None = None) -> None:
        # The old tick must be gone before the replacement session exists.
        self._cancel_tick()
        next_passage = self._session.passage if passage is None else passage
        self._session = self._new_session(next_passage)
        self._scroll.reset()
        self._metrics = Metrics()
        self._elapsed_s = 0.0
        self._evaluate()
        logger.info("session reset: passage=%s duration=%.0fs", next_passage.id, self._duration_s)

    def select_passage(self, difficulty: Difficulty, duration_s: float | None = None) -> Passage:
        if duration_s is not None:
            if duration_s <= 0:
                raise ValueError("duration_s must be > 0")
            self._duration_s = float(duration_s)
        passage = self._corpus.get_passage(difficulty)
        self.restart(passage)
        return passage

    def close(self) -> None:
        self._cancel_tick()

    def snapshot(self) -> TypingSnapshot:
        s = self._session
        idx = current_word_index(self._states)
        return TypingSnapshot(
            status=s.status,
            passage_id=s.passage.id,
            passage_name=s.passage.name,
            difficulty=s.passage.difficulty,
            typed_text=s.typed_text,
            duration_s=s.duration_s,
            elapsed_s=self._elapsed_s,
            remaining_s=max(0.0, s.duration_s - self._elapsed_s),
            words=self._states,
            metrics=self._metrics,
            visible_line=self._scroll.visible_line,
            words_per_line=self._scroll.words_per_line,
            current_word_index=idx,
            lines=self._scroll.lines(self._states),
        )

    def _new_session(self, passage: Passage) -> TestSession:
        words = split_words(passage.text)
        if not words:
            raise ValueError("passage must contain at least one word")
        return TestSession(
            passage=passage,
            words=words,
            duration_s=self._duration_s,
            clock=SessionClock(self._clock),
        )

    def _start(self) -> None:
        s = self._session
        s.status = Status.RUNNING
        s.clock.start()
        self._tick_handle = self._scheduler.schedule_repeating(self._tick_interval_s, self.tick)
        logger.info("test started: passage=%s", s.passage.id)

    def _finish(self, *, reason: str) -> None:
        s = self._session
        self._cancel_tick()
        s.clock.stop()
        s.status = Status.FINISHED
        self._evaluate()
        logger.info(
            "test finished (%s): wpm=%d accuracy=%d%% errors=%d",
            reason,
            self._metrics.wpm_net,
            self._metrics.accuracy_percent,
            self._metrics.error_count,
        )

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _evaluate(self) -> None:
        s = self._session
        self._elapsed_s = s.elapsed_s()
        self._states = evaluate_words(s.words, s.typed_text, finished=s.status is Status.FINISHED)
        self._metrics = compute_metrics(self._states, self._elapsed_s)
        idx = min(current_word_index(self._states), len(s.words) - 1)
        self._scroll.follow(idx)


def build_typing_test(
    *,
    clock: Clock,
    scheduler: TickScheduler,
    config: TypingTestConfig | None = None,
    corpus: PassageCorpus | None = None,
    passage: Passage | None = None,
) -> TypingTestEngine:
    cfg = config if config is not None else TypingTestConfig()
    corpus = corpus if corpus is not None else PassageCorpus()
    first = passage if passage is not None else corpus.get_passage(cfg.difficulty)
    return TypingTestEngine(
        passage=first,
        clock=clock,
        scheduler=scheduler,
        duration_s=cfg.duration_s,
        words_per_line=cfg.words_per_line,
        tick_interval_s=cfg.tick_interval_s,
        input_mode=cfg.input_mode,
        corpus=corpus,
    )
