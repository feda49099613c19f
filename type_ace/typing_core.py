"""Deterministic core logic for the timed typing test.

Everything here is a pure function of its inputs (or, for ``ScrollWindow``, of
the calls made on it) and has no dependency on pygame or real time, so it can
be exercised headlessly.

* ``evaluate_words`` classifies each target word as pending, current, correct
  or incorrect, and attaches display-only per-character marks.
* ``compute_metrics`` derives WPM, accuracy and error count from those
  classifications and an elapsed time. It is recomputed from scratch on every
  call, never accumulated.
* ``ScrollWindow`` keeps the line holding the current word in view for
  multi-line passages, scrolling forward only.

Scoring is whole-word: a completed word is correct only when it matches the
target word exactly. Character marks are for rendering and never change a
word's classification.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

T = TypeVar("T")


class Status(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"
    FINISHED = "finished"


class WordClass(str, Enum):
    PENDING = "pending"
    CURRENT = "current"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class CharMark(str, Enum):
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    EXTRA = "extra"  # typed past the end of the target word


class InputMode(str, Enum):
    CHARACTER = "character"
    WORD = "word"


@dataclass(frozen=True, slots=True)
class CharState:
    char: str  # target char, or the typed char for EXTRA marks
    mark: CharMark
    typed: str = ""


@dataclass(frozen=True, slots=True)
class WordState:
    index: int
    text: str
    classification: WordClass
    typed: str = ""
    chars: tuple[CharState, ...] = ()


@dataclass(frozen=True, slots=True)
class Metrics:
    wpm_gross: int = 0
    wpm_net: int = 0
    accuracy_percent: int = 100
    error_count: int = 0
    correct_words: int = 0
    completed_words: int = 0
    correct_chars: int = 0


def round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; scores round .5 upwards.
    return int(math.floor(x + 0.5))


def split_words(text: str) -> tuple[str, ...]:
    return tuple(text.split())


def completed_word_count(typed_text: str, *, finished: bool = False) -> int:
    """Number of typed words the user has moved past.

    A word is completed by a following whitespace character, or by the test
    finishing while it is being typed.
    """

    typed_words = typed_text.split()
    if not typed_words:
        return 0
    if finished or typed_text[-1].isspace():
        return len(typed_words)
    return len(typed_words) - 1


def char_marks(target: str, typed: str) -> tuple[CharState, ...]:
    out: list[CharState] = []
    for i, ch in enumerate(target):
        if i >= len(typed):
            out.append(CharState(char=ch, mark=CharMark.PENDING))
        elif typed[i] == ch:
            out.append(CharState(char=ch, mark=CharMark.CORRECT, typed=typed[i]))
        else:
            out.append(CharState(char=ch, mark=CharMark.INCORRECT, typed=typed[i]))
    for extra in typed[len(target):]:
        out.append(CharState(char=extra, mark=CharMark.EXTRA, typed=extra))
    return tuple(out)


def evaluate_words(words: tuple[str, ...], typed_text: str, *, finished: bool = False) -> tuple[WordState, ...]:
    typed_words = typed_text.split()
    completed = min(completed_word_count(typed_text, finished=finished), len(words))
    current = None if finished else completed

    states: list[WordState] = []
    for i, target in enumerate(words):
        typed = typed_words[i] if i < len(typed_words) else ""
        if i < completed:
            cls = WordClass.CORRECT if typed == target else WordClass.INCORRECT
        elif i == current:
            cls = WordClass.CURRENT
        else:
            cls = WordClass.PENDING
        chars = char_marks(target, typed) if cls is not WordClass.PENDING else ()
        states.append(WordState(index=i, text=target, classification=cls, typed=typed, chars=chars))
    return tuple(states)


def current_word_index(states: tuple[WordState, ...]) -> int:
    """Index of the word being typed; past the end once every word is completed."""

    for s in states:
        if s.classification is WordClass.CURRENT:
            return s.index
    done = sum(1 for s in states if s.classification in (WordClass.CORRECT, WordClass.INCORRECT))
    return done


def compute_metrics(states: tuple[WordState, ...], elapsed_s: float) -> Metrics:
    correct_words = 0
    completed_words = 0
    correct_chars = 0
    for s in states:
        if s.classification is WordClass.CORRECT:
            correct_words += 1
            completed_words += 1
            correct_chars += len(s.text) + 1
        elif s.classification is WordClass.INCORRECT:
            completed_words += 1

    accuracy = 100 if completed_words == 0 else round_half_up(100.0 * correct_words / completed_words)

    if not elapsed_s > 0 or not math.isfinite(elapsed_s):
        gross = 0
    else:
        gross = round_half_up((correct_chars / 5.0) / (elapsed_s / 60.0))
    net = max(0, round_half_up(gross * accuracy / 100.0))

    return Metrics(
        wpm_gross=gross,
        wpm_net=net,
        accuracy_percent=accuracy,
        error_count=completed_words - correct_words,
        correct_words=correct_words,
        completed_words=completed_words,
        correct_chars=correct_chars,
    )


def clamp_typed(words: tuple[str, ...], target_text: str, raw: str, mode: InputMode) -> str:
    """Drop whatever part of ``raw`` exceeds the target's length ceiling."""

    if mode is InputMode.CHARACTER:
        return raw[: len(target_text)]

    # Word mode: keep everything before the first character of an extra word.
    seen = 0
    in_word = False
    for i, ch in enumerate(raw):
        if ch.isspace():
            in_word = False
            continue
        if not in_word:
            if seen == len(words):
                return raw[:i]
            seen += 1
            in_word = True
    return raw


def passage_exhausted(words: tuple[str, ...], target_text: str, typed_text: str, mode: InputMode) -> bool:
    if mode is InputMode.CHARACTER:
        return len(typed_text) >= len(target_text)
    return completed_word_count(typed_text) >= len(words)


class ScrollWindow:
    """Which line of a wrapped passage is in view.

    Lines are fixed groups of ``words_per_line`` words. The view only moves
    forward during a session; :meth:`reset` returns it to the first line.
    """

    def __init__(self, words_per_line: int) -> None:
        if words_per_line <= 0:
            raise ValueError("words_per_line must be > 0")
        self._words_per_line = int(words_per_line)
        self._visible_line = 0

    @property
    def words_per_line(self) -> int:
        return self._words_per_line

    @property
    def visible_line(self) -> int:
        return self._visible_line

    def line_for(self, word_index: int) -> int:
        return max(0, word_index) // self._words_per_line

    def advance(self, new_line: int) -> bool:
        if new_line > self._visible_line:
            self._visible_line = new_line
            return True
        return False

    def follow(self, word_index: int) -> int:
        self.advance(self.line_for(word_index))
        return self._visible_line

    def reset(self) -> None:
        self._visible_line = 0

    def lines(self, items: tuple[T, ...]) -> tuple[tuple[T, ...], ...]:
        n = self._words_per_line
        return tuple(items[i : i + n] for i in range(0, len(items), n))
