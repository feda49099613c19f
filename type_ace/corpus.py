from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True, slots=True)
class Passage:
    id: str
    name: str
    difficulty: Difficulty
    text: str


PASSAGES: tuple[Passage, ...] = (
    Passage(
        id="quick-brown-fox",
        name="The Quick Brown Fox",
        difficulty=Difficulty.EASY,
        text=(
            "The quick brown fox jumps over the lazy dog. This sentence contains all the letters "
            "of the English alphabet. Typing it is a good way to practice your skills and warm up "
            "for more challenging texts."
        ),
    ),
    Passage(
        id="morning-walk",
        name="Morning Walk",
        difficulty=Difficulty.EASY,
        text=(
            "We took a walk in the park before the sun was up. The air was cool and the grass was "
            "wet. A dog ran past us with a red ball in its mouth, and we laughed as it rolled down "
            "the hill."
        ),
    ),
    Passage(
        id="programming-wisdom",
        name="Programming Wisdom",
        difficulty=Difficulty.MEDIUM,
        text=(
            "Programming is the art of telling another human being what one wants the computer to "
            "do. The most important property of a program is whether it accomplishes the intention "
            "of its user. Any fool can write code that a computer can understand. Good programmers "
            "write code that humans can understand."
        ),
    ),
    Passage(
        id="a-tale-of-two-cities",
        name="A Tale of Two Cities",
        difficulty=Difficulty.MEDIUM,
        text=(
            "It was the best of times, it was the worst of times, it was the age of wisdom, it was "
            "the age of foolishness, it was the epoch of belief, it was the epoch of incredulity, "
            "it was the season of Light, it was the season of Darkness, it was the spring of hope, "
            "it was the winter of despair."
        ),
    ),
    Passage(
        id="the-sea",
        name="The Sea",
        difficulty=Difficulty.HARD,
        text=(
            "The sea is a vast expanse of saltwater that covers more than 70 percent of the Earth's "
            "surface. It is a world of mystery and wonder, teeming with a diverse array of life, "
            "from microscopic plankton to the largest animal on the planet, the blue whale. Its "
            "currents regulate global climate, and its waves shape our coastlines."
        ),
    ),
    Passage(
        id="mountain-weather",
        name="Mountain Weather",
        difficulty=Difficulty.HARD,
        text=(
            "Alpine weather changes quickly: a clear, windless morning at 2,400 metres can turn "
            "into sleet by noon. Experienced climbers check barometric trends, carry spare layers "
            "(even in July), and turn back early; the summit will still be there next week."
        ),
    ),
)


class PassageCorpus:
    """Static passage lookup keyed by difficulty.

    Draws are made with a seeded RNG so a given seed yields a reproducible
    sequence. When a label has more than one passage, the previous draw for
    that label is not repeated immediately.
    """

    def __init__(self, passages: tuple[Passage, ...] = PASSAGES, *, seed: int | None = None) -> None:
        if not passages:
            raise ValueError("corpus must contain at least one passage")
        self._passages = tuple(passages)
        self._by_id = {p.id: p for p in self._passages}
        self._rng = random.Random(seed)
        self._last: dict[Difficulty, str] = {}

    def passages(self, difficulty: Difficulty | None = None) -> list[Passage]:
        if difficulty is None:
            return list(self._passages)
        return [p for p in self._passages if p.difficulty is difficulty]

    def by_id(self, passage_id: str) -> Passage:
        try:
            return self._by_id[passage_id]
        except KeyError:
            raise KeyError(f"unknown passage id: {passage_id!r}") from None

    def get_passage(self, difficulty: Difficulty) -> Passage:
        pool = self.passages(difficulty)
        if not pool:
            # Fall back to the whole corpus rather than failing the selection.
            logger.warning("no passages for difficulty %s; drawing from all", difficulty.value)
            pool = list(self._passages)
        last = self._last.get(difficulty)
        if len(pool) > 1 and last is not None:
            pool = [p for p in pool if p.id != last]
        choice = self._rng.choice(pool)
        self._last[difficulty] = choice.id
        return choice
