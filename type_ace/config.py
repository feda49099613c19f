from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from .corpus import Difficulty
from .typing_core import InputMode

DURATION_CHOICES_S: tuple[int, ...] = (15, 30, 60, 120)

DURATION_ENV = "TYPE_ACE_DURATION_S"
WORDS_PER_LINE_ENV = "TYPE_ACE_WORDS_PER_LINE"
TICK_INTERVAL_ENV = "TYPE_ACE_TICK_INTERVAL_S"
INPUT_MODE_ENV = "TYPE_ACE_INPUT_MODE"
DIFFICULTY_ENV = "TYPE_ACE_DIFFICULTY"
LOG_LEVEL_ENV = "TYPE_ACE_LOG_LEVEL"

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True, slots=True)
class TypingTestConfig:
    duration_s: float = 30.0
    words_per_line: int = 10
    tick_interval_s: float = 0.25
    input_mode: InputMode = InputMode.CHARACTER
    difficulty: Difficulty = Difficulty.EASY

    def __post_init__(self) -> None:
        if self.duration_s <= 0:
            raise ValueError("duration_s must be > 0")
        if self.words_per_line <= 0:
            raise ValueError("words_per_line must be > 0")
        if self.tick_interval_s <= 0:
            raise ValueError("tick_interval_s must be > 0")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TypingTestConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            duration_s=_env_float(env, DURATION_ENV, defaults.duration_s),
            words_per_line=_env_int(env, WORDS_PER_LINE_ENV, defaults.words_per_line),
            tick_interval_s=_env_float(env, TICK_INTERVAL_ENV, defaults.tick_interval_s),
            input_mode=_env_enum(env, INPUT_MODE_ENV, InputMode, defaults.input_mode),
            difficulty=_env_enum(env, DIFFICULTY_ENV, Difficulty, defaults.difficulty),
        )


def log_level_from_env(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return env.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"


def _env_float(env: Mapping[str, str], name: str, fallback: float) -> float:
    raw = env.get(name, "").strip()
    if raw == "":
        return fallback
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(env: Mapping[str, str], name: str, fallback: int) -> int:
    raw = env.get(name, "").strip()
    if raw == "":
        return fallback
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_enum(env: Mapping[str, str], name: str, enum_cls: type[E], fallback: E) -> E:
    raw = env.get(name, "").strip().lower()
    if raw == "":
        return fallback
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{name} must be one of: {allowed}; got {raw!r}") from None
