"""Pygame UI shell for Type Ace.

Screens:
- Main menu (difficulty, passage choice, test length, quit)
- Typing test (live passage, countdown, WPM/accuracy) with its results view

Deterministic timing/scoring/state lives in type_ace/* (core modules); this
module only forwards key presses to the engine and draws its snapshots.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Protocol

import pygame

from .clock import ClockTickScheduler, RealClock
from .config import DURATION_CHOICES_S, TypingTestConfig
from .corpus import Difficulty, PassageCorpus
from .results import performance_tier, result_from_engine, summary_line
from .session import TypingSnapshot, TypingTestEngine, build_typing_test
from .typing_core import CharMark, Status, WordClass, WordState

logger = logging.getLogger(__name__)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


WINDOW_SIZE = (960, 540)
TARGET_FPS = 60
VISIBLE_LINES = 3

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
HEADER_BG = (18, 30, 118)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
TEXT_PENDING = (120, 136, 184)
TEXT_GOOD = (150, 232, 170)
TEXT_BAD = (255, 120, 120)
BAD_BG = (96, 24, 48)
ACCENT = (255, 206, 84)


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font, scheduler: ClockTickScheduler) -> None:
        self._surface = surface
        self._font = font
        self._scheduler = scheduler
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def scheduler(self) -> ClockTickScheduler:
        return self._scheduler

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    @property
    def screens(self) -> list[Screen]:
        return list(self._screens)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False
        self.close_screens()

    def close_screens(self) -> None:
        # Screens owning a running engine cancel its tick here.
        for screen in reversed(self._screens):
            close = getattr(screen, "close", None)
            if close is not None:
                close()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def update(self) -> None:
        # Scheduled ticks run here, on the same thread as input handling.
        self._scheduler.pump()

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    def __init__(
        self,
        app: App,
        title: str,
        items: list[MenuItem],
        *,
        is_root: bool = False,
        status: Callable[[], str] | None = None,
    ) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._status = status
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)

        frame_margin = max(10, min(26, w // 34))
        frame = pygame.Rect(frame_margin, frame_margin, max(260, w - frame_margin * 2), max(220, h - frame_margin * 2))
        pygame.draw.rect(surface, PANEL_BG, frame)
        pygame.draw.rect(surface, BORDER, frame, 2)

        header_h = max(34, min(52, h // 8))
        header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
        pygame.draw.rect(surface, HEADER_BG, header)
        pygame.draw.line(surface, BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)

        title = self._title_font.render(self._title, True, TEXT_MAIN)
        surface.blit(title, title.get_rect(center=(frame.centerx, header.centery)))

        y = header.bottom + 24
        if self._status is not None:
            status = self._hint_font.render(self._status(), True, TEXT_MUTED)
            surface.blit(status, status.get_rect(midtop=(frame.centerx, y)))
            y += 34

        row_h = 40
        for idx, item in enumerate(self._items):
            row = pygame.Rect(frame.x + 40, y, frame.w - 80, row_h)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, (244, 248, 255), row)
                color = (14, 26, 74)
            else:
                pygame.draw.rect(surface, (9, 20, 106), row)
                pygame.draw.rect(surface, (62, 84, 152), row, 1)
                color = TEXT_MAIN
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, (row.x + 12, row.y + (row.h - text.get_height()) // 2))
            y += row_h + 8

        footer = "Up/Down: Move  |  Enter/Space: Select  |  Esc: Back"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class TypingTestScreen:
    """Forwards key presses to the engine and draws its snapshot.

    The screen keeps no typed text of its own: every edit is sent to the
    engine as the full new input value, and the engine decides what to keep.
    """

    def __init__(self, app: App, *, engine_factory: Callable[[], TypingTestEngine]) -> None:
        self._app = app
        self._engine = engine_factory()
        self._passage_font = pygame.font.Font(None, 34)
        self._small_font = pygame.font.Font(None, 24)
        self._big_font = pygame.font.Font(None, 64)
        self._mid_font = pygame.font.Font(None, 42)

    @property
    def engine(self) -> TypingTestEngine:
        return self._engine

    def close(self) -> None:
        self._engine.close()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return

        key = event.key
        snap = self._engine.snapshot()

        if key == pygame.K_ESCAPE:
            self.close()
            self._app.pop()
            return
        if key == pygame.K_TAB:
            self._engine.restart()
            return
        if snap.status is Status.FINISHED:
            if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self._engine.select_passage(snap.difficulty)
            return

        if key == pygame.K_BACKSPACE:
            if snap.typed_text:
                self._engine.submit_input(snap.typed_text[:-1])
            return

        ch = event.unicode
        if ch and ch.isprintable():
            self._engine.submit_input(snap.typed_text + ch)

    def render(self, surface: pygame.Surface) -> None:
        snap = self._engine.snapshot()
        surface.fill(BG)
        if snap.status is Status.FINISHED:
            self._render_results(surface, snap)
            return

        w, h = surface.get_size()
        title = self._small_font.render(
            f"{snap.passage_name}  ({snap.difficulty.value.title()})", True, TEXT_MUTED
        )
        surface.blit(title, (40, 24))

        self._render_passage(surface, snap, pygame.Rect(40, 70, w - 80, 200))

        if snap.status is Status.WAITING:
            hint = self._small_font.render("Start typing to begin...", True, ACCENT)
            surface.blit(hint, hint.get_rect(midtop=(w // 2, 290)))

        self._render_stats_bar(surface, snap, pygame.Rect(40, h - 130, w - 80, 60))

        foot = self._small_font.render("Tab: Restart  |  Esc: Menu", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 16)))

    def _render_passage(self, surface: pygame.Surface, snap: TypingSnapshot, rect: pygame.Rect) -> None:
        pygame.draw.rect(surface, PANEL_BG, rect)
        pygame.draw.rect(surface, BORDER, rect, 1)

        font = self._passage_font
        line_h = font.get_linesize() + 14
        space_w = font.size(" ")[0]
        y = rect.y + 16
        for line in snap.visible_lines(VISIBLE_LINES):
            x = rect.x + 16
            for word in line:
                x = self._render_word(surface, word, x, y) + space_w
            y += line_h

    def _render_word(self, surface: pygame.Surface, word: WordState, x: int, y: int) -> int:
        font = self._passage_font
        if word.classification is WordClass.PENDING:
            img = font.render(word.text, True, TEXT_PENDING)
            surface.blit(img, (x, y))
            return x + img.get_width()

        if word.classification in (WordClass.CORRECT, WordClass.INCORRECT):
            good = word.classification is WordClass.CORRECT
            img = font.render(word.text, True, TEXT_GOOD if good else TEXT_BAD)
            if not good:
                pygame.draw.rect(surface, BAD_BG, img.get_rect(topleft=(x, y)))
            surface.blit(img, (x, y))
            return x + img.get_width()

        # Current word: per-character marks plus caret.
        caret_x: int | None = None
        typed_len = len(word.typed)
        for j, cs in enumerate(word.chars):
            if j == typed_len:
                caret_x = x
            color = {
                CharMark.PENDING: TEXT_MAIN,
                CharMark.CORRECT: TEXT_GOOD,
                CharMark.INCORRECT: TEXT_BAD,
                CharMark.EXTRA: TEXT_BAD,
            }[cs.mark]
            img = font.render(cs.char, True, color)
            if cs.mark in (CharMark.INCORRECT, CharMark.EXTRA):
                pygame.draw.rect(surface, BAD_BG, img.get_rect(topleft=(x, y)))
            surface.blit(img, (x, y))
            x += img.get_width()
        if caret_x is None:
            caret_x = x
        if (pygame.time.get_ticks() // 500) % 2 == 0:
            pygame.draw.line(surface, ACCENT, (caret_x, y - 2), (caret_x, y + font.get_height()), 2)
        return x

    def _render_stats_bar(self, surface: pygame.Surface, snap: TypingSnapshot, rect: pygame.Rect) -> None:
        pygame.draw.rect(surface, PANEL_BG, rect)
        pygame.draw.rect(surface, BORDER, rect, 1)

        timer = self._mid_font.render(f"{snap.remaining_whole_s}s", True, TEXT_MAIN)
        surface.blit(timer, (rect.x + 16, rect.y + (rect.h - timer.get_height()) // 2))

        bar = pygame.Rect(rect.x + 100, rect.centery - 4, 220, 8)
        pygame.draw.rect(surface, (30, 40, 120), bar)
        fill = bar.copy()
        fill.w = int(bar.w * snap.progress)
        pygame.draw.rect(surface, ACCENT, fill)

        m = snap.metrics
        stats = self._mid_font.render(f"WPM {m.wpm_gross}    Accuracy {m.accuracy_percent}%", True, TEXT_MAIN)
        surface.blit(stats, stats.get_rect(midright=(rect.right - 16, rect.centery)))

    def _render_results(self, surface: pygame.Surface, snap: TypingSnapshot) -> None:
        w, h = surface.get_size()
        result = result_from_engine(self._engine)
        tier = performance_tier(result.wpm_net)

        title = self._big_font.render(tier.title, True, ACCENT)
        surface.blit(title, title.get_rect(midtop=(w // 2, 50)))
        blurb = self._small_font.render(tier.blurb, True, TEXT_MUTED)
        surface.blit(blurb, blurb.get_rect(midtop=(w // 2, 120)))

        cells = [
            (f"{result.wpm_gross}", "WPM"),
            ("x", ""),
            (f"{result.accuracy_percent}%", f"{result.error_count} typos"),
            ("=", ""),
            (f"{result.wpm_net}", "Net WPM"),
        ]
        cx = w // 2 - 320
        for value, label in cells:
            v = self._big_font.render(value, True, TEXT_MAIN)
            surface.blit(v, v.get_rect(midtop=(cx, 200)))
            if label:
                lab = self._small_font.render(label, True, TEXT_MUTED)
                surface.blit(lab, lab.get_rect(midtop=(cx, 260)))
            cx += 160

        line = self._small_font.render(summary_line(result), True, TEXT_MAIN)
        surface.blit(line, line.get_rect(midtop=(w // 2, 330)))

        if result.finished_early:
            early = self._small_font.render(
                f"Finished early: whole passage typed in {result.elapsed_s:.1f}s", True, TEXT_MUTED
            )
            surface.blit(early, early.get_rect(midtop=(w // 2, 360)))

        foot = self._small_font.render("Tab: Retry passage  |  Enter: New passage  |  Esc: Menu", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 16)))


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: TypingTestConfig | None = None,
) -> int:
    cfg = config if config is not None else TypingTestConfig.from_env()

    pygame.init()
    pygame.display.set_caption("Type Ace")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    frame_clock = pygame.time.Clock()

    real_clock = RealClock()
    app = App(surface=surface, font=font, scheduler=ClockTickScheduler(real_clock))
    corpus = PassageCorpus()

    choice = {"duration_s": cfg.duration_s}

    def open_test(difficulty: Difficulty) -> None:
        test_cfg = replace(cfg, difficulty=difficulty, duration_s=choice["duration_s"])
        logger.info("opening %s test (%.0fs)", difficulty.value, test_cfg.duration_s)
        app.push(
            TypingTestScreen(
                app,
                engine_factory=lambda: build_typing_test(
                    clock=real_clock,
                    scheduler=app.scheduler,
                    config=test_cfg,
                    corpus=corpus,
                ),
            )
        )

    def open_passage(passage_id: str) -> None:
        passage = corpus.by_id(passage_id)
        test_cfg = replace(cfg, difficulty=passage.difficulty, duration_s=choice["duration_s"])
        logger.info("opening passage %s (%.0fs)", passage.id, test_cfg.duration_s)
        app.push(
            TypingTestScreen(
                app,
                engine_factory=lambda: build_typing_test(
                    clock=real_clock,
                    scheduler=app.scheduler,
                    config=test_cfg,
                    corpus=corpus,
                    passage=passage,
                ),
            )
        )

    def set_duration(seconds: int) -> None:
        choice["duration_s"] = float(seconds)
        app.pop()

    duration_menu = MenuScreen(
        app,
        "Test Length",
        [MenuItem(f"{s} seconds", lambda s=s: set_duration(s)) for s in DURATION_CHOICES_S]
        + [MenuItem("Back", app.pop)],
    )

    passage_menu = MenuScreen(
        app,
        "Choose Passage",
        [
            MenuItem(f"{p.name} ({p.difficulty.value.title()})", lambda pid=p.id: open_passage(pid))
            for p in corpus.passages()
        ]
        + [MenuItem("Back", app.pop)],
    )

    main_items = [
        MenuItem("Easy", lambda: open_test(Difficulty.EASY)),
        MenuItem("Medium", lambda: open_test(Difficulty.MEDIUM)),
        MenuItem("Hard", lambda: open_test(Difficulty.HARD)),
        MenuItem("Choose Passage", lambda: app.push(passage_menu)),
        MenuItem("Test Length", lambda: app.push(duration_menu)),
        MenuItem("Quit", app.quit),
    ]

    app.push(
        MenuScreen(
            app,
            "Type Ace",
            main_items,
            is_root=True,
            status=lambda: f"Test length: {choice['duration_s']:.0f}s",
        )
    )

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.update()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(TARGET_FPS)
    finally:
        app.close_screens()
        pygame.quit()

    return 0
