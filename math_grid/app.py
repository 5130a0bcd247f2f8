"""Pygame UI shell for Math Grid.

Screens: Main Menu -> Game -> Results, plus a Settings menu for the sound and
haptics toggles. Deterministic board/health/score/timer logic lives in the
core modules (board, run_state, ticker, game); this module only renders
and turns key presses into calls on ``MathGridGame``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import RealClock
from .config import GameConfig, seed_from_env
from .feedback import Haptics, SoundEffects
from .game import MathGridGame, build_math_grid_game
from .grid_core import GridPos, MoveOutcome
from .settings import SettingsState

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60
SHAKE_MS = 240


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str | Callable[[], str]
    action: Callable[[], None]

    def text(self) -> str:
        return self.label() if callable(self.label) else self.label


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            _close_screen(self._screens.pop())

    def replace(self, screen: Screen) -> None:
        if len(self._screens) > 1:
            _close_screen(self._screens.pop())
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def close_all(self) -> None:
        while self._screens:
            _close_screen(self._screens.pop())

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _close_screen(screen: Screen) -> None:
    close = getattr(screen, "close", None)
    if close is not None:
        close()


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def selected(self) -> int:
        return self._selected

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return

        if event.type == pygame.JOYHATMOTION:
            _, y = event.value
            if y == 1:
                self._move(-1)
            elif y == -1:
                self._move(1)
            return

        if event.type == pygame.JOYBUTTONDOWN:
            # Common mapping: 0 = select, 1 = back/cancel.
            if event.button == 0:
                self._activate()
            elif event.button == 1:
                self._back()

    def _handle_key(self, key: int) -> None:
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
        bg = (11, 61, 46)
        panel_bg = (14, 78, 58)
        border = (230, 237, 243)
        text_main = (230, 237, 243)
        text_muted = (139, 148, 158)
        active_bg = (31, 111, 235)

        surface.fill(bg)

        frame_margin = max(10, min(26, w // 34))
        frame = pygame.Rect(frame_margin, frame_margin, w - frame_margin * 2, h - frame_margin * 2)
        pygame.draw.rect(surface, panel_bg, frame)
        pygame.draw.rect(surface, border, frame, 2)

        title = self._title_font.render(self._title, True, text_main)
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + max(18, h // 14))))

        row_w = max(220, min(360, w // 3))
        row_h = 44
        gap = 12
        total_h = row_h * len(self._items) + gap * max(0, len(self._items) - 1)
        y = frame.centery - total_h // 2 + 20

        for idx, item in enumerate(self._items):
            row = pygame.Rect(frame.centerx - row_w // 2, y, row_w, row_h)
            selected = idx == self._selected
            pygame.draw.rect(surface, active_bg if selected else (18, 99, 41), row, border_radius=10)
            if selected:
                pygame.draw.rect(surface, border, row, 2, border_radius=10)
            text = self._item_font.render(item.text(), True, text_main)
            surface.blit(text, text.get_rect(center=row.center))
            y += row_h + gap

        footer = "Enter/Space: Select  |  Esc/Backspace: Back"
        foot = self._hint_font.render(footer, True, text_muted)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class GameScreen:
    """The 3x3 board, the HUD and the typed answer box."""

    def __init__(
        self,
        app: App,
        *,
        game: MathGridGame,
        settings: SettingsState,
        sfx: SoundEffects,
        haptics: Haptics,
    ) -> None:
        self._app = app
        self._game = game
        self._settings = settings
        self._sfx = sfx
        self._haptics = haptics
        self._input = ""
        self._last_outcome: MoveOutcome | None = None
        self._reject_at_ms: int | None = None
        self._finished = False

        self._hud_font = pygame.font.Font(None, 30)
        self._tile_font = pygame.font.Font(None, 44)
        self._input_font = pygame.font.Font(None, 52)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def input_text(self) -> str:
        return self._input

    @property
    def last_outcome(self) -> MoveOutcome | None:
        return self._last_outcome

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_ESCAPE:
            self._finished = True
            self._app.pop()
            return
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._submit()
            return
        if event.key in (pygame.K_BACKSPACE, pygame.K_DELETE):
            self._input = self._input[:-1]
            return
        if event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            if not self._input:
                self._input = "-"
            return
        if len(event.unicode) == 1 and event.unicode in "0123456789" and len(self._input) < 6:
            self._input += event.unicode

    def close(self) -> None:
        self._game.stop_ticking()

    def _submit(self) -> None:
        raw = self._input
        # The buffer clears whether or not the move lands.
        self._input = ""
        result = self._game.submit_answer(raw)
        self._last_outcome = result.outcome
        if result.accepted:
            self._sfx.play_move()
            self._haptics.pulse_move()
        elif result.outcome in (MoveOutcome.NO_MATCH, MoveOutcome.INVALID_INPUT):
            self._reject_at_ms = pygame.time.get_ticks()
            self._sfx.play_snap()
            self._haptics.pulse_reject()

    def _check_game_over(self) -> None:
        if self._finished or self._game.is_running():
            return
        self._finished = True
        logger.debug("run over with score %d", self._game.get_score())
        self._app.replace(
            ResultsScreen(
                self._app,
                game=self._game,
                settings=self._settings,
                sfx=self._sfx,
                haptics=self._haptics,
            )
        )

    def render(self, surface: pygame.Surface) -> None:
        self._game.update()
        self._check_game_over()
        snap = self._game.snapshot()

        w, h = surface.get_size()
        bg = (11, 61, 46)
        text_muted = (139, 148, 158)
        accent = (88, 166, 255)
        tile_face = (255, 249, 238)
        tile_edge = (230, 223, 212)
        neighbor_edge = (244, 208, 63)
        glyph_red = (192, 57, 43)
        player_color = (230, 57, 70)

        surface.fill(bg)

        health = self._hud_font.render(f"Health: {snap.health}", True, accent)
        score = self._hud_font.render(f"Score: {snap.score}", True, accent)
        surface.blit(health, (24, 18))
        surface.blit(score, score.get_rect(topright=(w - 24, 18)))

        bar = pygame.Rect(24, 48, max(120, w // 3), 10)
        pygame.draw.rect(surface, (40, 40, 48), bar)
        ratio = min(1.0, snap.health / float(self._game.config.start_health))
        pygame.draw.rect(surface, (46, 125, 50), pygame.Rect(bar.x, bar.y, int(bar.w * ratio), bar.h))

        size = snap.board.size
        side = int(min(w * 0.5, h * 0.62))
        gap = max(6, side // 40)
        tile = (side - gap * (size - 1)) // size
        grid_x = (w - side) // 2
        grid_y = 72

        shake_dx = 0
        if self._reject_at_ms is not None:
            elapsed = pygame.time.get_ticks() - self._reject_at_ms
            if elapsed < SHAKE_MS:
                shake_dx = 6 if (elapsed // 40) % 2 == 0 else -6
            else:
                self._reject_at_ms = None

        adjacent = set(snap.board.player.neighbors(size))
        for r in range(size):
            for c in range(size):
                pos = GridPos(r, c)
                rect = pygame.Rect(grid_x + c * (tile + gap), grid_y + r * (tile + gap), tile, tile)
                pygame.draw.rect(surface, tile_face, rect, border_radius=12)
                edge = neighbor_edge if pos in adjacent else tile_edge
                pygame.draw.rect(surface, edge, rect, 3 if pos in adjacent else 1, border_radius=12)
                problem = snap.board.problem_at(pos)
                if problem is None:
                    marker_r = max(10, tile // 6)
                    pygame.draw.circle(surface, player_color, (rect.centerx + shake_dx, rect.centery), marker_r)
                    label = self._hud_font.render("P", True, (255, 255, 255))
                    surface.blit(label, label.get_rect(center=(rect.centerx + shake_dx, rect.centery)))
                else:
                    text = self._tile_font.render(problem.text, True, glyph_red)
                    surface.blit(text, text.get_rect(center=rect.center))

        box_w = max(200, min(320, int(w * 0.32)))
        box = pygame.Rect((w - box_w) // 2, grid_y + side + 16, box_w, 48)
        pygame.draw.rect(surface, (246, 250, 255), box)
        pygame.draw.rect(surface, (142, 168, 210), box, 2)
        caret = "|" if (pygame.time.get_ticks() // 500) % 2 == 0 else ""
        entry = self._input_font.render(self._input + caret, True, (12, 26, 88))
        surface.blit(entry, entry.get_rect(midleft=(box.x + 12, box.centery)))

        hint = self._hint_font.render(
            "Type the answer of a highlighted tile, Enter to move  |  Esc: Menu", True, text_muted
        )
        surface.blit(hint, hint.get_rect(midtop=(w // 2, box.bottom + 8)))


class ResultsScreen:
    """Final score. Sound and haptics stay muted while this screen is up."""

    def __init__(
        self,
        app: App,
        *,
        game: MathGridGame,
        settings: SettingsState,
        sfx: SoundEffects,
        haptics: Haptics,
    ) -> None:
        self._app = app
        self._game = game
        self._settings = settings
        self._sfx = sfx
        self._haptics = haptics
        self._mute: AbstractContextManager[SettingsState] | None = settings.muted()
        self._mute.__enter__()
        self._sfx.stop()
        self._menu = MenuScreen(
            app,
            "Game Over",
            [
                MenuItem("Restart", self._restart),
                MenuItem("Menu", self._to_menu),
            ],
        )
        self._score_font = pygame.font.Font(None, 96)
        self._label_font = pygame.font.Font(None, 28)

    def handle_event(self, event: pygame.event.Event) -> None:
        self._menu.handle_event(event)

    def close(self) -> None:
        if self._mute is not None:
            self._mute.__exit__(None, None, None)
            self._mute = None

    def _restart(self) -> None:
        self._game.reset()
        self._app.replace(
            GameScreen(
                self._app,
                game=self._game,
                settings=self._settings,
                sfx=self._sfx,
                haptics=self._haptics,
            )
        )

    def _to_menu(self) -> None:
        self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        self._menu.render(surface)
        w, _ = surface.get_size()
        label = self._label_font.render("Your Score", True, (139, 148, 158))
        score = self._score_font.render(str(self._game.get_score()), True, (88, 166, 255))
        surface.blit(label, label.get_rect(midtop=(w // 2, 90)))
        surface.blit(score, score.get_rect(midtop=(w // 2, 116)))


def _init_joysticks() -> None:
    # Safe on platforms with no joystick support.
    try:
        count = pygame.joystick.get_count()
    except pygame.error:
        return

    for i in range(count):
        try:
            pygame.joystick.Joystick(i).init()
        except pygame.error:
            continue


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    pygame.init()
    _init_joysticks()

    pygame.display.set_caption("Math Grid")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)

    config = GameConfig.from_env()
    settings = SettingsState()
    sfx = SoundEffects(settings)
    haptics = Haptics(settings)
    real_clock = RealClock()

    def open_game() -> None:
        game = build_math_grid_game(clock=real_clock, seed=seed_from_env(), config=config)
        logger.info("starting run with seed %d", game.seed)
        app.push(GameScreen(app, game=game, settings=settings, sfx=sfx, haptics=haptics))

    settings_menu = MenuScreen(
        app,
        "Settings",
        [
            MenuItem(lambda: f"Sound: {'On' if settings.enable_sfx else 'Off'}", settings.toggle_sfx),
            MenuItem(lambda: f"Haptics: {'On' if settings.enable_haptics else 'Off'}", settings.toggle_haptics),
            MenuItem("Back", app.pop),
        ],
    )

    main_items = [
        MenuItem("Start Game", open_game),
        MenuItem("Settings", lambda: app.push(settings_menu)),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Math Grid", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        app.close_all()
        pygame.quit()

    return 0
