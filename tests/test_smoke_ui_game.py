from __future__ import annotations

import os


def test_ui_smoke_start_game_and_submit_answers() -> None:
    # Headless SDL for CI.
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from math_grid.app import run

    def key(k: int, unicode: str = "") -> None:
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": k, "unicode": unicode, "mod": 0}))

    def inject(frame: int) -> None:
        # Main Menu -> Start Game, type a couple of answers, then back out.
        if frame == 1:
            key(pygame.K_RETURN)
        elif frame == 3:
            key(pygame.K_5, "5")
        elif frame == 4:
            key(pygame.K_RETURN)
        elif frame == 5:
            key(pygame.K_x, "x")
            key(pygame.K_RETURN)
        elif frame == 7:
            key(pygame.K_ESCAPE)
        elif frame == 8:
            key(pygame.K_DOWN)
        elif frame == 9:
            key(pygame.K_RETURN)

    assert run(max_frames=15, event_injector=inject) == 0
