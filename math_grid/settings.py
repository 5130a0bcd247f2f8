from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass


@dataclass(slots=True)
class SettingsState:
    """User feedback toggles consumed by the presentation layer."""

    enable_sfx: bool = True
    enable_haptics: bool = True

    def set_enable_sfx(self, value: bool) -> None:
        self.enable_sfx = bool(value)

    def set_enable_haptics(self, value: bool) -> None:
        self.enable_haptics = bool(value)

    def toggle_sfx(self) -> None:
        self.enable_sfx = not self.enable_sfx

    def toggle_haptics(self) -> None:
        self.enable_haptics = not self.enable_haptics

    @contextmanager
    def override(
        self,
        *,
        enable_sfx: bool | None = None,
        enable_haptics: bool | None = None,
    ) -> Iterator[SettingsState]:
        """Temporarily force flags; previous values come back on exit."""

        saved = (self.enable_sfx, self.enable_haptics)
        if enable_sfx is not None:
            self.enable_sfx = bool(enable_sfx)
        if enable_haptics is not None:
            self.enable_haptics = bool(enable_haptics)
        try:
            yield self
        finally:
            self.enable_sfx, self.enable_haptics = saved

    def muted(self) -> AbstractContextManager[SettingsState]:
        return self.override(enable_sfx=False, enable_haptics=False)
