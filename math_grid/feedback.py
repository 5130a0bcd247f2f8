"""Pygame feedback adapters: synthesized sound effects and joystick rumble.

These stay outside the deterministic core. Each adapter checks the shared
``SettingsState`` at play time and degrades to silence when the platform has
no mixer or no joystick.
"""

from __future__ import annotations

import math
from array import array

import pygame

from .settings import SettingsState


class SoundEffects:
    _sample_rate = 22050
    _amp = 32767

    def __init__(self, settings: SettingsState) -> None:
        self._settings = settings
        self._available = False
        self._move_sound: pygame.mixer.Sound | None = None
        self._snap_sound: pygame.mixer.Sound | None = None
        self._channel: pygame.mixer.Channel | None = None

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            self._move_sound = self._build_sound(
                (
                    self._render_tone_pcm(660.0, 0.06, gain=0.30),
                    self._render_tone_pcm(880.0, 0.08, gain=0.28),
                ),
                volume=0.7,
            )
            self._snap_sound = self._build_sound(
                (
                    self._render_tone_pcm(220.0, 0.05, gain=0.36),
                    self._render_silence_pcm(0.02),
                    self._render_tone_pcm(180.0, 0.07, gain=0.34),
                ),
                volume=0.8,
            )
            self._channel = pygame.mixer.Channel(0)
            self._available = True
        except Exception:
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def play_move(self) -> None:
        self._play(self._move_sound)

    def play_snap(self) -> None:
        self._play(self._snap_sound)

    def stop(self) -> None:
        if not self._available:
            return
        assert self._channel is not None
        self._channel.stop()

    def _play(self, sound: pygame.mixer.Sound | None) -> None:
        if not self._available or sound is None or not self._settings.enable_sfx:
            return
        assert self._channel is not None
        # Restart from the top if the previous cue is still playing.
        self._channel.stop()
        self._channel.play(sound)

    def _build_sound(self, parts: tuple[array[int], ...], *, volume: float) -> pygame.mixer.Sound:
        pcm = array("h")
        for part in parts:
            pcm.extend(part)
        sound = pygame.mixer.Sound(buffer=pcm.tobytes())
        sound.set_volume(max(0.0, min(1.0, volume)))
        return sound

    def _render_tone_pcm(self, frequency_hz: float, duration_s: float, *, gain: float) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        fade_n = max(1, int(self._sample_rate * 0.008))
        out = array("h")
        for idx in range(sample_count):
            envelope = 1.0
            if idx < fade_n:
                envelope = idx / float(fade_n)
            tail = sample_count - idx - 1
            if tail < fade_n:
                envelope = min(envelope, tail / float(fade_n))
            phase = (2.0 * math.pi * float(frequency_hz) * idx) / float(self._sample_rate)
            sample = math.sin(phase) * gain * max(0.0, envelope)
            out.append(int(max(-1.0, min(1.0, sample)) * self._amp))
        return out

    def _render_silence_pcm(self, duration_s: float) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        return array("h", [0] * sample_count)


class Haptics:
    """Short rumble pulses on every connected joystick that supports them."""

    def __init__(self, settings: SettingsState) -> None:
        self._settings = settings

    def pulse_move(self) -> None:
        self._rumble(low=0.2, high=0.4, duration_ms=40)

    def pulse_reject(self) -> None:
        self._rumble(low=0.6, high=0.2, duration_ms=20)

    def _rumble(self, *, low: float, high: float, duration_ms: int) -> None:
        if not self._settings.enable_haptics:
            return
        try:
            count = pygame.joystick.get_count()
        except pygame.error:
            return
        for i in range(count):
            try:
                pygame.joystick.Joystick(i).rumble(low, high, duration_ms)
            except (pygame.error, AttributeError):
                continue
