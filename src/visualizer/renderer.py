"""Pulse line visualizer: render loop and per-tick composition."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Protocol, Sequence

from core.models import DEFAULT_THEME, ColorTheme
from .pulse import (
    HISTORY_SIZE,
    TRAIL_LENGTH,
    Frame,
    PathCommand,
    Stroke,
    StrokeStyle,
    WaveformHistory,
    baseline_path,
    downsample,
    edge_gradient,
    hex_to_rgba,
    idle_points,
    pulse_points,
    smooth_path,
)

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 300
DEFAULT_HEIGHT = 300


class DrawSurface(Protocol):
    def resize(self, width: int, height: int, dpr: float) -> None: ...

    def clear(self) -> None: ...

    def stroke_path(self, path: Sequence[PathCommand], style: StrokeStyle) -> None: ...

    def present(self) -> None:
        """Hand the finished frame to the screen."""
        ...


class FrameScheduler(Protocol):
    def request(self, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class FrequencySource(Protocol):
    def read(self) -> Any: ...


def compose_pulse(frames: Sequence[Frame], mean: float, theme: ColorTheme,
                  width: float, height: float, now_ms: float) -> list[Stroke]:
    strokes = []
    glow = 10 + (mean / 255) * 20

    for h, frame in enumerate(frames[:TRAIL_LENGTH]):
        opacity = 1 - h * 0.2
        points = pulse_points(frame.samples, width, height, now_ms)
        style = StrokeStyle(
            width=3 - h * 0.4,
            stops=edge_gradient(theme.accent, theme.primary, opacity * 0.3, opacity),
            shadow_blur=glow,
            shadow_color=hex_to_rgba(theme.accent),
        )
        strokes.append(Stroke(smooth_path(points), style, points))

    baseline = StrokeStyle(
        width=1,
        stops=((0.0, hex_to_rgba(theme.accent, 0.2)),),
        shadow_blur=5,
        shadow_color=hex_to_rgba(theme.accent),
    )
    strokes.append(Stroke(baseline_path(width, height), baseline))
    return strokes


def compose_idle(theme: ColorTheme, width: float, height: float, now_ms: float) -> list[Stroke]:
    points = idle_points(width, height, now_ms)
    line = StrokeStyle(
        width=2,
        stops=edge_gradient(theme.accent, theme.primary, 0.3, 0.5),
        shadow_blur=10,
        shadow_color=hex_to_rgba(theme.accent),
    )
    baseline = StrokeStyle(
        width=1,
        stops=((0.0, hex_to_rgba(theme.accent, 0.1)),),
        shadow_blur=3,
        shadow_color=hex_to_rgba(theme.accent),
    )
    return [
        Stroke(smooth_path(points), line, points),
        Stroke(baseline_path(width, height), baseline),
    ]


class PulseVisualizer:
    """
    Draws the pulse line once per scheduled frame.

    Without a tap it draws the idle pulse, so the surface is never blank while
    shown. The tap is only read, never controlled.
    """

    def __init__(
        self,
        surface: DrawSurface,
        scheduler: FrameScheduler,
        history_size: int = HISTORY_SIZE,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.surface = surface
        self.scheduler = scheduler
        self.history = WaveformHistory(history_size)
        self.colors: ColorTheme = DEFAULT_THEME

        self._clock = clock or (lambda: time.time() * 1000.0)
        self._tap: Optional[FrequencySource] = None
        self._pending: Any = None

        self.is_active = False
        self.width = DEFAULT_WIDTH
        self.height = DEFAULT_HEIGHT
        self.dpr = 1.0
        self.last_strokes: list[Stroke] = []

        logger.info("Pulse line visualizer initialized")

    @property
    def connected(self) -> bool:
        return self._tap is not None

    # ----------------------------
    # Inputs
    # ----------------------------

    def connect_audio(self, tap: FrequencySource) -> None:
        if tap is None:
            logger.warning("No audio tap provided")
            return
        if self._tap is not None:
            return
        self._tap = tap
        logger.info("Audio tap connected to pulse visualizer")

    def update_colors(self, colors: ColorTheme) -> None:
        # Latest theme wins on the next frame; no blending here.
        self.colors = colors

    def resize(self, width: int, height: int, dpr: float = 1.0) -> None:
        self.width = width or DEFAULT_WIDTH
        self.height = height or DEFAULT_HEIGHT
        self.dpr = dpr or 1.0
        self.surface.resize(self.width, self.height, self.dpr)

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def show(self) -> None:
        if self.is_active:
            return
        self.is_active = True
        self._animate()
        logger.info("Pulse visualizer shown")

    def hide(self) -> None:
        self.is_active = False
        self._cancel_pending()
        self.surface.clear()
        self.surface.present()
        logger.info("Pulse visualizer hidden")

    def toggle(self) -> bool:
        if self.is_active:
            self.hide()
        else:
            self.show()
        return self.is_active

    def dispose(self) -> None:
        self.is_active = False
        self._cancel_pending()
        self.surface.clear()
        self.surface.present()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self.scheduler.cancel(self._pending)
            self._pending = None

    def _animate(self) -> None:
        if not self.is_active:
            return
        self._pending = self.scheduler.request(self._on_frame)
        self.tick()

    def _on_frame(self) -> None:
        self._pending = None
        self._animate()

    # ----------------------------
    # Rendering
    # ----------------------------

    def tick(self, now_ms: Optional[float] = None) -> list[Stroke]:
        now = self._clock() if now_ms is None else now_ms

        self.surface.clear()
        if self._tap is not None:
            frame = downsample(self._tap.read())
            self.history.push(frame)
            strokes = compose_pulse(self.history.recent(TRAIL_LENGTH), frame.mean, self.colors,
                                    self.width, self.height, now)
        else:
            strokes = compose_idle(self.colors, self.width, self.height, now)

        for stroke in strokes:
            self.surface.stroke_path(stroke.path, stroke.style)
        self.surface.present()

        self.last_strokes = strokes
        return strokes
