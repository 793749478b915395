"""Pulse line geometry and styling.

Everything here is plain math on lists and tuples so it can be drawn on any
surface: the Qt widget replays the paths with QPainter, tests inspect them
directly.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np

SAMPLE_COUNT = 32
HISTORY_SIZE = 100
TRAIL_LENGTH = 5
IDLE_POINTS = 50

Point = tuple[float, float]
RGBA = tuple[int, int, int, float]


# ----------------------------
# Path commands
# ----------------------------

@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class QuadTo:
    cx: float
    cy: float
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


PathCommand = MoveTo | QuadTo | LineTo


@dataclass(frozen=True)
class StrokeStyle:
    width: float
    # (offset 0..1, rgba) stops of a horizontal gradient; a single stop is a flat color
    stops: tuple[tuple[float, RGBA], ...]
    shadow_blur: float = 0.0
    shadow_color: RGBA = (0, 0, 0, 0.0)


@dataclass
class Frame:
    samples: list[int]
    mean: float = 0.0


# ----------------------------
# Colors
# ----------------------------

def hex_to_rgba(hex_color: str, alpha: float = 1.0) -> RGBA:
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)
    return (r, g, b, max(0.0, min(1.0, alpha)))


def edge_gradient(edge: str, middle: str, edge_alpha: float, middle_alpha: float) -> tuple[tuple[float, RGBA], ...]:
    return (
        (0.0, hex_to_rgba(edge, edge_alpha)),
        (0.5, hex_to_rgba(middle, middle_alpha)),
        (1.0, hex_to_rgba(edge, edge_alpha)),
    )


# ----------------------------
# Sampling
# ----------------------------

def downsample(bins: Sequence[int] | np.ndarray, sample_count: int = SAMPLE_COUNT) -> Frame:
    """
    Pick every floor(len(bins) / sample_count)-th bin.
    The mean is taken over all bins, not only the picked ones.
    """
    data = np.asarray(bins, dtype=np.float64).reshape(-1)
    if data.size == 0:
        return Frame([0] * sample_count, 0.0)

    step = data.size // sample_count
    samples = []
    for i in range(sample_count):
        index = i * step
        samples.append(int(data[index]) if index < data.size else 0)
    return Frame(samples, float(data.mean()))


class WaveformHistory:
    """Newest-first frame history trimmed to a fixed capacity."""

    def __init__(self, capacity: int = HISTORY_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._frames: deque[Frame] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._frames)

    def push(self, frame: Frame) -> None:
        self._frames.appendleft(frame)

    def recent(self, count: int = TRAIL_LENGTH) -> list[Frame]:
        return [self._frames[i] for i in range(min(count, len(self._frames)))]

    def clear(self) -> None:
        self._frames.clear()


# ----------------------------
# Geometry
# ----------------------------

def pulse_points(samples: Sequence[int], width: float, height: float, now_ms: float) -> list[Point]:
    center_y = height / 2
    count = len(samples)
    spacing = width / (count - 1) if count > 1 else 0.0
    time = now_ms * 0.003

    points = []
    for i, value in enumerate(samples):
        amplitude = (value / 255) * (height * 0.4)
        pulse = math.sin(i * 0.5 + time) * 5
        points.append((i * spacing, center_y + amplitude * math.sin(i * 0.3) + pulse))
    return points


def idle_points(width: float, height: float, now_ms: float, count: int = IDLE_POINTS) -> list[Point]:
    center_y = height / 2
    spacing = width / (count - 1)
    time = now_ms * 0.002

    points = []
    for i in range(count):
        wave1 = math.sin(i * 0.1 + time) * 10
        wave2 = math.sin(i * 0.2 - time * 1.5) * 5
        points.append((i * spacing, center_y + wave1 + wave2))
    return points


def smooth_path(points: Iterable[Point]) -> list[PathCommand]:
    """
    Join points with a quadratic segment to the horizontal midpoint followed by
    a short line, which reads as a smooth curve at these point densities.
    """
    path: list[PathCommand] = []
    prev_x = 0.0
    for i, (x, y) in enumerate(points):
        if i == 0:
            path.append(MoveTo(x, y))
        else:
            path.append(QuadTo(prev_x, y, (prev_x + x) / 2, y))
            path.append(LineTo(x, y))
        prev_x = x
    return path


def baseline_path(width: float, height: float) -> list[PathCommand]:
    center_y = height / 2
    return [MoveTo(0.0, center_y), LineTo(width, center_y)]


@dataclass
class Stroke:
    path: list[PathCommand]
    style: StrokeStyle
    points: list[Point] = field(default_factory=list)
