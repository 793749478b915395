# core/models.py
from __future__ import annotations

import re
from dataclasses import dataclass, fields
from enum import Enum, auto
from typing import Any, Mapping

_HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass(frozen=True)
class ColorTheme:
    primary: str = "#6366f1"
    secondary: str = "#4f46e5"
    accent: str = "#a78bfa"
    muted: str = "#94a3b8"
    dark: str = "#1e293b"
    light: str = "#e2e8f0"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ColorTheme":
        """
        Build a theme from a manifest `colors` object.
        Any missing or malformed entry keeps the default for that key, so a
        theme is always complete.
        """
        defaults = cls()
        if not isinstance(data, Mapping):
            return defaults

        values = {}
        for f in fields(cls):
            raw = data.get(f.name)
            if isinstance(raw, str) and _HEX_RE.match(raw.strip()):
                values[f.name] = raw.strip().lower()
            else:
                values[f.name] = getattr(defaults, f.name)
        return cls(**values)

    def as_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_THEME = ColorTheme()


@dataclass(frozen=True)
class TrackDescriptor:
    track_id: int
    title: str
    artist: str
    album: str
    duration_label: str
    image_ref: str | None
    audio_ref: str | None
    colors: ColorTheme = DEFAULT_THEME

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_ref)


class PlayerStatus(Enum):
    EMPTY = auto()
    READY = auto()
    PLAYING = auto()
    PAUSED = auto()


@dataclass(frozen=True)
class PlaybackState:
    status: PlayerStatus = PlayerStatus.EMPTY
    current_index: int | None = None
    is_playing: bool = False
    position_seconds: float = 0.0
    duration_seconds: float | None = None

    @property
    def progress_percent(self) -> float:
        if not self.duration_seconds:
            return 0.0
        return min(100.0, max(0.0, self.position_seconds / self.duration_seconds * 100.0))
