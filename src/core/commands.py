# core/commands.py
from __future__ import annotations

from dataclasses import dataclass


# Transport commands issued by the UI and applied by Player.dispatch().

@dataclass(frozen=True)
class Play:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Previous:
    pass


@dataclass(frozen=True)
class Seek:
    percent: float


@dataclass(frozen=True)
class LoadTrack:
    index: int
    autoplay: bool = False


Command = Play | Pause | TogglePlayPause | Next | Previous | Seek | LoadTrack
