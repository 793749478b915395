# player/device.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import numpy as np


@dataclass(eq=False)
class PrimedAudio:
    """
    Handle for an audio file fetched ahead of time.

    Created immediately when a preload starts; `data` arrives later from a
    background fetch. A handle without data still binds (the device then
    streams from `url`).
    """
    url: str
    title: str = ""
    data: Optional[bytes] = None
    error: Optional[str] = None
    _listeners: list[Callable[["PrimedAudio"], None]] = field(default_factory=list, repr=False)

    @property
    def ready(self) -> bool:
        return self.data is not None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def on_settled(self, callback: Callable[["PrimedAudio"], None]) -> None:
        if self.ready or self.failed:
            callback(self)
        else:
            self._listeners.append(callback)

    def resolve(self, data: bytes) -> None:
        self.data = data
        self._settle()

    def reject(self, error: str) -> None:
        self.error = error
        self._settle()

    def _settle(self) -> None:
        listeners, self._listeners = self._listeners, []
        for cb in listeners:
            cb(self)


class AudioTap(Protocol):
    """Read-only frequency view into the output device's signal."""

    @property
    def frequency_bin_count(self) -> int: ...

    @property
    def suspended(self) -> bool: ...

    def resume(self, on_running: Callable[[], None]) -> None:
        """Bring the audio graph to running state; call `on_running` once it is."""
        ...

    def read(self) -> np.ndarray:
        """Current byte-scaled (0-255) magnitude spectrum, one value per bin."""
        ...


class AudioOutputDevice(Protocol):
    def bind_source(self, url: Optional[str], primed: Optional[PrimedAudio] = None) -> None: ...

    def has_source(self) -> bool: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, seconds: float) -> None: ...

    def current_time(self) -> float: ...

    def duration(self) -> Optional[float]: ...

    def open_tap(self) -> AudioTap:
        """Attach the analysis tap. Only called once per device lifetime."""
        ...

    def on_ended(self, callback: Callable[[], None]) -> None: ...

    def on_error(self, callback: Callable[[str], None]) -> None: ...

    def on_time_update(self, callback: Callable[[float], None]) -> None: ...

    def on_duration(self, callback: Callable[[float], None]) -> None: ...


class AudioPrimer(Protocol):
    def prime(self, url: str, title: str = "") -> PrimedAudio:
        """Start fetching `url` in the background and return its handle at once."""
        ...
