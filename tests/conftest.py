"""Test configuration and fixtures"""

import os
import sys
from pathlib import Path

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.models import ColorTheme, TrackDescriptor
from player.device import PrimedAudio


class FakeTap:
    """Frequency tap whose resume completes only when the test says so."""

    def __init__(self, suspended=False, bins=256, level=0):
        self.suspended = suspended
        self.frequency_bin_count = bins
        self.level = level
        self.reads = 0
        self._waiting = []

    def resume(self, on_running):
        self._waiting.append(on_running)

    def finish_resume(self):
        self.suspended = False
        waiting, self._waiting = self._waiting, []
        for cb in waiting:
            cb()

    def read(self):
        self.reads += 1
        return np.full(self.frequency_bin_count, self.level, dtype=np.uint8)


class FakeDevice:
    """Records every transport call the player makes."""

    def __init__(self, tap=None):
        self.tap = tap if tap is not None else FakeTap()
        self.binds = []
        self.play_calls = 0
        self.pause_calls = 0
        self.seeks = []
        self.taps_opened = 0
        self.duration_s = None
        self.position_s = 0.0
        self.tap_error = None

        self._source = None
        self._ended = []
        self._errors = []
        self._time = []
        self._duration = []

    # --- AudioOutputDevice ---
    def bind_source(self, url, primed=None):
        self._source = url
        self.binds.append((url, primed))

    def has_source(self):
        return self._source is not None

    def play(self):
        self.play_calls += 1

    def pause(self):
        self.pause_calls += 1

    def seek(self, seconds):
        self.seeks.append(seconds)
        self.position_s = seconds

    def current_time(self):
        return self.position_s

    def duration(self):
        return self.duration_s

    def open_tap(self):
        if self.tap_error is not None:
            raise self.tap_error
        self.taps_opened += 1
        return self.tap

    def on_ended(self, callback):
        self._ended.append(callback)

    def on_error(self, callback):
        self._errors.append(callback)

    def on_time_update(self, callback):
        self._time.append(callback)

    def on_duration(self, callback):
        self._duration.append(callback)

    # --- test helpers ---
    @property
    def bound_url(self):
        return self._source

    def fire_ended(self):
        for cb in self._ended:
            cb()

    def fire_error(self, message):
        for cb in self._errors:
            cb(message)

    def fire_time(self, seconds):
        self.position_s = seconds
        for cb in self._time:
            cb(seconds)

    def fire_duration(self, seconds):
        self.duration_s = seconds
        for cb in self._duration:
            cb(seconds)


class FakePrimer:
    def __init__(self):
        self.primed = []

    def prime(self, url, title=""):
        self.primed.append(url)
        return PrimedAudio(url=url, title=title)


class RecordingSurface:
    def __init__(self):
        self.size = None
        self.clears = 0
        self.presents = 0
        self.strokes = []

    def resize(self, width, height, dpr):
        self.size = (width, height, dpr)

    def clear(self):
        self.clears += 1
        self.strokes = []

    def stroke_path(self, path, style):
        self.strokes.append((path, style))

    def present(self):
        self.presents += 1


class ManualScheduler:
    """Frame scheduler driven by the test instead of a timer."""

    def __init__(self):
        self._next = 0
        self.pending = {}
        self.cancelled = []

    def request(self, callback):
        self._next += 1
        self.pending[self._next] = callback
        return self._next

    def cancel(self, handle):
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def fire(self):
        pending, self.pending = self.pending, {}
        for cb in pending.values():
            cb()


def make_track(n, audio=True, image=True, colors=None):
    return TrackDescriptor(
        track_id=n,
        title=f"Song {n}",
        artist=f"Artist {n}",
        album="Album",
        duration_label="3:20",
        image_ref=f"/covers/{n}.jpg" if image else None,
        audio_ref=f"/audio/{n}.mp3" if audio else None,
        colors=colors or ColorTheme(),
    )


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def fake_tap():
    return FakeTap()


@pytest.fixture
def fake_device(fake_tap):
    return FakeDevice(fake_tap)


@pytest.fixture
def fake_primer():
    return FakePrimer()


@pytest.fixture
def player(qapp, fake_device, fake_primer):
    from player.player import Player

    return Player(fake_device, fake_primer, audio_cache_size=3, image_cache_size=8)


@pytest.fixture
def tracks():
    return [make_track(n) for n in range(1, 4)]
