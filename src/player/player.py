# src/player/player.py
from __future__ import annotations

import logging
from typing import Any, Optional

from PySide6.QtCore import QObject, Signal

from core import commands
from core.models import PlaybackState, PlayerStatus, TrackDescriptor
from .cache import PreloadCache
from .device import AudioOutputDevice, AudioPrimer, AudioTap, PrimedAudio

logger = logging.getLogger(__name__)


class Player(QObject):
    """
    Playback engine: owns the single output device, the current-track
    pointer and the preload caches. Every mutation happens on the GUI thread.
    """

    stateChanged = Signal(object)       # PlaybackState
    trackChanged = Signal(object)       # TrackDescriptor
    themeChanged = Signal(object)       # ColorTheme
    positionChanged = Signal(float)     # seconds
    durationChanged = Signal(float)     # seconds
    tapConnected = Signal(object)       # AudioTap

    def __init__(
        self,
        device: AudioOutputDevice,
        primer: AudioPrimer,
        audio_cache_size: int = 3,
        image_cache_size: int = 64,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)

        self.device = device
        self.primer = primer

        self.tracks: list[TrackDescriptor] = []
        self.audio_cache: PreloadCache[PrimedAudio] = PreloadCache(audio_cache_size, name="audio")
        self.image_cache: PreloadCache[Any] = PreloadCache(image_cache_size, name="images")

        self._status = PlayerStatus.EMPTY
        self._index: Optional[int] = None
        self._is_playing = False
        self._position_s = 0.0
        self._duration_s: Optional[float] = None

        self._tap: Optional[AudioTap] = None

        # Bumped by anything that halts output; a tap resume that completes
        # under an older generation must not start playback.
        self._transport_gen = 0

        self.device.on_ended(self._on_device_ended)
        self.device.on_error(self._on_device_error)
        self.device.on_time_update(self._on_device_time)
        self.device.on_duration(self._on_device_duration)

    # ----------------------------
    # State
    # ----------------------------

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            status=self._status,
            current_index=self._index,
            is_playing=self._is_playing,
            position_seconds=self._position_s,
            duration_seconds=self._duration_s,
        )

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def current_index(self) -> Optional[int]:
        return self._index

    @property
    def current_track(self) -> Optional[TrackDescriptor]:
        if self._index is None:
            return None
        return self.tracks[self._index]

    @property
    def tap(self) -> Optional[AudioTap]:
        return self._tap

    def _emit_state(self) -> None:
        self.stateChanged.emit(self.state)

    # ----------------------------
    # Track list
    # ----------------------------

    def set_tracks(self, tracks: list[TrackDescriptor]) -> None:
        """
        Install the manifest. With at least one track the engine leaves EMPTY
        and binds track 0.
        """
        self.tracks = list(tracks)
        if not self.tracks:
            logger.info("No tracks available; player stays empty")
            self._index = None
            self._status = PlayerStatus.EMPTY
            self._emit_state()
            return

        self.load_track(0)

    # ----------------------------
    # Transport
    # ----------------------------

    def load_track(self, index: int, autoplay: bool = False) -> None:
        if index < 0 or index >= len(self.tracks):
            return

        track = self.tracks[index]
        logger.info("Loading track: %s", track.title)

        # Stop current audio
        self._halt()

        self._index = index
        self._position_s = 0.0
        self._duration_s = None

        # Visual state first
        self.trackChanged.emit(track)
        self.themeChanged.emit(track.colors)

        if track.has_audio:
            primed = self.audio_cache.get(track.audio_ref)
            if primed is not None:
                logger.info("Using preloaded audio for %s", track.title)
            self.device.bind_source(track.audio_ref, primed)

            # One tap for the lifetime of the device, reused across tracks
            if self._tap is None:
                self._connect_tap()
        else:
            self.device.bind_source(None)
            logger.info("No audio file for track %s", track.title)

        self._status = PlayerStatus.READY
        self._emit_state()

        if autoplay:
            self.play()

        self.preload_adjacent_tracks()

    def play(self) -> None:
        if not self.device.has_source():
            return

        gen = self._transport_gen
        if self._tap is not None and self._tap.suspended:
            self._tap.resume(lambda: self._start_output(gen))
            return

        self._start_output(gen)

    def _start_output(self, gen: int) -> None:
        if gen != self._transport_gen:
            logger.debug("Discarding stale play request")
            return
        if not self.device.has_source():
            return

        self.device.play()
        self._is_playing = True
        self._status = PlayerStatus.PLAYING
        self._emit_state()

    def pause(self) -> None:
        self._halt()

        if not self.tracks:
            self._status = PlayerStatus.EMPTY
        elif self.device.has_source():
            self._status = PlayerStatus.PAUSED
        else:
            self._status = PlayerStatus.READY
        self._emit_state()

    def _halt(self) -> None:
        self._transport_gen += 1
        self.device.pause()
        self._is_playing = False

    def toggle_play_pause(self) -> None:
        if self._is_playing:
            self.pause()
        else:
            self.play()

    def next_track(self) -> None:
        if not self.tracks:
            return
        current = self._index or 0
        self.load_track((current + 1) % len(self.tracks), autoplay=self._is_playing)

    def previous_track(self) -> None:
        if not self.tracks:
            return
        current = self._index or 0
        count = len(self.tracks)
        self.load_track((current - 1 + count) % count, autoplay=self._is_playing)

    def seek(self, percent: float) -> None:
        duration = self.device.duration()
        if not duration:
            return

        percent = min(100.0, max(0.0, float(percent)))
        target = percent / 100.0 * duration
        self.device.seek(target)
        self._position_s = target
        self.positionChanged.emit(target)

    def dispatch(self, command: commands.Command) -> None:
        if isinstance(command, commands.Play):
            self.play()
        elif isinstance(command, commands.Pause):
            self.pause()
        elif isinstance(command, commands.TogglePlayPause):
            self.toggle_play_pause()
        elif isinstance(command, commands.Next):
            self.next_track()
        elif isinstance(command, commands.Previous):
            self.previous_track()
        elif isinstance(command, commands.Seek):
            self.seek(command.percent)
        elif isinstance(command, commands.LoadTrack):
            self.load_track(command.index, autoplay=command.autoplay)
        else:
            raise TypeError(f"Unknown player command: {command!r}")

    # ----------------------------
    # Audio tap
    # ----------------------------

    def _connect_tap(self) -> None:
        try:
            self._tap = self.device.open_tap()
        except Exception:
            # The player keeps working without a visualizer feed.
            logger.exception("Could not connect audio tap")
            return
        logger.info("Audio tap connected")
        self.tapConnected.emit(self._tap)

    # ----------------------------
    # Preloading
    # ----------------------------

    def preload_adjacent_tracks(self) -> None:
        if not self.tracks or self._index is None:
            return
        count = len(self.tracks)
        self.preload_track((self._index + 1) % count)
        self.preload_track((self._index - 1 + count) % count)

    def preload_track(self, index: int) -> None:
        if index < 0 or index >= len(self.tracks):
            return

        track = self.tracks[index]
        if not track.has_audio or track.audio_ref in self.audio_cache:
            return

        logger.info("Preloading: %s", track.title)
        try:
            handle = self.primer.prime(track.audio_ref, track.title)
        except Exception:
            logger.exception("Preload failed to start for %s", track.title)
            return

        self.audio_cache.put(track.audio_ref, handle)

    # ----------------------------
    # Cover images
    # ----------------------------

    def remember_cover(self, url: str, image: Any) -> None:
        self.image_cache.put(url, image)

    def cover_for(self, track: Optional[TrackDescriptor]) -> Any:
        if track is None or not track.image_ref:
            return None
        return self.image_cache.get(track.image_ref)

    # ----------------------------
    # Device callbacks
    # ----------------------------

    def _on_device_ended(self) -> None:
        # One track ends, one advance.
        self.next_track()

    def _on_device_error(self, message: str) -> None:
        track = self.current_track
        if track is not None and not track.has_audio:
            logger.info("No audio file linked to this track")
            return
        logger.error("Audio error: %s", message)

    def _on_device_time(self, seconds: float) -> None:
        self._position_s = seconds
        self.positionChanged.emit(seconds)

    def _on_device_duration(self, seconds: float) -> None:
        self._duration_s = seconds if seconds and seconds > 0 else None
        if self._duration_s:
            self.durationChanged.emit(self._duration_s)
