# player/qt_output.py
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import numpy as np
from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QObject, QTimer, QUrl
from PySide6.QtMultimedia import (
    QAudioBuffer,
    QAudioBufferOutput,
    QAudioFormat,
    QAudioOutput,
    QMediaPlayer,
)

from core.utils import is_remote
from visualizer.analyser import SpectrumAnalyser, pcm_to_mono
from .device import PrimedAudio

logger = logging.getLogger(__name__)

_SAMPLE_FORMATS = {
    QAudioFormat.SampleFormat.UInt8: "uint8",
    QAudioFormat.SampleFormat.Int16: "int16",
    QAudioFormat.SampleFormat.Int32: "int32",
    QAudioFormat.SampleFormat.Float: "float",
}

# No buffer for this long means the output went quiet (paused or ended).
SILENCE_AFTER_S = 0.1


def _qurl(url: str) -> QUrl:
    if is_remote(url) or url.startswith("file:"):
        return QUrl(url)
    return QUrl.fromLocalFile(url)


class QtFrequencyTap(QObject):
    """
    Analysis tap fed by QAudioBufferOutput.

    Starts suspended; `resume` flips it to running on the next event-loop
    turn, so callers never see playback start synchronously.
    """

    def __init__(self, analyser: Optional[SpectrumAnalyser] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.analyser = analyser or SpectrumAnalyser()
        self._suspended = True
        self._last_buffer_at = 0.0

    @property
    def frequency_bin_count(self) -> int:
        return self.analyser.frequency_bin_count

    @property
    def suspended(self) -> bool:
        return self._suspended

    def resume(self, on_running: Callable[[], None]) -> None:
        def _running():
            self._suspended = False
            logger.info("Audio graph resumed")
            on_running()

        QTimer.singleShot(0, _running)

    def on_audio_buffer(self, buffer: QAudioBuffer) -> None:
        if not buffer.isValid():
            return
        fmt = buffer.format()
        sample_format = _SAMPLE_FORMATS.get(fmt.sampleFormat())
        if sample_format is None:
            return

        raw = bytes(buffer.constData())[: buffer.byteCount()]
        self.analyser.push(pcm_to_mono(raw, sample_format, fmt.channelCount()))
        self._last_buffer_at = time.monotonic()

    def read(self) -> np.ndarray:
        if time.monotonic() - self._last_buffer_at > SILENCE_AFTER_S:
            self.analyser.push(np.zeros(self.analyser.fft_size, dtype=np.float32))
        return self.analyser.byte_frequency_data()


class QtAudioOutputDevice(QObject):
    """
    The one persistent output device: a QMediaPlayer plus QAudioOutput,
    rebound to a new source on every track change.
    """

    def __init__(self, volume: float = 1.0, parent: Optional[QObject] = None):
        super().__init__(parent)

        self.audio = QAudioOutput(self)
        self.audio.setVolume(volume)
        self.media = QMediaPlayer(self)
        self.media.setAudioOutput(self.audio)

        self._url: Optional[str] = None
        self._buffer: Optional[QBuffer] = None
        self._tap: Optional[QtFrequencyTap] = None
        self._buffer_output: Optional[QAudioBufferOutput] = None

        self._ended_cbs: list[Callable[[], None]] = []
        self._error_cbs: list[Callable[[str], None]] = []
        self._time_cbs: list[Callable[[float], None]] = []
        self._duration_cbs: list[Callable[[float], None]] = []

        self.media.positionChanged.connect(self._on_position)
        self.media.durationChanged.connect(self._on_duration)
        self.media.mediaStatusChanged.connect(self._on_media_status)
        self.media.errorOccurred.connect(self._on_error)

    # ---- source ----

    def bind_source(self, url: Optional[str], primed: Optional[PrimedAudio] = None) -> None:
        self._url = url
        old_buffer, self._buffer = self._buffer, None

        if url is None:
            self.media.setSource(QUrl())
        elif primed is not None and primed.ready:
            self._buffer = QBuffer(self)
            self._buffer.setData(QByteArray(primed.data))
            self._buffer.open(QIODevice.OpenModeFlag.ReadOnly)
            self.media.setSourceDevice(self._buffer, _qurl(url))
        else:
            self.media.setSource(_qurl(url))

        if old_buffer is not None:
            old_buffer.close()
            old_buffer.deleteLater()

    def has_source(self) -> bool:
        return self._url is not None

    # ---- transport ----

    def play(self) -> None:
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def seek(self, seconds: float) -> None:
        self.media.setPosition(int(max(0.0, seconds) * 1000))

    def current_time(self) -> float:
        return self.media.position() / 1000.0

    def duration(self) -> Optional[float]:
        ms = self.media.duration()
        return ms / 1000.0 if ms > 0 else None

    # ---- tap ----

    def open_tap(self) -> QtFrequencyTap:
        if self._tap is not None:
            return self._tap
        self._tap = QtFrequencyTap(parent=self)
        self._buffer_output = QAudioBufferOutput(self)
        self._buffer_output.audioBufferReceived.connect(self._tap.on_audio_buffer)
        self.media.setAudioBufferOutput(self._buffer_output)
        return self._tap

    # ---- callbacks ----

    def on_ended(self, callback: Callable[[], None]) -> None:
        self._ended_cbs.append(callback)

    def on_error(self, callback: Callable[[str], None]) -> None:
        self._error_cbs.append(callback)

    def on_time_update(self, callback: Callable[[float], None]) -> None:
        self._time_cbs.append(callback)

    def on_duration(self, callback: Callable[[float], None]) -> None:
        self._duration_cbs.append(callback)

    def _on_position(self, ms: int) -> None:
        for cb in list(self._time_cbs):
            cb(ms / 1000.0)

    def _on_duration(self, ms: int) -> None:
        for cb in list(self._duration_cbs):
            cb(ms / 1000.0)

    def _on_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            for cb in list(self._ended_cbs):
                cb()

    def _on_error(self, error: QMediaPlayer.Error, message: str) -> None:
        if error == QMediaPlayer.Error.NoError:
            return
        text = message or getattr(error, "name", str(error))
        for cb in list(self._error_cbs):
            cb(text)
