# player/prefetch.py
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal

from core.assets import AssetFetcher
from core.errors import AssetLoadError
from .device import PrimedAudio

logger = logging.getLogger(__name__)


class AudioPrefetchWorker(QThread):
    loaded_signal = Signal(str, bytes)   # url, data
    failed_signal = Signal(str, str)     # url, reason

    def __init__(self, url: str, timeout_s: Optional[float] = None, parent=None):
        super().__init__(parent)
        self.url = url
        self.timeout_s = timeout_s

    def run(self):
        # fetcher (and its session) lives on this thread only
        fetcher = AssetFetcher(timeout_s=self.timeout_s)
        try:
            data = fetcher.fetch_bytes(self.url)
        except AssetLoadError as e:
            self.failed_signal.emit(self.url, e.reason)
            return
        finally:
            fetcher.close()
        self.loaded_signal.emit(self.url, data)


class QtAudioPrimer(QObject):
    """
    Starts one background fetch per primed URL. Results land back on the GUI
    thread and fill in the handle; nothing is retried or cancelled.
    """

    def __init__(self, timeout_s: Optional[float] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.timeout_s = timeout_s
        self._in_flight: dict[str, tuple[PrimedAudio, AudioPrefetchWorker]] = {}

    def prime(self, url: str, title: str = "") -> PrimedAudio:
        if url in self._in_flight:
            return self._in_flight[url][0]

        handle = PrimedAudio(url=url, title=title)
        worker = AudioPrefetchWorker(url, self.timeout_s, self)
        worker.loaded_signal.connect(self._on_loaded)
        worker.failed_signal.connect(self._on_failed)
        worker.finished.connect(worker.deleteLater)

        self._in_flight[url] = (handle, worker)
        worker.start()
        return handle

    def _take(self, url: str) -> Optional[PrimedAudio]:
        entry = self._in_flight.pop(url, None)
        return entry[0] if entry else None

    def _on_loaded(self, url: str, data: bytes) -> None:
        handle = self._take(url)
        if handle is None:
            return
        handle.resolve(data)
        logger.info("Preloaded: %s", handle.title or url)

    def _on_failed(self, url: str, reason: str) -> None:
        handle = self._take(url)
        if handle is None:
            return
        handle.reject(reason)
        logger.warning("Preload failed for %s: %s", handle.title or url, reason)

    def wait_all(self, timeout_ms: int = 2000) -> None:
        for _, worker in list(self._in_flight.values()):
            worker.wait(timeout_ms)
