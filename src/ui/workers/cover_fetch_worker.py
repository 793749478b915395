# ui/workers/cover_fetch_worker.py
from __future__ import annotations

from PySide6.QtCore import QThread, Signal
from PySide6.QtGui import QImage

from core.assets import AssetFetcher
from core.errors import AssetLoadError
from ui.workers.startup_loader import decode_image


class CoverFetchWorker(QThread):
    """Loads a single cover that wasn't in the image cache."""

    loaded_signal = Signal(str, QImage)   # url, image
    failed_signal = Signal(str, str)      # url, reason

    def __init__(self, url: str, timeout_s: float | None = None, parent=None):
        super().__init__(parent)
        self.url = url
        self.timeout_s = timeout_s

    def run(self):
        fetcher = AssetFetcher(timeout_s=self.timeout_s)
        try:
            image = decode_image(fetcher.fetch_bytes(self.url))
        except AssetLoadError as e:
            self.failed_signal.emit(self.url, e.reason)
            return
        finally:
            fetcher.close()

        if image is None:
            self.failed_signal.emit(self.url, "not a decodable image")
        else:
            self.loaded_signal.emit(self.url, image)
