# ui/workers/startup_loader.py
from __future__ import annotations

import logging

from PySide6.QtCore import QThread, Signal
from PySide6.QtGui import QImage

from core.assets import AssetFetcher
from core.config import PlayerConfig
from core.manifest import load_tracks
from player.covers import CoverProgress, preload_cover_images

logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> QImage | None:
    image = QImage.fromData(data)
    return None if image.isNull() else image


class StartupLoader(QThread):
    """
    Startup gate: manifest first, then every cover image strictly one after
    another. `finished_signal` fires only once all of them are accounted for.
    """

    tracks_signal = Signal(object)          # list[TrackDescriptor]
    progress_signal = Signal(int, int)      # done, total
    image_signal = Signal(str, QImage)      # url, decoded cover
    finished_signal = Signal(object)        # list[TrackDescriptor]

    def __init__(self, config: PlayerConfig, parent=None):
        super().__init__(parent)
        self.config = config

    def run(self):
        # IMPORTANT: fetcher (requests.Session) created inside this thread
        fetcher = AssetFetcher(timeout_s=self.config.asset_timeout_s)
        tracks = []
        try:
            tracks = load_tracks(self.config, fetcher)
            self.tracks_signal.emit(tracks)

            def _load(url: str):
                return decode_image(fetcher.fetch_bytes(url))

            def _progress(p: CoverProgress):
                self.progress_signal.emit(p.done, p.total)

            preload_cover_images(
                tracks,
                load_image=_load,
                on_loaded=self.image_signal.emit,
                on_progress=_progress,
                should_stop=self.isInterruptionRequested,
            )
        except Exception:
            logger.exception("Startup loading failed")
        finally:
            fetcher.close()
            self.finished_signal.emit(tracks)
