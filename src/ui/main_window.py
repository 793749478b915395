from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont, QImage, QKeySequence, QPainter, QPixmap, QShortcut
from PySide6.QtWidgets import QHBoxLayout, QLabel, QMainWindow, QSizePolicy, QVBoxLayout

from core import commands
from core.models import DEFAULT_THEME, PlaybackState, TrackDescriptor
from player.covers import CoverProgress
from ui.loading_overlay import LoadingOverlay
from ui.player_bar import PlayerBar
from ui.theme import apply_theme
from ui.widgets.cover_backdrop import CoverBackdrop
from ui.widgets.record_indicator import RecordIndicator
from ui.widgets.visualizer_widget import VisualizerWidget
from ui.workers.cover_fetch_worker import CoverFetchWorker
from ui.workers.startup_loader import StartupLoader

logger = logging.getLogger(__name__)

ART_SIZE = 320


def placeholder_cover(size: int = 512) -> QImage:
    image = QImage(size, size, QImage.Format.Format_RGB32)
    image.fill(QColor("#000000"))
    p = QPainter(image)
    p.setPen(QColor("#ffffff"))
    font = QFont()
    font.setPixelSize(size // 14)
    p.setFont(font)
    p.drawText(image.rect(), Qt.AlignmentFlag.AlignCenter, "No Cover Image")
    p.end()
    return image


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("Pulse Player")
        self.resize(900, 640)
        self.app_state = app_state
        self.player = app_state.player

        self._ready = False
        self._loader: StartupLoader | None = None
        self._cover_workers: dict[str, CoverFetchWorker] = {}
        self._placeholder_image = placeholder_cover()

        # --- layout ---
        self.central_widget = CoverBackdrop()
        self.setCentralWidget(self.central_widget)

        root = QVBoxLayout(self.central_widget)
        root.setContentsMargins(24, 24, 24, 16)
        root.setSpacing(16)

        top = QHBoxLayout()
        top.setSpacing(24)

        self.album_art = QLabel()
        self.album_art.setObjectName("AlbumArt")
        self.album_art.setFixedSize(ART_SIZE, ART_SIZE)
        self.album_art.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._set_cover(self._placeholder_image)

        info = QVBoxLayout()
        info.setSpacing(6)

        self.lbl_title = QLabel("")
        self.lbl_title.setObjectName("TrackTitle")
        self.lbl_title.setWordWrap(True)
        self.lbl_artist = QLabel("")
        self.lbl_artist.setObjectName("TrackArtist")

        self.record = RecordIndicator()
        self.visualizer_widget = VisualizerWidget(history_size=app_state.config.history_size)
        self.visualizer_widget.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        title_row = QHBoxLayout()
        title_row.addWidget(self.record, 0, Qt.AlignmentFlag.AlignTop)
        title_col = QVBoxLayout()
        title_col.addWidget(self.lbl_title)
        title_col.addWidget(self.lbl_artist)
        title_row.addLayout(title_col, 1)

        info.addLayout(title_row)
        info.addWidget(self.visualizer_widget, 1)

        top.addWidget(self.album_art, 0, Qt.AlignmentFlag.AlignTop)
        top.addLayout(info, 1)
        root.addLayout(top, 1)

        self.player_bar = PlayerBar(self.player, self)
        self.player_bar.setEnabled(False)
        root.addWidget(self.player_bar)

        # --- loading gate ---
        self.overlay = LoadingOverlay(self.central_widget)
        self.overlay.setGeometry(self.central_widget.rect())
        self.overlay.raise_()

        # --- player signals ---
        self.player.trackChanged.connect(self._on_track_changed)
        self.player.themeChanged.connect(self._on_theme_changed)
        self.player.stateChanged.connect(self._on_state_changed)
        self.player.tapConnected.connect(self.visualizer_widget.visualizer.connect_audio)

        # --- shortcuts (window-level, so Space never reaches a scrolling child) ---
        QShortcut(QKeySequence(Qt.Key.Key_Right), self, activated=lambda: self._send(commands.Next()))
        QShortcut(QKeySequence(Qt.Key.Key_Left), self, activated=lambda: self._send(commands.Previous()))
        QShortcut(QKeySequence(Qt.Key.Key_Space), self, activated=lambda: self._send(commands.TogglePlayPause()))

        apply_theme(self._current_colors())
        self.visualizer_widget.visualizer.show()
        logger.info("Visualizer initialized and shown")

    # ----------------------------
    # Startup
    # ----------------------------

    def start(self) -> None:
        self._loader = StartupLoader(self.app_state.config, self)
        self._loader.tracks_signal.connect(self.app_state.set_tracks)
        self._loader.progress_signal.connect(self._on_load_progress)
        self._loader.image_signal.connect(self.player.remember_cover)
        self._loader.finished_signal.connect(self._on_startup_finished)
        self._loader.start()

    def _on_load_progress(self, done: int, total: int) -> None:
        self.overlay.set_progress(CoverProgress(done, total))

    def _on_startup_finished(self, tracks: list[TrackDescriptor]) -> None:
        self.player.set_tracks(tracks)

        self._ready = True
        self.player_bar.setEnabled(True)
        self.overlay.dismiss()

    def _send(self, command: commands.Command) -> None:
        if not self._ready:
            return
        self.player.dispatch(command)

    # ----------------------------
    # Player updates
    # ----------------------------

    def _current_colors(self):
        track = self.player.current_track
        return track.colors if track else DEFAULT_THEME

    def _on_track_changed(self, track: TrackDescriptor) -> None:
        self.lbl_title.setText(track.title)
        self.lbl_artist.setText(track.artist)
        self._show_cover_for(track)

    def _on_theme_changed(self, colors) -> None:
        apply_theme(colors)
        self.visualizer_widget.visualizer.update_colors(colors)
        self.record.set_colors(colors)

    def _on_state_changed(self, state: PlaybackState) -> None:
        self.record.set_spinning(state.is_playing)

    # ----------------------------
    # Album art
    # ----------------------------

    def _set_cover(self, image: QImage) -> None:
        self.central_widget.set_cover(image)
        self.album_art.setPixmap(
            QPixmap.fromImage(image).scaled(ART_SIZE, ART_SIZE, Qt.AspectRatioMode.KeepAspectRatioByExpanding,
                                            Qt.TransformationMode.SmoothTransformation)
        )

    def _show_cover_for(self, track: TrackDescriptor) -> None:
        cached = self.player.cover_for(track)
        if cached is not None:
            logger.info("Using cached image")
            self._set_cover(cached)
            return

        self._set_cover(self._placeholder_image)
        if track.image_ref and track.image_ref not in self._cover_workers:
            worker = CoverFetchWorker(track.image_ref, self.app_state.config.asset_timeout_s, self)
            worker.loaded_signal.connect(self._on_cover_loaded)
            worker.failed_signal.connect(self._on_cover_failed)
            worker.finished.connect(lambda url=track.image_ref: self._cover_workers.pop(url, None))
            worker.finished.connect(worker.deleteLater)
            self._cover_workers[track.image_ref] = worker
            worker.start()

    def _on_cover_loaded(self, url: str, image: QImage) -> None:
        self.player.remember_cover(url, image)
        track = self.player.current_track
        if track is not None and track.image_ref == url:
            self._set_cover(image)

    def _on_cover_failed(self, url: str, reason: str) -> None:
        logger.warning("Failed to load cover %s: %s", url, reason)

    # ----------------------------
    # Qt events
    # ----------------------------

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if self.overlay.isVisible():
            self.overlay.setGeometry(self.central_widget.rect())

    def closeEvent(self, event) -> None:
        if self._loader is not None and self._loader.isRunning():
            self._loader.requestInterruption()
            self._loader.wait(2000)
        for worker in list(self._cover_workers.values()):
            worker.wait(2000)
        self.visualizer_widget.visualizer.dispose()
        primer = self.player.primer
        if hasattr(primer, "wait_all"):
            primer.wait_all()
        super().closeEvent(event)
