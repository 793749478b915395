# ui/player_bar.py
from __future__ import annotations

from PySide6.QtCore import Qt, QSize, QByteArray
from PySide6.QtGui import QIcon, QPixmap, QPainter
from PySide6.QtSvg import QSvgRenderer
from PySide6.QtWidgets import QWidget, QHBoxLayout, QVBoxLayout, QLabel, QToolButton

from core import commands
from core.models import PlaybackState
from core.utils import format_time
from ui.widgets.progress_track import ProgressTrack


def _svg_icon(path_d: str, size: int = 20, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


SVG_PREV = "M6 18V6h2v12H6zm3.5-6L18 6v12l-8.5-6z"
SVG_NEXT = "M16 6v12h2V6h-2zM6 18l8.5-6L6 6v12z"
SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 5h4v14H6V5zm8 0h4v14h-4V5z"


class PlayerBar(QWidget):
    """Transport buttons plus the seekable progress track and time readouts."""

    def __init__(self, player, parent=None):
        super().__init__(parent)
        self.player = player

        self._is_playing = False
        self._icon_color = "#e5e7eb"

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 6, 8, 6)
        root.setSpacing(8)

        # --- progress row ---
        progress_row = QHBoxLayout()
        progress_row.setSpacing(10)

        self.lbl_time = QLabel("0:00")
        self.lbl_time.setObjectName("CurrentTime")
        self.lbl_dur = QLabel("0:00")
        self.lbl_dur.setObjectName("Duration")
        self.progress = ProgressTrack()

        progress_row.addWidget(self.lbl_time)
        progress_row.addWidget(self.progress, 1)
        progress_row.addWidget(self.lbl_dur)

        # --- buttons ---
        buttons = QHBoxLayout()
        buttons.setSpacing(18)

        self.btn_prev = QToolButton()
        self.btn_prev.setObjectName("BtnPrev")
        self.btn_prev.setIconSize(QSize(24, 24))
        self.btn_prev.setToolTip("Previous")

        self.btn_play = QToolButton()
        self.btn_play.setObjectName("BtnPlay")
        self.btn_play.setIconSize(QSize(30, 30))
        self.btn_play.setToolTip("Play")

        self.btn_next = QToolButton()
        self.btn_next.setObjectName("BtnNext")
        self.btn_next.setIconSize(QSize(24, 24))
        self.btn_next.setToolTip("Next")

        buttons.addStretch(1)
        buttons.addWidget(self.btn_prev)
        buttons.addWidget(self.btn_play)
        buttons.addWidget(self.btn_next)
        buttons.addStretch(1)

        root.addLayout(progress_row)
        root.addLayout(buttons)

        self._refresh_icons()

        # --- commands ---
        self.btn_play.clicked.connect(lambda: self._send(commands.TogglePlayPause()))
        self.btn_prev.clicked.connect(lambda: self._send(commands.Previous()))
        self.btn_next.clicked.connect(lambda: self._send(commands.Next()))
        self.progress.seekRequested.connect(lambda pct: self._send(commands.Seek(pct)))

        if self.player:
            self.player.stateChanged.connect(self._on_state_changed)
            self.player.trackChanged.connect(self._on_track_changed)
            self.player.positionChanged.connect(self._on_position)
            self.player.durationChanged.connect(self._on_duration)
            self.player.themeChanged.connect(self._on_theme_changed)

        self.setObjectName("PlayerBar")

    def _send(self, command: commands.Command) -> None:
        if self.player:
            self.player.dispatch(command)

    # --- player updates ---
    def _on_track_changed(self, track):
        self.progress.set_percent(0)
        self.lbl_time.setText("0:00")
        self.lbl_dur.setText(track.duration_label if track else "0:00")

    def _on_state_changed(self, state: PlaybackState):
        self._set_playing(state.is_playing)

    def _set_playing(self, playing: bool):
        self._is_playing = bool(playing)
        self.btn_play.setToolTip("Pause" if self._is_playing else "Play")
        self._refresh_icons()

    def _on_duration(self, seconds: float):
        if seconds:
            self.lbl_dur.setText(format_time(seconds))

    def _on_position(self, seconds: float):
        state = self.player.state if self.player else None
        if state is None or not state.duration_seconds:
            return
        if not self.progress.dragging:
            self.progress.set_percent(state.progress_percent)
        self.lbl_time.setText(format_time(seconds))

    def _on_theme_changed(self, colors):
        self._icon_color = colors.light
        self.progress.set_colors(colors)
        self._refresh_icons()

    def _refresh_icons(self):
        self.btn_prev.setIcon(_svg_icon(SVG_PREV, 24, self._icon_color))
        self.btn_next.setIcon(_svg_icon(SVG_NEXT, 24, self._icon_color))
        glyph = SVG_PAUSE if self._is_playing else SVG_PLAY
        self.btn_play.setIcon(_svg_icon(glyph, 30, self._icon_color))

    @property
    def is_playing(self) -> bool:
        return self._is_playing
