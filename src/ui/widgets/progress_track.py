from __future__ import annotations

from PySide6.QtCore import QRectF, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPaintEvent
from PySide6.QtWidgets import QSizePolicy, QWidget

from core.models import DEFAULT_THEME, ColorTheme


def percent_from_x(x: float, left: float, width: float) -> float:
    """Map a horizontal pointer position inside the track onto 0..100."""
    if width <= 0:
        return 0.0
    return max(0.0, min(100.0, (x - left) / width * 100.0))


class ProgressTrack(QWidget):
    """
    Horizontal progress track. Press, drag and release anywhere along it to
    seek; every move while pressed emits seekRequested(percent).
    """

    seekRequested = Signal(float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("ProgressTrack")
        self.setMinimumHeight(14)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        self._percent = 0.0
        self._dragging = False
        self._colors: ColorTheme = DEFAULT_THEME

    @property
    def percent(self) -> float:
        return self._percent

    @property
    def dragging(self) -> bool:
        return self._dragging

    def set_percent(self, percent: float) -> None:
        self._percent = max(0.0, min(100.0, float(percent)))
        self.update()

    def set_colors(self, colors: ColorTheme) -> None:
        self._colors = colors
        self.update()

    # --- pointer handling ---
    def _seek_to(self, x: float) -> None:
        percent = percent_from_x(x, 0.0, float(self.width()))
        self.set_percent(percent)
        self.seekRequested.emit(percent)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return super().mousePressEvent(event)
        self._dragging = True
        self._seek_to(event.position().x())

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._dragging:
            self._seek_to(event.position().x())

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self._dragging = False

    # --- painting ---
    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(Qt.PenStyle.NoPen)

        bar_h = 4.0
        y = (self.height() - bar_h) / 2
        groove = QColor(self._colors.light)
        groove.setAlphaF(0.2)
        painter.setBrush(groove)
        painter.drawRoundedRect(QRectF(0, y, self.width(), bar_h), 2, 2)

        fill_w = self.width() * self._percent / 100.0
        if fill_w > 0:
            painter.setBrush(QColor(self._colors.primary))
            painter.drawRoundedRect(QRectF(0, y, fill_w, bar_h), 2, 2)
        painter.end()
