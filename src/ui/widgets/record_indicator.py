from __future__ import annotations

from PySide6.QtCore import QPointF, Qt, QTimer
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QWidget

from core.models import DEFAULT_THEME, ColorTheme

DEGREES_PER_TICK = 3.0


class RecordIndicator(QWidget):
    """Small vinyl record that spins while the player is playing."""

    def __init__(self, size: int = 56, parent=None):
        super().__init__(parent)
        self.setObjectName("RecordIndicator")
        self.setFixedSize(size, size)

        self.angle = 0.0
        self._colors: ColorTheme = DEFAULT_THEME

        self._timer = QTimer(self)
        self._timer.setInterval(30)
        self._timer.timeout.connect(self._advance)

    @property
    def spinning(self) -> bool:
        return self._timer.isActive()

    def set_spinning(self, spinning: bool) -> None:
        if spinning and not self._timer.isActive():
            self._timer.start()
        elif not spinning and self._timer.isActive():
            self._timer.stop()

    def set_colors(self, colors: ColorTheme) -> None:
        self._colors = colors
        self.update()

    def _advance(self) -> None:
        self.angle = (self.angle + DEGREES_PER_TICK) % 360.0
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        r = min(self.width(), self.height()) / 2 - 1
        painter.translate(self.width() / 2, self.height() / 2)
        painter.rotate(self.angle)

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor("#111111"))
        painter.drawEllipse(QPointF(0, 0), r, r)

        groove = QColor(self._colors.light)
        groove.setAlphaF(0.15)
        painter.setPen(QPen(groove, 1))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        for f in (0.85, 0.7, 0.55):
            painter.drawEllipse(QPointF(0, 0), r * f, r * f)

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(self._colors.accent))
        painter.drawEllipse(QPointF(0, 0), r * 0.35, r * 0.35)

        # off-center mark so the rotation is visible
        painter.setBrush(QColor(self._colors.dark))
        painter.drawEllipse(QPointF(r * 0.2, 0), r * 0.06, r * 0.06)
        painter.end()
