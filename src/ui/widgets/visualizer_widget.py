from __future__ import annotations

from typing import Callable, Optional, Sequence

from PySide6.QtCore import QObject, QPointF, Qt, QTimer
from PySide6.QtGui import QBrush, QColor, QImage, QLinearGradient, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from visualizer.pulse import RGBA, LineTo, MoveTo, PathCommand, QuadTo, StrokeStyle
from visualizer.renderer import PulseVisualizer

GLOW_PASSES = 3


def _qcolor(rgba: RGBA) -> QColor:
    r, g, b, a = rgba
    color = QColor(r, g, b)
    color.setAlphaF(a)
    return color


def to_painter_path(path: Sequence[PathCommand]) -> QPainterPath:
    qpath = QPainterPath()
    for cmd in path:
        if isinstance(cmd, MoveTo):
            qpath.moveTo(cmd.x, cmd.y)
        elif isinstance(cmd, QuadTo):
            qpath.quadTo(QPointF(cmd.cx, cmd.cy), QPointF(cmd.x, cmd.y))
        elif isinstance(cmd, LineTo):
            qpath.lineTo(cmd.x, cmd.y)
    return qpath


class QImageSurface:
    """
    Canvas-like backing store: a QImage in physical pixels with the device
    pixel ratio set, so painting happens in logical coordinates but stays
    sharp on high-density screens.
    """

    def __init__(self, on_present: Optional[Callable[[], None]] = None):
        self.on_present = on_present
        self.width = 0
        self.height = 0
        self.image = QImage(1, 1, QImage.Format.Format_ARGB32_Premultiplied)
        self.image.fill(Qt.GlobalColor.transparent)

    def resize(self, width: int, height: int, dpr: float) -> None:
        self.width = width
        self.height = height
        image = QImage(max(1, round(width * dpr)), max(1, round(height * dpr)),
                       QImage.Format.Format_ARGB32_Premultiplied)
        image.setDevicePixelRatio(dpr)
        image.fill(Qt.GlobalColor.transparent)
        self.image = image

    def clear(self) -> None:
        self.image.fill(Qt.GlobalColor.transparent)

    def stroke_path(self, path: Sequence[PathCommand], style: StrokeStyle) -> None:
        qpath = to_painter_path(path)
        painter = QPainter(self.image)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        # QPainter has no shadowBlur; approximate the glow with wide faint strokes
        if style.shadow_blur > 0 and style.shadow_color[3] > 0:
            for k in range(GLOW_PASSES, 0, -1):
                glow = _qcolor(style.shadow_color)
                glow.setAlphaF(style.shadow_color[3] * 0.08)
                pen = QPen(glow, style.width + style.shadow_blur * k / GLOW_PASSES)
                pen.setCapStyle(Qt.PenCapStyle.RoundCap)
                painter.strokePath(qpath, pen)

        if len(style.stops) == 1:
            brush = QBrush(_qcolor(style.stops[0][1]))
        else:
            gradient = QLinearGradient(0, 0, self.width, 0)
            for offset, rgba in style.stops:
                gradient.setColorAt(offset, _qcolor(rgba))
            brush = QBrush(gradient)

        pen = QPen(brush, style.width)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        painter.strokePath(qpath, pen)
        painter.end()

    def present(self) -> None:
        if self.on_present:
            self.on_present()


class QtFrameScheduler(QObject):
    """requestAnimationFrame stand-in: one single-shot timer per request."""

    def __init__(self, interval_ms: int = 16, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.interval_ms = interval_ms

    def request(self, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(self.interval_ms)
        timer.timeout.connect(lambda: self._fire(timer, callback))
        timer.start()
        return timer

    def _fire(self, timer: QTimer, callback: Callable[[], None]) -> None:
        timer.deleteLater()
        callback()

    def cancel(self, handle: QTimer) -> None:
        handle.stop()
        handle.deleteLater()


class VisualizerWidget(QWidget):
    def __init__(self, history_size: int = 100, parent=None):
        super().__init__(parent)
        self.setObjectName("Visualizer")
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self.setMinimumHeight(120)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self.surface = QImageSurface(on_present=self.update)
        self.scheduler = QtFrameScheduler(parent=self)
        self.visualizer = PulseVisualizer(self.surface, self.scheduler, history_size=history_size)
        self.visualizer.resize(self.width(), self.height(), self.devicePixelRatioF())

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        # The loop keeps running; the next tick draws at the new size.
        self.visualizer.resize(self.width(), self.height(), self.devicePixelRatioF())

    def paintEvent(self, event) -> None:
        # moved to a screen with a different density
        if self.devicePixelRatioF() != self.visualizer.dpr:
            self.visualizer.resize(self.width(), self.height(), self.devicePixelRatioF())

        painter = QPainter(self)
        painter.drawImage(QPointF(0, 0), self.surface.image)
        painter.end()

    def closeEvent(self, event) -> None:
        self.visualizer.dispose()
        super().closeEvent(event)
