from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPainter, QPaintEvent
from PySide6.QtWidgets import QWidget

# Covers are shrunk to this many pixels across; smooth upscaling of the
# thumbnail reads as a heavy blur.
BLUR_SIZE = 24
BACKDROP_OPACITY = 0.3


def blurred_thumbnail(image: QImage, size: int = BLUR_SIZE) -> QImage:
    return image.scaled(
        size, size,
        Qt.AspectRatioMode.KeepAspectRatioByExpanding,
        Qt.TransformationMode.SmoothTransformation,
    )


class CoverBackdrop(QWidget):
    """
    Player root: the stylesheet gradient, with the current cover blurred and
    faded on top of it.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("PlayerRoot")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self._thumb: Optional[QImage] = None

    @property
    def backdrop(self) -> Optional[QImage]:
        return self._thumb

    def set_cover(self, image: Optional[QImage]) -> None:
        if image is None or image.isNull():
            self._thumb = None
        else:
            self._thumb = blurred_thumbnail(image)
        self.update()

    def paintEvent(self, event: QPaintEvent) -> None:
        if self._thumb is None:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.setOpacity(BACKDROP_OPACITY)
        painter.drawImage(self.rect(), self._thumb)
        painter.end()
