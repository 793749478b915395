from __future__ import annotations

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QLabel, QProgressBar, QVBoxLayout, QWidget

from player.covers import CoverProgress


class LoadingOverlay(QWidget):
    """Covers the player until every cover image has been accounted for."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("LoadingOverlay")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(80, 0, 80, 0)
        layout.addStretch(1)

        self.status = QLabel("Loading tracks...")
        self.status.setObjectName("LoadingStatus")
        self.status.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.bar = QProgressBar()
        self.bar.setObjectName("LoadingProgress")
        self.bar.setTextVisible(False)
        self.bar.setRange(0, 1000)
        self.bar.setValue(0)

        layout.addWidget(self.status)
        layout.addWidget(self.bar)
        layout.addStretch(1)

    def set_progress(self, progress: CoverProgress) -> None:
        self.bar.setValue(round(progress.fraction * 1000))
        self.status.setText(progress.label)

    def dismiss(self, delay_ms: int = 300) -> None:
        # short pause so 100% is visible before the overlay goes away
        QTimer.singleShot(delay_ms, self._finish)

    def _finish(self) -> None:
        self.hide()
