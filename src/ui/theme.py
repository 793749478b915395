# ui/theme.py
from __future__ import annotations

import logging

from PySide6.QtWidgets import QApplication

from core.models import ColorTheme

logger = logging.getLogger(__name__)


def build_stylesheet(colors: ColorTheme) -> str:
    """
    App-wide stylesheet carrying the six theme colors. Widgets only refer to
    object names, so swapping the sheet re-themes everything at once.
    """
    c = colors
    return f"""
    QWidget#PlayerRoot {{
        background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
            stop:0 {c.dark}, stop:0.5 {c.secondary}, stop:1 {c.dark});
    }}

    QLabel#TrackTitle {{
        color: {c.light};
        font-size: 22px;
        font-weight: 600;
    }}
    QLabel#TrackArtist {{
        color: {c.muted};
        font-size: 14px;
    }}
    QLabel#CurrentTime, QLabel#Duration {{
        color: {c.muted};
        font-size: 11px;
    }}

    QToolButton {{
        border: 1px solid transparent;
        background: transparent;
        padding: 6px;
        border-radius: 10px;
        color: {c.light};
    }}
    QToolButton:hover {{
        background: {c.dark};
        border-color: {c.accent};
    }}

    QToolButton#BtnPlay {{
        background: {c.primary};
        border: 1px solid {c.accent};
        border-radius: 28px;
        padding: 12px;
    }}
    QToolButton#BtnPlay:hover {{
        background: {c.secondary};
    }}

    QWidget#LoadingOverlay {{
        background: #000000;
    }}
    QLabel#LoadingStatus {{
        color: {c.light};
        font-size: 12px;
    }}
    QProgressBar#LoadingProgress {{
        background: {c.dark};
        border: none;
        border-radius: 3px;
        max-height: 6px;
    }}
    QProgressBar#LoadingProgress::chunk {{
        background: {c.primary};
        border-radius: 3px;
    }}
    """


def apply_theme(colors: ColorTheme) -> None:
    app = QApplication.instance()
    if app is None:
        return
    logger.info("Applying color palette: %s", colors.as_dict())
    app.setStyleSheet(build_stylesheet(colors))
