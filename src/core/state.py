from __future__ import annotations

from PySide6.QtCore import QObject

from core.config import PlayerConfig
from core.models import TrackDescriptor


class AppState(QObject):
    """
    Process-wide handles: exactly one config, one player and one track list
    per session.
    """

    def __init__(self, config: PlayerConfig):
        super().__init__()
        self.config = config
        self.player = None
        self.tracks: list[TrackDescriptor] = []

    def set_tracks(self, tracks: list[TrackDescriptor]) -> None:
        self.tracks = list(tracks)
