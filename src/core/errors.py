# core/errors.py
from __future__ import annotations


class PlayerError(Exception):
    """Base class for everything the player raises on purpose."""


class ManifestLoadError(PlayerError):
    def __init__(self, source: str, reason: str):
        super().__init__(f"Could not load track manifest {source}: {reason}")
        self.source = source
        self.reason = reason


class AssetLoadError(PlayerError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not load asset {url}: {reason}")
        self.url = url
        self.reason = reason
