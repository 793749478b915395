# player/covers.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from core.errors import AssetLoadError
from core.models import TrackDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverProgress:
    done: int
    total: int

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0
        return self.done / self.total

    @property
    def label(self) -> str:
        return f"Loading cover images... {self.done}/{self.total}"


def preload_cover_images(
    tracks: Iterable[TrackDescriptor],
    load_image: Callable[[str], Any],
    on_loaded: Callable[[str, Any], None],
    on_progress: Callable[[CoverProgress], None],
    should_stop: Optional[Callable[[], bool]] = None,
) -> int:
    """
    Load every track's cover one at a time, in manifest order.

    Each load finishes (success or failure) before the next one starts, so
    progress advances monotonically by one per track. Tracks without an image
    count as processed. Returns the number of covers that actually loaded.

    `load_image` raises AssetLoadError (or returns None) on failure.
    """
    tracks = list(tracks)
    total = len(tracks)
    done = 0
    loaded = 0

    logger.info("Preloading %d cover image(s)...", total)
    on_progress(CoverProgress(done, total))

    for track in tracks:
        if should_stop is not None and should_stop():
            logger.info("Cover preloading stopped at %d/%d", done, total)
            return loaded

        if track.image_ref:
            try:
                image = load_image(track.image_ref)
            except AssetLoadError as e:
                image = None
                logger.warning("Failed to load: %s (%s)", track.image_ref, e.reason)
            else:
                if image is None:
                    logger.warning("Failed to decode: %s", track.image_ref)

            if image is not None:
                on_loaded(track.image_ref, image)
                loaded += 1
                logger.info("Loaded: %s (%d/%d)", track.image_ref, done + 1, total)

        done += 1
        on_progress(CoverProgress(done, total))

    logger.info("All cover images preloaded (%d/%d ok)", loaded, total)
    return loaded
