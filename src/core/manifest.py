# core/manifest.py
from __future__ import annotations

import logging
from typing import Any, Optional

from core.assets import AssetFetcher
from core.config import PlayerConfig
from core.errors import AssetLoadError, ManifestLoadError
from core.models import ColorTheme, TrackDescriptor
from core.utils import resolve_asset

logger = logging.getLogger(__name__)


def _text(raw: Any, fallback: str) -> str:
    if raw is None:
        return fallback
    s = str(raw).strip()
    return s or fallback


def _track_id(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _asset_ref(item: dict, key: str, position: int) -> Optional[str]:
    raw = item.get(key)
    if raw is None or isinstance(raw, str):
        return raw
    logger.warning("Ignoring %s of manifest entry %d: expected a string, got %s", key, position, type(raw).__name__)
    return None


def parse_track(item: dict, root: str, position: int, track_id: Optional[int] = None) -> TrackDescriptor:
    """
    Build one descriptor from a manifest entry.
    `track_id` replaces a missing or malformed id; without it the entry's
    1-based position is used.
    """
    parsed_id = _track_id(item.get("id"))
    if parsed_id is None:
        parsed_id = track_id if track_id is not None else position + 1

    return TrackDescriptor(
        track_id=parsed_id,
        title=_text(item.get("title"), f"Track {position + 1}"),
        artist=_text(item.get("artist"), "Unknown Artist"),
        album=_text(item.get("album"), "Unknown Album"),
        duration_label=_text(item.get("duration"), "0:00"),
        image_ref=resolve_asset(root, _asset_ref(item, "image", position)),
        audio_ref=resolve_asset(root, _asset_ref(item, "audio", position)),
        colors=ColorTheme.from_dict(item.get("colors")),
    )


def parse_manifest(data: Any, root: str, source: str = "<memory>") -> list[TrackDescriptor]:
    """
    Turn a decoded `{"tracks": [...]}` document into descriptors.

    A document without a `tracks` array is a ManifestLoadError. Individual bad
    entries (not an object, duplicate id) are skipped with a warning so one
    broken entry doesn't empty the player.
    """
    if not isinstance(data, dict):
        raise ManifestLoadError(source, "top level is not an object")
    items = data.get("tracks")
    if not isinstance(items, list):
        raise ManifestLoadError(source, "missing 'tracks' array")

    tracks: list[TrackDescriptor] = []
    seen_ids: set[int] = set()

    # entries without a usable id get numbers above every explicit id
    explicit_ids = [_track_id(item.get("id")) for item in items if isinstance(item, dict)]
    next_free_id = max((i for i in explicit_ids if i is not None), default=0) + 1

    for position, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping manifest entry %d: not an object", position)
            continue

        fallback_id = None
        if _track_id(item.get("id")) is None:
            fallback_id = next_free_id
            next_free_id += 1

        track = parse_track(item, root, position, track_id=fallback_id)
        if track.track_id in seen_ids:
            logger.warning("Skipping manifest entry %d: duplicate id %d", position, track.track_id)
            continue

        seen_ids.add(track.track_id)
        tracks.append(track)

    return tracks


def load_manifest(source: str, root: str, fetcher: Optional[AssetFetcher] = None) -> list[TrackDescriptor]:
    fetcher = fetcher or AssetFetcher()
    try:
        data = fetcher.fetch_json(source)
    except AssetLoadError as e:
        raise ManifestLoadError(source, e.reason) from e
    return parse_manifest(data, root, source)


def load_tracks(config: PlayerConfig, fetcher: Optional[AssetFetcher] = None) -> list[TrackDescriptor]:
    """
    Load the configured manifest. Failures are logged and produce an empty list,
    which leaves the player in its EMPTY state.
    """
    fetcher = fetcher or AssetFetcher(timeout_s=config.asset_timeout_s)
    try:
        tracks = load_manifest(config.manifest_source, config.root, fetcher)
    except ManifestLoadError as e:
        logger.error("Error loading tracks: %s", e)
        return []

    logger.info("Loaded %d track(s)", len(tracks))
    return tracks
