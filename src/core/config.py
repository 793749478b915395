# core/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.utils import resolve_asset

logger = logging.getLogger(__name__)

ENV_PREFIX = "PULSE_"


@dataclass(frozen=True)
class PlayerConfig:
    root: str = "."
    manifest: str = "data/tracks.json"

    # cache / history sizing
    audio_cache_size: int = 3
    image_cache_size: int = 64
    history_size: int = 100

    # None keeps requests waiting forever (the startup gate has no deadline)
    asset_timeout_s: Optional[float] = None

    log_level: str = "INFO"

    @property
    def manifest_source(self) -> str:
        """Manifest location with the asset root applied."""
        return resolve_asset(self.root, self.manifest) or self.manifest

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "PlayerConfig":
        env = os.environ if env is None else env
        defaults = cls()

        def _get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            if value is None:
                return None
            value = value.strip()
            return value or None

        def _int(name: str, default: int) -> int:
            raw = _get(name)
            if raw is None:
                return default
            try:
                value = int(raw)
            except ValueError:
                logger.warning("Ignoring %s%s=%r (not an integer)", ENV_PREFIX, name, raw)
                return default
            if value < 1:
                logger.warning("Ignoring %s%s=%r (must be >= 1)", ENV_PREFIX, name, raw)
                return default
            return value

        def _timeout() -> Optional[float]:
            raw = _get("ASSET_TIMEOUT")
            if raw is None:
                return None
            try:
                value = float(raw)
            except ValueError:
                logger.warning("Ignoring %sASSET_TIMEOUT=%r (not a number)", ENV_PREFIX, raw)
                return None
            return value if value > 0 else None

        return cls(
            root=_get("ROOT") or os.getcwd(),
            manifest=_get("MANIFEST") or defaults.manifest,
            audio_cache_size=_int("AUDIO_CACHE_SIZE", defaults.audio_cache_size),
            image_cache_size=_int("IMAGE_CACHE_SIZE", defaults.image_cache_size),
            history_size=_int("HISTORY_SIZE", defaults.history_size),
            asset_timeout_s=_timeout(),
            log_level=(_get("LOG_LEVEL") or defaults.log_level).upper(),
        )
