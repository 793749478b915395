from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import requests

from core.errors import AssetLoadError
from core.utils import is_remote


class AssetFetcher:
    """
    Reads manifest and asset bytes from either an http(s) URL or a local path.

    One fetcher (and its requests.Session) belongs to one thread; workers
    build their own.
    """

    def __init__(self, timeout_s: Optional[float] = None, user_agent: str = "pulse-player/0.1"):
        self.timeout_s = timeout_s
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def fetch_bytes(self, url: str) -> bytes:
        if is_remote(url):
            try:
                r = self.session.get(url, timeout=self.timeout_s)
                r.raise_for_status()
            except requests.RequestException as e:
                raise AssetLoadError(url, str(e)) from e
            return r.content

        path = _local_path(url)
        try:
            return path.read_bytes()
        except OSError as e:
            raise AssetLoadError(url, e.strerror or str(e)) from e

    def fetch_json(self, url: str) -> Any:
        data = self.fetch_bytes(url)
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise AssetLoadError(url, f"invalid JSON: {e}") from e

    def close(self) -> None:
        self.session.close()


def _local_path(url: str) -> Path:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(url)
