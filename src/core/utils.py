import math
from urllib.parse import urljoin, urlparse
from pathlib import Path


def format_time(seconds: float | None) -> str:
    """
    Format a position in seconds as M:SS.
    Unknown, zero or NaN values render as 0:00.
    """
    if not seconds or math.isnan(seconds) or seconds < 0:
        return "0:00"
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins}:{secs:02d}"


def is_remote(ref: str) -> bool:
    return urlparse(ref).scheme in ("http", "https")


def resolve_asset(root: str, ref: str | None) -> str | None:
    """
    Resolve a manifest asset reference against the asset root.

    Absolute http(s) URLs and absolute paths pass through. Relative refs are
    joined onto the root, which is either a directory or an http(s) base URL.
    """
    if not ref:
        return None
    ref = ref.strip()
    if not ref:
        return None
    if is_remote(ref):
        return ref
    if is_remote(root):
        base = root if root.endswith("/") else root + "/"
        return urljoin(base, ref)
    path = Path(ref)
    if path.is_absolute():
        return str(path)
    return str((Path(root) / path).resolve())
