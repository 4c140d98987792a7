"""
Screenshot storage helpers for local disk.

Naming convention: {hostname}{path}-{viewport}-{epoch_ms}.png under the
downloads directory. Hostname and path are lowercased, filesystem-unsafe
characters become "-", and runs of "-" collapse to one. The millisecond
timestamp keeps repeated captures of the same page from colliding.
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from shared.config import get_config
from shared.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r'[\\/?%*:|"<>\s]')
_DASH_RUNS = re.compile(r"-+")


def sanitize_component(value: str) -> str:
    """Lowercase and replace filesystem-unsafe characters with '-'."""
    return _UNSAFE_CHARS.sub("-", value).lower()


def build_screenshot_filename(url: str, viewport: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Build the screenshot file name for a URL and viewport name.

    Raises ValueError when the URL has no hostname.
    """
    parsed = urlparse(url)
    if not parsed.hostname:
        raise ValueError(f"Invalid URL: {url}")

    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    hostname = sanitize_component(parsed.hostname)
    pathname = sanitize_component(parsed.path or "/")
    raw = f"{hostname}{pathname}-{viewport}-{timestamp_ms}.png"

    name = _DASH_RUNS.sub("-", raw).strip("-")
    return name.replace("-.png", ".png", 1)


def ensure_downloads_dir(downloads_dir: Optional[str] = None) -> Path:
    """Return the downloads directory, creating it if needed."""
    path = Path(downloads_dir or get_config().downloads_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path


def build_screenshot_path(
    url: str,
    viewport: str,
    downloads_dir: Optional[str] = None,
    timestamp_ms: Optional[int] = None,
) -> Path:
    """
    Absolute path for a new screenshot of `url` at `viewport`.

    Creates the downloads directory; does not create the file.
    """
    directory = ensure_downloads_dir(downloads_dir)
    path = (directory / build_screenshot_filename(url, viewport, timestamp_ms)).resolve()
    logger.debug("screenshot_path_built", path=str(path), viewport=viewport)
    return path
