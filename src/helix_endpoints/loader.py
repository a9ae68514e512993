"""Reference page loader with an on-disk cache."""

import logging
from pathlib import Path

import requests

from helix_endpoints.config import CACHE_FILE, DEFAULT_TIMEOUT, REFERENCE_URL
from helix_endpoints.parser.tree import SoupNode

logger = logging.getLogger(__name__)


class DocumentFetchError(Exception):
    """Raised when the reference page cannot be downloaded."""


class DocumentCacheError(Exception):
    """Raised when the cached copy of the page cannot be read or written."""


def fetch_document(url: str = REFERENCE_URL, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Download the page and return its HTML."""
    logger.info("Fetching %s", url)
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise DocumentFetchError(f"Failed to fetch {url}: {e}") from e

    # requests falls back to ISO-8859-1 for text/html without a charset
    if "charset" not in resp.headers.get("content-type", "").lower():
        resp.encoding = "utf-8"
    return resp.text


def load_document(
    url: str = REFERENCE_URL,
    cache_path: Path = Path(CACHE_FILE),
    refresh: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Return the page HTML, reading the cache unless it is missing or `refresh` is set."""
    if refresh or not cache_path.exists():
        html = fetch_document(url, timeout=timeout)
        try:
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(html, encoding="utf-8")
        except OSError as e:
            raise DocumentCacheError(f"Cannot write cache {cache_path}: {e}") from e
        logger.debug("Cached %d characters to %s", len(html), cache_path)
        return html

    logger.info("Using cached reference at %s", cache_path)
    try:
        return cache_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentCacheError(f"Cannot read cache {cache_path}: {e}") from e


def parse_document(html: str) -> SoupNode:
    return SoupNode.from_html(html)
