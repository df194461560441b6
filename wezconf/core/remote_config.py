"""
Fetching wezterm.lua files from GitHub.

Only GitHub file URLs are supported; ``blob`` page URLs are rewritten to
their raw.githubusercontent.com form before downloading.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

logger = logging.getLogger(__name__)

_BLOB_RE = re.compile(r'^https?://github\.com/([^/]+)/([^/]+)/blob/(.+)$')
_RAW_RE = re.compile(r'^https?://raw\.githubusercontent\.com/.+$')

UNSUPPORTED_URL = "GitHub URLs only"
FETCH_FAILED = "Fetch failed"

# Guard against accidentally downloading something that is not a config file
MAX_CONFIG_BYTES = 1024 * 1024


@dataclass
class FetchResult:
    """Result of fetching a remote config."""
    success: bool
    text: str = ""
    error: str = ""
    url: str = ""


def to_raw_github_url(url: str) -> Optional[str]:
    """
    Map a GitHub file URL to its raw download URL.

    Returns:
        Raw URL, or None if the URL is not a GitHub file URL
    """
    url = url.strip()
    blob = _BLOB_RE.match(url)
    if blob:
        owner, repo, path = blob.groups()
        return f"https://raw.githubusercontent.com/{owner}/{repo}/{path}"
    if _RAW_RE.match(url):
        return url
    return None


def _default_opener(url: str, timeout: float) -> bytes:
    request = Request(url, headers={"User-Agent": "wezconf"}, method="GET")
    with urlopen(request, timeout=timeout) as response:  # nosec B310
        return response.read(MAX_CONFIG_BYTES + 1)


def fetch_config_text(
    url: str,
    timeout: float = 10,
    opener: Optional[Callable[[str, float], bytes]] = None,
) -> FetchResult:
    """
    Download a config file.

    Never raises; transport problems come back as a failed FetchResult.
    No retry is attempted.

    Args:
        url: GitHub blob or raw URL
        timeout: Socket timeout in seconds
        opener: Replacement for the HTTP download (tests)
    """
    fetch_url = to_raw_github_url(url)
    if fetch_url is None:
        return FetchResult(success=False, error=UNSUPPORTED_URL, url=url)

    opener = opener or _default_opener
    try:
        data = opener(fetch_url, timeout)
    except HTTPError as e:
        logger.warning(f"Fetching {fetch_url} failed: HTTP {e.code}")
        return FetchResult(success=False, error=f"{FETCH_FAILED} (HTTP {e.code})", url=fetch_url)
    except (URLError, OSError) as e:
        logger.warning(f"Fetching {fetch_url} failed: {e}")
        return FetchResult(success=False, error=FETCH_FAILED, url=fetch_url)

    if len(data) > MAX_CONFIG_BYTES:
        return FetchResult(success=False, error=f"{FETCH_FAILED} (file too large)", url=fetch_url)

    text = data.decode("utf-8", errors="replace")
    logger.info(f"Fetched {len(data)} bytes from {fetch_url}")
    return FetchResult(success=True, text=text, url=fetch_url)
