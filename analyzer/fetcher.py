"""
Outbound page fetching for CRO analysis.

One GET per analysis with a custom user agent. Redirects are followed and
anything outside 2xx is surfaced as a failure.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlsplit

import requests

from config import settings

logger = logging.getLogger(__name__)


class PageFetchError(RuntimeError):
    """Raised when the target page cannot be retrieved"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


@dataclass
class FetchedPage:
    url: str
    final_url: str
    status: int
    html: str


def fetch_page(
    url: str,
    timeout: Optional[int] = None,
    user_agent: Optional[str] = None,
) -> FetchedPage:
    """
    Fetch a page and return its HTML.

    Args:
        url: Absolute http(s) URL
        timeout: Seconds before giving up (defaults to FETCH_TIMEOUT)
        user_agent: User-Agent header (defaults to FETCH_USER_AGENT)

    Returns:
        FetchedPage with the post-redirect URL and body

    Raises:
        PageFetchError: non-2xx status, empty body, or network failure
    """
    timeout = timeout or settings.FETCH_TIMEOUT
    headers = {"User-Agent": user_agent or settings.FETCH_USER_AGENT}

    logger.info(f"📡 Fetching {url}")
    try:
        response = requests.get(
            url, headers=headers, timeout=timeout, allow_redirects=True
        )
    except requests.RequestException as e:
        logger.error(f"❌ Fetch failed for {url}: {e}")
        raise PageFetchError(f"Could not fetch page: {e}") from e

    if not 200 <= response.status_code < 300:
        logger.warning(f"⚠️ {url} answered HTTP {response.status_code}")
        raise PageFetchError(
            f"Could not fetch page (HTTP {response.status_code})",
            status=response.status_code,
        )

    html = response.text
    if not html:
        raise PageFetchError(
            f"Could not fetch page (HTTP {response.status_code}, empty body)",
            status=response.status_code,
        )

    logger.info(f"✅ Fetched {response.url} ({len(html)} bytes)")
    return FetchedPage(
        url=url, final_url=response.url or url, status=response.status_code, html=html
    )


def check_robots(final_url: str, timeout: int = 5) -> Dict[str, Optional[bool]]:
    """Probe robots.txt and sitemap.xml at the site root. None means the probe failed"""
    parts = urlsplit(final_url)
    if not parts.scheme or not parts.netloc:
        return {"robots_txt_ok": None, "sitemap_ok": None}
    base = f"{parts.scheme}://{parts.netloc}"
    headers = {"User-Agent": settings.FETCH_USER_AGENT}

    result: Dict[str, Optional[bool]] = {}
    for key, path in (("robots_txt_ok", "/robots.txt"), ("sitemap_ok", "/sitemap.xml")):
        try:
            r = requests.get(base + path, headers=headers, timeout=timeout)
            result[key] = r.ok
        except requests.RequestException as e:
            logger.warning(f"⚠️ {path} probe failed for {base}: {e}")
            result[key] = None
    return result
