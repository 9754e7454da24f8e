"""Shared HTTP client for fetching YouTube pages.

Requests are never retried here: one failed fetch fails the operation that
asked for it, and the caller decides what to do about it.
"""

import logging

import requests
from requests.adapters import HTTPAdapter

from tubescrape.config import get_settings
from tubescrape.exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)

_session: requests.Session | None = None


def get_session() -> requests.Session:
    """Return a shared requests.Session that looks like a desktop browser.

    The connection pool is sized for the per-video analytics fan-out.
    """
    global _session
    if _session is None:
        settings = get_settings()
        _session = requests.Session()
        _session.headers.update({
            "User-Agent": settings.user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        })
        adapter = HTTPAdapter(
            max_retries=0,
            pool_maxsize=max(settings.video_fetch_workers, 10),
        )
        _session.mount("http://", adapter)
        _session.mount("https://", adapter)
    return _session


def fetch_document(url: str) -> str:
    """GET a page and return its text, raising UpstreamUnavailable on any failure."""
    try:
        resp = get_session().get(url, timeout=get_settings().fetch_timeout)
    except requests.RequestException as e:
        logger.warning("Fetch failed for %s: %s", url, e)
        raise UpstreamUnavailable(f"Could not reach YouTube: {e}", url=url) from e
    if not resp.ok:
        body = resp.text[:500]
        logger.warning("Fetch for %s returned HTTP %s", url, resp.status_code)
        raise UpstreamUnavailable(
            f"YouTube returned HTTP {resp.status_code} for {url}: {body}",
            url=url,
            status_code=resp.status_code,
            body=body,
        )
    return resp.text
