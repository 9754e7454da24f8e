import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Callable
from urllib.parse import quote, quote_plus

from bs4 import BeautifulSoup

from tubescrape.cache import ResponseCache
from tubescrape.config import get_settings
from tubescrape.exceptions import MissingId, MissingQuery, ParseFailure, RateLimited, UpstreamUnavailable
from tubescrape.http_client import fetch_document
from tubescrape.models.youtube import ChannelDetail, ChannelSummary, VideoAnalytics, VideoSummary
from tubescrape.rate_limit import AdmissionLimiter
from tubescrape.services.embedded_data import parse_embedded_data
from tubescrape.services.extractors import (
    ITEM_ERRORS,
    extract_channel_detail,
    extract_channel_summaries,
    extract_video_analytics,
    extract_video_summaries,
    page_needs_embedded_data,
)

logger = logging.getLogger(__name__)

# "Channels" filter of the search results page
CHANNEL_FILTER = "EgIQAg%3D%3D"


def _search_url(base_url: str, query: str) -> str:
    return f"{base_url}/results?search_query={quote_plus(query)}&sp={CHANNEL_FILTER}"


def _about_url(base_url: str, channel_id: str) -> str:
    return f"{base_url}/channel/{quote(channel_id, safe='')}/about"


def _videos_url(base_url: str, channel_id: str) -> str:
    return f"{base_url}/channel/{quote(channel_id, safe='')}/videos"


def _watch_url(base_url: str, video_id: str) -> str:
    return f"{base_url}/watch?v={quote_plus(video_id)}"


def _require_id(channel_id: str | None) -> str:
    if not channel_id or not channel_id.strip():
        raise MissingId("A channel id is required.")
    return channel_id.strip()


class YouTubeScraper:
    """Fetches YouTube pages and serves the extracted records through a cache.

    The cache and limiter are owned by the scraper, so each instance (one per
    process in production, one per test) has its own state.
    """

    def __init__(
        self,
        cache: ResponseCache,
        limiter: AdmissionLimiter,
        fetch: Callable[[str], str] = fetch_document,
        base_url: str = "https://www.youtube.com",
        max_workers: int = 4,
    ):
        self.cache = cache
        self.limiter = limiter
        self.fetch = fetch
        self.base_url = base_url.rstrip("/")
        self.max_workers = max(1, max_workers)

    def search_channels(self, query: str | None, caller_id: str | None = None) -> list[ChannelSummary]:
        """Search YouTube for channels. Rate limited per caller."""
        if not query or not query.strip():
            raise MissingQuery("A search query is required.")
        if not self.limiter.allow(caller_id):
            raise RateLimited("Too many requests. Try again in a minute.")

        key = f"search:{query}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        doc = parse_embedded_data(self.fetch(_search_url(self.base_url, query)))
        channels = extract_channel_summaries(doc)
        self.cache.put(key, channels)
        return channels

    def get_channel_detail(self, channel_id: str | None) -> ChannelDetail:
        """Description, social links and membership availability from a channel's about page."""
        channel_id = _require_id(channel_id)
        key = f"details:{channel_id}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        soup = BeautifulSoup(self.fetch(_about_url(self.base_url, channel_id)), "html.parser")
        doc = None
        if page_needs_embedded_data(soup):
            try:
                doc = parse_embedded_data(soup)
            except ParseFailure as e:
                logger.warning("About page for %s has no usable embedded data: %s", channel_id, e)
        detail = extract_channel_detail(soup, doc)
        self.cache.put(key, detail)
        return detail

    def get_channel_videos(self, channel_id: str | None) -> list[VideoSummary]:
        """Videos on a channel's videos tab, each with like and comment counts from its watch page."""
        channel_id = _require_id(channel_id)
        key = f"videos:{channel_id}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        doc = parse_embedded_data(self.fetch(_videos_url(self.base_url, channel_id)))
        summaries = extract_video_summaries(doc)
        if summaries:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(summaries))) as executor:
                analytics = list(executor.map(self._video_analytics, [v.video_id for v in summaries]))
            summaries = [v.model_copy(update={"analytics": a}) for v, a in zip(summaries, analytics)]
        self.cache.put(key, summaries)
        return summaries

    def _video_analytics(self, video_id: str) -> VideoAnalytics:
        try:
            return extract_video_analytics(parse_embedded_data(self.fetch(_watch_url(self.base_url, video_id))))
        except (UpstreamUnavailable, ParseFailure) as e:
            logger.warning("Analytics for video %s degraded to defaults: %s", video_id, e)
            return VideoAnalytics()
        except ITEM_ERRORS as e:
            logger.warning("Malformed watch page for video %s, using default analytics: %s", video_id, e)
            return VideoAnalytics()


@lru_cache
def get_scraper() -> YouTubeScraper:
    settings = get_settings()
    return YouTubeScraper(
        cache=ResponseCache(ttl=settings.cache_ttl_seconds, max_entries=settings.cache_max_entries),
        limiter=AdmissionLimiter(
            max_requests=settings.rate_limit_max_requests,
            window=settings.rate_limit_window_seconds,
        ),
        base_url=settings.youtube_base_url,
        max_workers=settings.video_fetch_workers,
    )


def search_channels(query: str | None, caller_id: str | None = None) -> list[ChannelSummary]:
    """Search YouTube for channels matching a query."""
    return get_scraper().search_channels(query, caller_id)


def get_channel_detail(channel_id: str | None) -> ChannelDetail:
    """Get a channel's description, social links and membership availability."""
    return get_scraper().get_channel_detail(channel_id)


def get_channel_videos(channel_id: str | None) -> list[VideoSummary]:
    """List a channel's videos with like and comment counts."""
    return get_scraper().get_channel_videos(channel_id)
