import json

import pytest
from fastapi.testclient import TestClient

from tubescrape.cache import ResponseCache
from tubescrape.exceptions import UpstreamUnavailable
from tubescrape.rate_limit import AdmissionLimiter
from tubescrape.services.youtube import YouTubeScraper


# --- Canned ytInitialData documents ---

def channel_item(channel_id: str, name: str, verified: bool = False) -> dict:
    return {
        "channelRenderer": {
            "channelId": channel_id,
            "title": {"simpleText": name},
            "thumbnail": {"thumbnails": [
                {"url": "//yt3.ggpht.com/small.jpg"},
                {"url": f"//yt3.ggpht.com/{channel_id}.jpg"},
            ]},
            "subscriberCountText": {"simpleText": "1.2M subscribers"},
            "videoCountText": {"runs": [{"text": "350"}, {"text": " videos"}]},
            "descriptionSnippet": {"runs": [{"text": "Beats to "}, {"text": "relax to"}]},
            "ownerBadges": [
                {"metadataBadgeRenderer": {"style": "BADGE_STYLE_TYPE_VERIFIED"}},
            ] if verified else [],
        },
    }


def search_data(items: list) -> dict:
    return {
        "contents": {
            "twoColumnSearchResultsRenderer": {
                "primaryContents": {
                    "sectionListRenderer": {
                        "contents": [
                            {"itemSectionRenderer": {"contents": items}},
                            {"continuationItemRenderer": {"trigger": "CONTINUATION_TRIGGER_ON_ITEM_SHOWN"}},
                        ],
                    },
                },
            },
        },
    }


SEARCH_DATA = search_data([
    channel_item("UC_lofigirl", "Lofi Girl", verified=True),
    {"videoRenderer": {"videoId": "jfKfPfyJRdk", "title": {"runs": [{"text": "lofi hip hop radio"}]}}},
    channel_item("UC_chillhop", "Chillhop Music"),
    {"shelfRenderer": {"title": {"simpleText": "Latest from Lofi Girl"}}},
    channel_item("UC_lofifruits", "Lofi Fruits"),
])


def video_item(video_id: str, title: str) -> dict:
    return {
        "richItemRenderer": {
            "content": {
                "videoRenderer": {
                    "videoId": video_id,
                    "title": {"runs": [{"text": title}]},
                    "thumbnail": {"thumbnails": [{"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"}]},
                    "viewCountText": {"simpleText": "1,234 views"},
                    "publishedTimeText": {"simpleText": "2 days ago"},
                    "lengthText": {"simpleText": "3:45"},
                },
            },
        },
    }


def videos_data(items: list, selected: bool = True) -> dict:
    return {
        "contents": {
            "twoColumnBrowseResultsRenderer": {
                "tabs": [
                    {"tabRenderer": {"title": "Home", "content": {"sectionListRenderer": {"contents": []}}}},
                    {"tabRenderer": {
                        "title": "Videos",
                        "selected": selected,
                        "content": {"richGridRenderer": {"contents": items}},
                    }},
                    {"expandableTabRenderer": {"title": "Search"}},
                ],
            },
        },
    }


VIDEOS_DATA = videos_data([
    video_item("vid1", "First upload"),
    video_item("vid2", "Second upload"),
    video_item("vid3", "Third upload"),
    {"continuationItemRenderer": {"continuationEndpoint": {}}},
])


def watch_data(likes: str = "12K", comments: str = "1,234") -> dict:
    return {
        "contents": {
            "twoColumnWatchNextResults": {
                "results": {
                    "results": {
                        "contents": [
                            {"videoPrimaryInfoRenderer": {
                                "title": {"runs": [{"text": "A video"}]},
                                "videoActions": {"menuRenderer": {"topLevelButtons": [
                                    {"segmentedLikeDislikeButtonRenderer": {"likeButton": {"toggleButtonRenderer": {
                                        "defaultText": {
                                            "accessibility": {"accessibilityData": {"label": f"{likes} likes"}},
                                            "simpleText": likes,
                                        },
                                    }}}},
                                ]}},
                            }},
                            {"videoSecondaryInfoRenderer": {"owner": {}}},
                            {"itemSectionRenderer": {
                                "sectionIdentifier": "comment-item-section",
                                "contents": [{"commentsEntryPointHeaderRenderer": {
                                    "headerText": {"runs": [{"text": "Comments"}]},
                                    "commentCount": {"simpleText": comments},
                                }}],
                            }},
                        ],
                    },
                },
            },
        },
    }


# --- Canned HTML pages ---

def page(data: dict | None = None, head: str = "", body: str = "") -> str:
    """An HTML page with an unrelated script followed by the ytInitialData assignment."""
    scripts = '<script>var ytcfg = {"INNERTUBE_API_KEY": "key"};</script>'
    if data is not None:
        scripts += f"<script>var ytInitialData = {json.dumps(data)};</script>"
    return f"<html><head>{head}</head><body>{body}{scripts}</body></html>"


def about_page(links: list[str], membership: bool = False, description: str | None = "Chill beats every day.") -> str:
    head = f'<meta name="description" content="{description}">' if description else ""
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    badge = '<div id="sponsor-button"><button>Join</button></div>' if membership else ""
    return page(head=head, body=f'<div id="link-list-container">{anchors}</div>{badge}')


# --- Fakes ---

class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Serves pages by URL fragment; an Exception value is raised instead."""

    def __init__(self, pages: dict):
        self.pages = pages
        self.calls: list[str] = []

    def __call__(self, url: str) -> str:
        self.calls.append(url)
        for fragment, result in self.pages.items():
            if fragment in url:
                if isinstance(result, Exception):
                    raise result
                return result
        raise UpstreamUnavailable(f"YouTube returned HTTP 404 for {url}", url=url, status_code=404)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_scraper(clock):
    """Build a YouTubeScraper over canned pages with a fake clock."""
    def _make(pages: dict, max_requests: int = 30) -> YouTubeScraper:
        return YouTubeScraper(
            cache=ResponseCache(ttl=3600, clock=clock),
            limiter=AdmissionLimiter(max_requests=max_requests, window=60, clock=clock),
            fetch=FakeFetcher(pages),
            base_url="https://www.youtube.com",
            max_workers=2,
        )
    return _make


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from tubescrape.main import api
    return TestClient(api)
