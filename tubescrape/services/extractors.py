"""Project ytInitialData documents and channel pages into stable records.

YouTube's embedded documents change shape often and almost every key is
optional, so every read goes through ``dig``, which returns a default instead
of raising. Failures while building one item are caught at that item: a
malformed entry is skipped, its siblings are still extracted.
"""

import logging
import re
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup
from pydantic import ValidationError

from tubescrape.models.youtube import (
    DEFAULT_DESCRIPTION,
    ChannelDetail,
    ChannelSummary,
    VideoAnalytics,
    VideoSummary,
)

logger = logging.getLogger(__name__)

LINK_LIST_SELECTOR = "#link-list-container a[href]"
MEMBERSHIP_BADGE_SELECTOR = "#sponsor-button, yt-channel-membership-badge"

# Checked in order; the first platform whose domain matches the link's host wins.
PLATFORM_DOMAINS = {
    "twitter": ("twitter.com", "x.com"),
    "instagram": ("instagram.com",),
    "facebook": ("facebook.com", "fb.com"),
    "tiktok": ("tiktok.com",),
    "linkedin": ("linkedin.com",),
    "discord": ("discord.gg", "discord.com"),
    "telegram": ("t.me", "telegram.me", "telegram.org"),
    "patreon": ("patreon.com",),
    "github": ("github.com",),
}

VERIFIED_BADGE_STYLES = {"BADGE_STYLE_TYPE_VERIFIED", "BADGE_STYLE_TYPE_VERIFIED_ARTIST"}

ITEM_ERRORS = (KeyError, TypeError, IndexError, ValueError, AttributeError, ValidationError)
_NUMBER_RUN = re.compile(r"\d[\d,.\s]*")


def dig(node, *path, default=None):
    """Walk nested dicts/lists along path, returning default at the first missing step."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or not -len(node) <= step < len(node):
                return default
        elif not isinstance(node, dict) or step not in node:
            return default
        node = node[step]
    return default if node is None else node


def _list_at(node, *path) -> list:
    """Like dig, but anything other than a list comes back as an empty list."""
    value = dig(node, *path)
    return value if isinstance(value, list) else []


def text_of(node) -> str | None:
    """Flatten a YouTube text object ({"simpleText": ...} or {"runs": [...]})."""
    if isinstance(node, str):
        return node.strip() or None
    if not isinstance(node, dict):
        return None
    if isinstance(node.get("simpleText"), str):
        return node["simpleText"].strip() or None
    runs = node.get("runs")
    if isinstance(runs, list):
        return "".join(r.get("text", "") for r in runs if isinstance(r, dict)).strip() or None
    if isinstance(node.get("content"), str):
        return node["content"].strip() or None
    return None


def _thumbnail(node) -> str | None:
    url = dig(node, "thumbnails", -1, "url")
    if not isinstance(url, str):
        return None
    return f"https:{url}" if url.startswith("//") else url


def _first_number(text: str | None) -> int:
    """Parse the first run of digits in text, ignoring separators ("1,234 Comments" -> 1234)."""
    if not text:
        return 0
    match = _NUMBER_RUN.search(text)
    if not match:
        return 0
    digits = re.sub(r"\D", "", match.group())
    return int(digits) if digits else 0


# --- Channel search ---

def _search_items(doc: dict) -> list:
    sections = _list_at(
        doc, "contents", "twoColumnSearchResultsRenderer", "primaryContents",
        "sectionListRenderer", "contents",
    )
    items = []
    for section in sections:
        items.extend(_list_at(section, "itemSectionRenderer", "contents"))
    return items


def _channel_summary(renderer: dict) -> ChannelSummary | None:
    channel_id = renderer.get("channelId")
    if not channel_id:
        return None
    badge_styles = {dig(b, "metadataBadgeRenderer", "style") for b in _list_at(renderer, "ownerBadges")}
    return ChannelSummary(
        channel_id=channel_id,
        channel_name=text_of(renderer.get("title")),
        thumbnail_url=_thumbnail(renderer.get("thumbnail")),
        subscriber_count_text=text_of(renderer.get("subscriberCountText")),
        video_count_text=text_of(renderer.get("videoCountText")),
        is_verified=bool(badge_styles & VERIFIED_BADGE_STYLES),
        description_snippet=text_of(renderer.get("descriptionSnippet")),
    )


def extract_channel_summaries(doc: dict) -> list[ChannelSummary]:
    """Channels listed on a search results page. Non-channel results are ignored."""
    channels = []
    for item in _search_items(doc):
        renderer = dig(item, "channelRenderer")
        if not isinstance(renderer, dict):
            continue
        try:
            summary = _channel_summary(renderer)
        except ITEM_ERRORS as e:
            logger.warning("Skipping malformed channel result: %s", e)
            continue
        if summary is not None:
            channels.append(summary)
    return channels


# --- Channel about page ---

def _unwrap_redirect(href: str) -> str:
    """Return the target of a youtube.com/redirect?q=... link, or href unchanged."""
    parsed = urlparse(href)
    if parsed.path == "/redirect" and (not parsed.netloc or "youtube.com" in parsed.netloc):
        target = parse_qs(parsed.query).get("q")
        if target:
            return target[0]
    return href


def _link_host(url: str) -> str:
    return (urlparse(url if "//" in url else f"https://{url}").hostname or "").lower()


def classify_link(url: str) -> str | None:
    """Return the social platform a URL belongs to, or None for other sites."""
    host = _link_host(url)
    for platform, domains in PLATFORM_DOMAINS.items():
        for domain in domains:
            if host == domain or host.endswith(f".{domain}"):
                return platform
    return None


def classify_social_links(urls) -> dict[str, str]:
    """Map links to platforms; the first unclassified link becomes "website"."""
    links: dict[str, str] = {}
    for raw in urls:
        if not raw:
            continue
        try:
            url = _unwrap_redirect(raw.strip())
            host = _link_host(url)
            platform = classify_link(url)
        except ValueError as e:
            logger.warning("Skipping unparsable link %r: %s", raw, e)
            continue
        # relative links point back into YouTube
        if not host:
            continue
        if platform:
            links.setdefault(platform, url)
        elif "website" not in links:
            links["website"] = url
    return links


def _embedded_links(doc: dict) -> list[str]:
    """External links from channelExternalLinkViewModel entries anywhere in doc."""
    found = []
    stack = [doc]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            model = node.get("channelExternalLinkViewModel")
            if isinstance(model, dict):
                url = dig(model, "link", "commandRuns", 0, "onTap", "innertubeCommand",
                          "urlEndpoint", "url") or text_of(model.get("link"))
                if isinstance(url, str):
                    found.append(url)
            else:
                stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))
    return found


def _meta_description(soup: BeautifulSoup) -> str | None:
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        tag = soup.find("meta", attrs=attrs)
        content = tag.get("content", "").strip() if tag else ""
        if content:
            return content
    return None


def page_needs_embedded_data(soup: BeautifulSoup) -> bool:
    """True when the about page DOM lacks a description or link list."""
    return _meta_description(soup) is None or not soup.select(LINK_LIST_SELECTOR)


def extract_channel_detail(soup: BeautifulSoup, doc: dict | None = None) -> ChannelDetail:
    """Description, social links and membership badge of a channel about page.

    The page DOM is authoritative; doc (the embedded document) only fills a
    description or link list the DOM does not carry.
    """
    description = _meta_description(soup)
    if description is None and doc:
        description = text_of(dig(doc, "metadata", "channelMetadataRenderer", "description"))

    hrefs = [a.get("href") for a in soup.select(LINK_LIST_SELECTOR)]
    if not hrefs and doc:
        hrefs = _embedded_links(doc)

    return ChannelDetail(
        description=description or DEFAULT_DESCRIPTION,
        social_links=classify_social_links(hrefs),
        has_membership=soup.select_one(MEMBERSHIP_BADGE_SELECTOR) is not None,
    )


# --- Channel videos tab ---

def _video_grid(doc: dict) -> list:
    tabs = _list_at(doc, "contents", "twoColumnBrowseResultsRenderer", "tabs")
    grids = []
    for tab in tabs:
        renderer = dig(tab, "tabRenderer")
        grid = dig(renderer, "content", "richGridRenderer", "contents")
        if not isinstance(grid, list):
            continue
        if dig(renderer, "selected"):
            return grid
        grids.append(grid)
    return grids[0] if grids else []


def _video_summary(renderer: dict) -> VideoSummary | None:
    video_id = renderer.get("videoId")
    if not video_id:
        return None
    return VideoSummary(
        video_id=video_id,
        title=text_of(renderer.get("title")),
        thumbnail_url=_thumbnail(renderer.get("thumbnail")),
        view_count_text=text_of(renderer.get("viewCountText")),
        published_time_text=text_of(renderer.get("publishedTimeText")),
        duration_text=text_of(renderer.get("lengthText")),
    )


def extract_video_summaries(doc: dict) -> list[VideoSummary]:
    """Videos on a channel's videos tab, with default analytics."""
    videos = []
    for item in _video_grid(doc):
        renderer = dig(item, "richItemRenderer", "content", "videoRenderer")
        if not isinstance(renderer, dict):
            continue
        try:
            summary = _video_summary(renderer)
        except ITEM_ERRORS as e:
            logger.warning("Skipping malformed video item: %s", e)
            continue
        if summary is not None:
            videos.append(summary)
    return videos


# --- Watch page ---

def _watch_contents(doc: dict) -> list:
    return _list_at(doc, "contents", "twoColumnWatchNextResults", "results", "results", "contents")


def _like_label(doc: dict) -> str | None:
    for block in _watch_contents(doc):
        buttons = dig(block, "videoPrimaryInfoRenderer", "videoActions", "menuRenderer", "topLevelButtons")
        if not isinstance(buttons, list):
            continue
        for button in buttons:
            legacy = dig(button, "segmentedLikeDislikeButtonRenderer", "likeButton", "toggleButtonRenderer")
            label = text_of(dig(legacy, "defaultText", "accessibility", "accessibilityData", "label")) \
                or text_of(dig(legacy, "defaultText"))
            if label:
                return label
            view_model = dig(
                button, "segmentedLikeDislikeButtonViewModel", "likeButtonViewModel", "likeButtonViewModel",
                "toggleButtonViewModel", "toggleButtonViewModel", "defaultButtonViewModel", "buttonViewModel",
            )
            label = text_of(dig(view_model, "accessibilityText")) or text_of(dig(view_model, "title"))
            if label:
                return label
    return None


def _is_comment_section(block) -> bool:
    section = dig(block, "itemSectionRenderer")
    if not isinstance(section, dict):
        return False
    return (
        dig(section, "contents", 0, "commentsEntryPointHeaderRenderer") is not None
        or section.get("sectionIdentifier") == "comment-item-section"
    )


def _comments_header_text(section: dict) -> str | None:
    header = dig(section, "contents", 0, "commentsEntryPointHeaderRenderer")
    if header is not None:
        return text_of(dig(header, "commentCount")) or text_of(dig(header, "headerText"))
    header = dig(section, "header", "commentsHeaderRenderer")
    return text_of(dig(header, "countText")) or text_of(dig(header, "commentsCount"))


def extract_video_analytics(doc: dict) -> VideoAnalytics:
    """Like count label and comment count of a watch page."""
    like_text = _like_label(doc)
    comments = 0
    for block in _watch_contents(doc):
        if _is_comment_section(block):
            comments = _first_number(_comments_header_text(block["itemSectionRenderer"]))
            break
    return VideoAnalytics(like_count_text=like_text or "N/A", comments_count=comments)
