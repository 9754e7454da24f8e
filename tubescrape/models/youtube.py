from tubescrape.models.common import CamelModel

SOCIAL_PLATFORMS = (
    "twitter",
    "instagram",
    "facebook",
    "tiktok",
    "linkedin",
    "discord",
    "telegram",
    "patreon",
    "github",
    "website",
)

DEFAULT_DESCRIPTION = "No description found."


class ChannelSummary(CamelModel):
    channel_id: str
    channel_name: str | None = None
    thumbnail_url: str | None = None
    subscriber_count_text: str | None = None
    video_count_text: str | None = None
    is_verified: bool = False
    description_snippet: str | None = None


class ChannelDetail(CamelModel):
    description: str = DEFAULT_DESCRIPTION
    social_links: dict[str, str] = {}
    has_membership: bool = False


class VideoAnalytics(CamelModel):
    like_count_text: str = "N/A"
    comments_count: int = 0


class VideoSummary(CamelModel):
    video_id: str
    title: str | None = None
    thumbnail_url: str | None = None
    view_count_text: str | None = None
    published_time_text: str | None = None
    duration_text: str | None = None
    analytics: VideoAnalytics = VideoAnalytics()
