from fastmcp import FastMCP

from tubescrape.exceptions import InputError, MissingId, MissingQuery, ParseFailure, RateLimited, UpstreamUnavailable
from tubescrape.services import youtube as youtube_service

mcp = FastMCP("Tubescrape")

_HANDLED_ERRORS = (InputError, ParseFailure, RateLimited, UpstreamUnavailable)


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, MissingQuery):
        return {"error": "missing_query", "message": str(e), "action": "Provide a non-empty search query"}
    if isinstance(e, MissingId):
        return {"error": "missing_id", "message": str(e), "action": "Provide a channel id from youtube_search_channels"}
    if isinstance(e, InputError):
        return {"error": "invalid_input", "message": str(e)}
    if isinstance(e, RateLimited):
        return {"error": "rate_limited", "message": str(e), "action": "Wait a minute and retry"}
    if isinstance(e, UpstreamUnavailable):
        return {"error": "upstream_unavailable", "message": str(e), "action": "YouTube could not be reached; retry later"}
    if isinstance(e, ParseFailure):
        return {"error": "parse_failure", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


@mcp.tool
def youtube_search_channels(query: str, caller_id: str | None = None) -> dict:
    """Search YouTube for channels by keyword. Returns channel ids, names, subscriber and video
    count text, verification status and a description snippet. Pass caller_id to apply the
    per-caller rate limit."""
    try:
        channels = youtube_service.search_channels(query, caller_id)
        return {"channels": [c.model_dump(by_alias=True) for c in channels], "count": len(channels)}
    except _HANDLED_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def youtube_channel_details(channel_id: str) -> dict:
    """Get a channel's description, social links (twitter, instagram, ..., website) and whether
    it offers memberships. Use a channel id from youtube_search_channels."""
    try:
        return youtube_service.get_channel_detail(channel_id).model_dump(by_alias=True)
    except _HANDLED_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def youtube_channel_videos(channel_id: str) -> dict:
    """List a channel's recent videos with title, views, publish time, duration, like count
    text and comment count. Slower than the other tools: each video's page is fetched."""
    try:
        videos = youtube_service.get_channel_videos(channel_id)
        return {"videos": [v.model_dump(by_alias=True) for v in videos], "count": len(videos)}
    except _HANDLED_ERRORS as e:
        return _handle_mcp_error(e)
