from fastapi import APIRouter, BackgroundTasks, Depends

from tubescrape.auth import get_caller_id
from tubescrape.models.youtube import ChannelDetail, ChannelSummary, VideoSummary
from tubescrape.services import query_log
from tubescrape.services import youtube as youtube_service

router = APIRouter(prefix="/api/youtube", tags=["youtube"])


@router.get("/search")
def search_channels(
    background_tasks: BackgroundTasks,
    query: str | None = None,
    caller_id: str | None = Depends(get_caller_id),
) -> list[ChannelSummary]:
    channels = youtube_service.search_channels(query, caller_id)
    background_tasks.add_task(query_log.record, caller_id, query)
    return channels


@router.get("/channels/{channel_id}")
def get_channel_detail(channel_id: str) -> ChannelDetail:
    return youtube_service.get_channel_detail(channel_id)


@router.get("/channels/{channel_id}/videos")
def get_channel_videos(channel_id: str) -> list[VideoSummary]:
    return youtube_service.get_channel_videos(channel_id)
