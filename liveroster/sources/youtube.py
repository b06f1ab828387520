#!/usr/bin/env python3
"""
YouTube Source Module

This module implements the YouTube integration. Live videos are discovered by
scraping the channel live page, their metadata is looked up in batches through
the Data API, and the game label is scraped from the watch page since the API
does not expose it.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import re, logging, aiohttp
from typing import Any, Dict, Iterable, List, Optional
from liveroster.models import PLATFORM_YOUTUBE
from liveroster.sources.base import PlatformSource, SourceError, chunked

# setup the logger
logger = logging.getLogger(__name__)

# pre-compiled patterns for the page scrapes
_LIVE_VIDEO_PATTERN = re.compile(r'rel="canonical" href="https://www\.youtube\.com/watch\?v=([^"]+)"', re.IGNORECASE)
_GAME_NAME_PATTERN = re.compile(r'"title":\{"simpleText":"([^"]+)"\},"subtitle"', re.IGNORECASE)

# without this cookie youtube redirects to the consent wall
CONSENT_HEADERS = {'Cookie': 'CONSENT=YES+42'}

"""
Extract the live video id from a channel live page

@param html: str Channel live page markup
@return str|None: Video id, or None when the channel is not live
"""
def extract_live_video_id(html: str) -> Optional[str]:
    match = _LIVE_VIDEO_PATTERN.search(html or '')
    return match.group(1) if match else None

"""
Extract the game label from a watch page

@param html: str Watch page markup
@return str|None: Game label, or None when the page has none
"""
def extract_game_name(html: str) -> Optional[str]:
    match = _GAME_NAME_PATTERN.search(html or '')
    return match.group(1) if match else None

"""
YouTube source

Resolves live videos for channel ids through the page scrape and Data API pipeline.
"""
class YouTubeSource(PlatformSource):

    kind = PLATFORM_YOUTUBE

    # endpoints
    LIVE_PAGE_URL = "https://www.youtube.com/channel/{channel_id}/live"
    WATCH_PAGE_URL = "https://www.youtube.com/watch?v={video_id}"
    VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"

    # maximum ids per videos.list request
    PAGE_SIZE = 50

    """
    Initialize the YouTubeSource

    @param session: aiohttp.ClientSession HTTP session for requests
    @param api_key: str YouTube Data API key
    """
    def __init__(self, session: aiohttp.ClientSession, api_key: str):

        super().__init__(session)
        self.api_key = api_key

    """
    Discover the live video for a channel
    Scrapes the channel live page for its canonical watch link.

    @param channel_id: str YouTube channel id
    @return str|None: Live video id, or None when nothing matched
    @throws SourceError: When the page cannot be fetched
    """
    async def fetch_live_video_id(self, channel_id: str) -> Optional[str]:

        html = await self._get_text(self.LIVE_PAGE_URL.format(channel_id=channel_id), headers=CONSENT_HEADERS)
        return extract_live_video_id(html)

    """
    Fetch video metadata for a set of video ids
    Ids are deduplicated and sent in chunks of the page size, results are merged.

    @param video_ids: iterable Video ids
    @return list: Raw videos.list items with snippet and liveStreamingDetails
    @throws SourceError: When any batch request fails
    """
    async def fetch_videos(self, video_ids: Iterable[str]) -> List[Dict[str, Any]]:

        # hold the videos
        videos = []

        # loop each chunk, nothing to do for an empty set
        for chunk in chunked(video_ids, self.PAGE_SIZE):

            # setup the parameters
            params = {
                'part': 'snippet,liveStreamingDetails',
                'id': ','.join(chunk),
                'maxResults': str(self.PAGE_SIZE),
                'key': self.api_key,
            }

            data = await self._get_json(self.VIDEOS_URL, params=params)
            videos.extend((data or {}).get('items') or [])

        return videos

    """
    Fetch the game label for a video
    Best effort, any failure just means there is no label.

    @param video_id: str Video id
    @return str: Game label, or an empty string
    """
    async def fetch_game_name(self, video_id: str) -> str:

        # try to scrape the watch page
        try:
            html = await self._get_text(self.WATCH_PAGE_URL.format(video_id=video_id), headers=CONSENT_HEADERS)

        # whoops... no label this time
        except Exception as e:
            logger.warning(f"Failed to fetch game name for video {video_id}: {e}")
            return ''

        return extract_game_name(html) or ''
