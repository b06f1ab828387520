#!/usr/bin/env python3
"""
Stream Mapper Module

This module maps raw platform payloads onto the normalized MemberStream model.
Twitch streams come from the Helix streams endpoint, YouTube videos from videos.list.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from liveroster.models import MemberStream, PLATFORM_TWITCH, PLATFORM_YOUTUBE

# setup the logger
logger = logging.getLogger(__name__)

"""
Parse an RFC3339 timestamp

@param value: str Timestamp as sent by the platform
@return datetime|None: Timezone aware timestamp, or None when empty or malformed
"""
def parse_timestamp(value: Optional[str]) -> Optional[datetime]:

    # nothing to parse
    if not value:
        return None

    # fromisoformat on older interpreters does not take the Z suffix
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'

    # try to parse it
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    # naive values are treated as utc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

"""
Coerce a viewer count to a non-negative int

YouTube sends the count as a string, Twitch as a number.

@param value: Raw viewer count
@return int: Viewer count, 0 when missing or malformed
"""
def _viewer_count(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0

"""
Map a Helix stream onto a MemberStream

@param stream: dict Raw Helix stream object
@return MemberStream|None: The stream, or None when its start time is unusable
"""
def map_twitch_stream(stream: Dict[str, Any]) -> Optional[MemberStream]:

    # drop it if the start time is unusable
    started_at = parse_timestamp(stream.get('started_at'))
    if started_at is None:
        logger.warning(f"Dropping Twitch stream {stream.get('id')}: bad started_at {stream.get('started_at')!r}")
        return None

    login = stream.get('user_login', '')
    return MemberStream(
        id=str(stream.get('id', '')),
        type=PLATFORM_TWITCH,
        title=stream.get('title') or '',
        game_name=stream.get('game_name') or '',
        url=f"https://twitch.tv/{login}",
        embed_url=f"https://player.twitch.tv/?channel={login}",
        viewer_count=_viewer_count(stream.get('viewer_count')),
        started_at=started_at
    )

"""
Check whether a video has actually started broadcasting

@param video: dict Raw videos.list item
@return bool: True when the video has a usable actual start time
"""
def is_started(video: Dict[str, Any]) -> bool:
    details = video.get('liveStreamingDetails') or {}
    return parse_timestamp(details.get('actualStartTime')) is not None

"""
Map a videos.list item onto a MemberStream
Videos that have not actually started yet are not live.

@param video: dict Raw videos.list item
@param game_name: str Scraped game label, may be empty
@return MemberStream|None: The stream, or None when the video is not live
"""
def map_youtube_video(video: Dict[str, Any], game_name: str = '') -> Optional[MemberStream]:

    # no actual start time means not live yet
    details = video.get('liveStreamingDetails') or {}
    started_at = parse_timestamp(details.get('actualStartTime'))
    if started_at is None:
        return None

    video_id = video.get('id', '')
    return MemberStream(
        id=video_id,
        type=PLATFORM_YOUTUBE,
        title=(video.get('snippet') or {}).get('title') or '',
        game_name=game_name or '',
        url=f"https://youtube.com/watch?v={video_id}",
        embed_url=f"https://youtube.com/embed/{video_id}",
        viewer_count=_viewer_count(details.get('concurrentViewers')),
        started_at=started_at
    )
