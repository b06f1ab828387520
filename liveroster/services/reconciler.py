#!/usr/bin/env python3
"""
Stream Reconciler Module

This module runs a single refresh pass over the roster. It resolves which bound
channels are live on Twitch and YouTube, maps the results back onto each member,
and publishes the refreshed roster to the store in one swap.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# fire up the imports
import asyncio, logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Sequence, Tuple
from liveroster.models import Member, MemberStream, PLATFORM_TWITCH, PLATFORM_YOUTUBE, format_timestamp
from liveroster.services.roster_store import RosterStore
from liveroster.services.stream_mapper import map_twitch_stream, map_youtube_video, is_started
from liveroster.sources import TwitchSource, YouTubeSource

# setup the logger
logger = logging.getLogger(__name__)

"""
Reconciles live platform data onto the roster

Twitch failures (token or batch) and YouTube metadata batch failures abort the pass
and leave the published roster untouched. Per channel discovery failures and
game label misses only degrade that one channel for this pass.
"""
class StreamReconciler:

    """
    Initialize the StreamReconciler

    @param store: RosterStore Store holding the published roster
    @param twitch: TwitchSource Twitch batch source
    @param youtube: YouTubeSource YouTube scrape source
    """
    def __init__(self, store: RosterStore, twitch: TwitchSource, youtube: YouTubeSource):

        # setup the internals
        self.store = store
        self.twitch = twitch
        self.youtube = youtube

    """
    Run one refresh pass
    Nothing is published unless the whole pass succeeds.

    @return None
    @throws SourceError: When the Twitch token, Twitch batch or YouTube batch fails
    """
    async def refresh(self):

        # fresh token every cycle
        await self.twitch.refresh_token()

        # grab the roster and split up the channel ids
        members = self.store.snapshot().members
        user_ids = self._collect_channel_ids(members, PLATFORM_TWITCH)
        channel_ids = self._collect_channel_ids(members, PLATFORM_YOUTUBE)

        # twitch in one batch
        streams = await self.twitch.fetch_streams(user_ids)

        # youtube discovery per channel, then one batch for the metadata
        video_ids = await self._discover_live_videos(channel_ids)
        videos = [video for video in await self.youtube.fetch_videos(video_ids) if is_started(video)]

        # game labels only for the videos someone is bound to
        game_names = await self._fetch_game_names(self._matched_video_ids(channel_ids, videos))

        # build the refreshed members off to the side
        refreshed = [
            replace(member, streams=self._member_streams(member, streams, videos, game_names))
            for member in members
        ]

        # publish the lot in one go
        snapshot = await self.store.publish(refreshed)

        # logging
        live = sum(len(member.streams) for member in refreshed)
        logger.info(f"Refreshed {len(refreshed)} members, {live} live streams at {format_timestamp(snapshot.refreshed_at)}")

    """
    Collect the channel ids for a platform across all members

    @param members: sequence Roster members
    @param kind: str Platform kind
    @return list: Unique channel ids in roster order
    """
    @staticmethod
    def _collect_channel_ids(members: Sequence[Member], kind: str) -> List[str]:

        # dedupe while keeping the order
        ids: Dict[str, None] = {}
        for member in members:
            for value in member.channel_values(kind):
                ids.setdefault(value, None)
        return list(ids)

    """
    Discover live videos for each YouTube channel
    Channels are scraped concurrently; a failing channel is just treated as offline.

    @param channel_ids: list YouTube channel ids
    @return list: Unique live video ids
    """
    async def _discover_live_videos(self, channel_ids: List[str]) -> List[str]:

        # gather up all the discoveries
        results = await asyncio.gather(
            *(self.youtube.fetch_live_video_id(channel_id) for channel_id in channel_ids),
            return_exceptions=True
        )

        # hold the video ids
        video_ids: Dict[str, None] = {}
        for channel_id, result in zip(channel_ids, results):

            # whoops... this channel is offline for this pass
            if isinstance(result, Exception):
                logger.warning(f"Failed to discover live video for YouTube channel {channel_id}: {result}")
                continue

            if result:
                video_ids.setdefault(result, None)

        return list(video_ids)

    """
    Find the videos that belong to a bound channel

    @param channel_ids: list Bound YouTube channel ids
    @param videos: list Started videos
    @return list: Matching video ids
    """
    @staticmethod
    def _matched_video_ids(channel_ids: Iterable[str], videos: List[Dict[str, Any]]) -> List[str]:
        bound = set(channel_ids)
        return [
            video.get('id', '') for video in videos
            if (video.get('snippet') or {}).get('channelId') in bound
        ]

    """
    Fetch game labels once per video

    @param video_ids: list Video ids
    @return dict: Video id to game label
    """
    async def _fetch_game_names(self, video_ids: List[str]) -> Dict[str, str]:

        unique = list(dict.fromkeys(video_ids))
        names = await asyncio.gather(
            *(self.youtube.fetch_game_name(video_id) for video_id in unique),
            return_exceptions=True
        )

        # a label we could not get is just empty
        results: Dict[str, str] = {}
        for video_id, name in zip(unique, names):
            if isinstance(name, Exception):
                logger.warning(f"Failed to fetch game name for video {video_id}: {name}")
                name = ''
            results[video_id] = name
        return results

    """
    Build the stream list for a single member
    Walks the bindings in order, one entry per platform and stream id.

    @param member: Member Member to build for
    @param streams: list Raw Twitch streams
    @param videos: list Started YouTube videos
    @param game_names: dict Video id to game label
    @return list: Fresh MemberStream list, empty when offline everywhere
    """
    @staticmethod
    def _member_streams(
        member: Member,
        streams: List[Dict[str, Any]],
        videos: List[Dict[str, Any]],
        game_names: Dict[str, str]
    ) -> List[MemberStream]:

        # setup the results and what we've already added
        results: List[MemberStream] = []
        seen: set = set()

        # loop over each binding
        for channel in member.channels:

            # twitch matches on the user id
            if channel.type == PLATFORM_TWITCH:
                candidates = [
                    map_twitch_stream(stream) for stream in streams
                    if str(stream.get('user_id', '')) == channel.value
                ]

            # youtube matches on the video's channel id
            elif channel.type == PLATFORM_YOUTUBE:
                candidates = [
                    map_youtube_video(video, game_names.get(video.get('id', ''), ''))
                    for video in videos
                    if (video.get('snippet') or {}).get('channelId') == channel.value
                ]

            # unknown platforms never match anything
            else:
                continue

            # add each one we haven't already got
            for stream in candidates:
                if stream is None:
                    continue
                key: Tuple[str, str] = (stream.type, stream.id)
                if key in seen:
                    continue
                seen.add(key)
                results.append(stream)

        return results
