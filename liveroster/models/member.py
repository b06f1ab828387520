#!/usr/bin/env python3
"""
Member Data Models Module

This module defines the roster data models: members, their platform channels,
and the live streams attached to them after each refresh.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

# the platform kinds we know how to resolve
PLATFORM_TWITCH = "twitch"
PLATFORM_YOUTUBE = "youtube"
PLATFORM_KINDS = (PLATFORM_TWITCH, PLATFORM_YOUTUBE)

"""
Format a timestamp as RFC3339

UTC timestamps get the short Z suffix.

@param value: datetime Timezone aware timestamp
@return str: RFC3339 formatted timestamp
"""
def format_timestamp(value: datetime) -> str:

    # naive values are treated as utc
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    # format it and shorten the utc offset
    formatted = value.isoformat()
    if formatted.endswith("+00:00"):
        formatted = formatted[:-6] + "Z"
    return formatted

"""
A platform channel bound to a member

Pairs a platform kind with the platform specific identifier used to look it up.
"""
@dataclass(frozen=True)
class MemberChannel:
    """A (platform kind, identifier) binding"""
    type: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "value": self.value}

"""
A live stream for one channel

Normalized view of a live broadcast, valid as of a single refresh cycle.
"""
@dataclass(frozen=True)
class MemberStream:
    """Normalized live stream metadata"""
    id: str
    type: str
    title: str
    game_name: str
    url: str
    embed_url: str
    viewer_count: int
    started_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "game_name": self.game_name,
            "url": self.url,
            "embed_url": self.embed_url,
            "viewer_count": self.viewer_count,
            "started_at": format_timestamp(self.started_at),
        }

"""
A tracked roster member

Holds the member's identity, free-form data, channel bindings and current streams.
The streams list is replaced wholesale on every refresh, never edited in place.
"""
@dataclass
class Member:
    """A roster member"""
    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    channels: List[MemberChannel] = field(default_factory=list)
    streams: List[MemberStream] = field(default_factory=list)

    """
    Get the channel identifiers for a platform kind

    @param kind: str Platform kind to filter on
    @return list: Channel identifiers in binding order
    """
    def channel_values(self, kind: str) -> List[str]:
        return [channel.value for channel in self.channels if channel.type == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "data": self.data or {},
            "channels": [channel.to_dict() for channel in self.channels],
            "streams": [stream.to_dict() for stream in self.streams],
        }

"""
An immutable published view of the roster

Readers only ever see one of these as a whole.
"""
@dataclass(frozen=True)
class RosterSnapshot:
    """Published roster state"""
    members: Tuple[Member, ...] = ()
    refreshed_at: Optional[datetime] = None
