#!/usr/bin/env python3
"""
Sources Package Initialization

This package contains the platform source implementations for the KPTV Live Roster.
It exports the base class, its errors, and the Twitch and YouTube sources.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the necessary imports
from .base import PlatformSource, SourceError, TokenRefreshError
from .twitch import TwitchSource
from .youtube import YouTubeSource, extract_live_video_id, extract_game_name

# now hold the modules
__all__ = [
    "PlatformSource",
    "SourceError",
    "TokenRefreshError",
    "TwitchSource",
    "YouTubeSource",
    "extract_live_video_id",
    "extract_game_name",
]
