#!/usr/bin/env python3
"""
Services Package Initialization

This package contains the service layer components for the KPTV Live Roster application.
It exports the roster store, stream mapping helpers, and the reconciliation engine.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .roster_store import RosterStore
from .stream_mapper import parse_timestamp, map_twitch_stream, map_youtube_video
from .reconciler import StreamReconciler

# hold the necessary modules
__all__ = [
    "RosterStore",
    "parse_timestamp",
    "map_twitch_stream",
    "map_youtube_video",
    "StreamReconciler",
]
