#!/usr/bin/env python3
"""
Models Package Initialization

This package contains all data model definitions for the KPTV Live Roster application.
It exports the member, stream, snapshot and configuration models.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .member import (
    PLATFORM_TWITCH,
    PLATFORM_YOUTUBE,
    PLATFORM_KINDS,
    MemberChannel,
    MemberStream,
    Member,
    RosterSnapshot,
    format_timestamp,
)
from .config import AppConfig

# hold the necessary modules
__all__ = [
    "PLATFORM_TWITCH",
    "PLATFORM_YOUTUBE",
    "PLATFORM_KINDS",
    "MemberChannel",
    "MemberStream",
    "Member",
    "RosterSnapshot",
    "format_timestamp",
    "AppConfig",
]
