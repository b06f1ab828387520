#!/usr/bin/env python3
"""
Application Configuration Model Module

This module defines the process level configuration for the KPTV Live Roster.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass
from typing import Optional

"""
Main application configuration

Holds platform credentials, roster location, server binding and refresh timing.
"""
@dataclass
class AppConfig:
    """Main application configuration"""
    twitch_client_id: str
    twitch_client_secret: str
    youtube_api_key: str
    data_path: str = "data.yaml"
    bind_host: str = "0.0.0.0"
    bind_port: int = 3000
    log_level: str = "INFO"
    refresh_interval: int = 60  # seconds
    request_timeout: float = 5.0  # seconds
    cycle_timeout: Optional[float] = None  # seconds, disabled when None
