#!/usr/bin/env python3
"""
KPTV Live Roster Application Package Initialization

This package contains the live roster application components.
It exports the version identifier for the application.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# hold the version of the application
__version__ = "1.0.0"
