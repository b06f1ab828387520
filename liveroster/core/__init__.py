#!/usr/bin/env python3
"""
Core Package Initialization

This package contains the core application orchestrator for the KPTV Live Roster.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .tracker import LiveTracker

# hold the necessary modules
__all__ = ["LiveTracker"]
