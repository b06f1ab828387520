#!/usr/bin/env python3
"""
API Package Initialization

This package contains the HTTP API routes for the KPTV Live Roster application.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .routes import router

# hold the necessary modules
__all__ = ["router"]
