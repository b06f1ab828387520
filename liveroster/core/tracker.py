#!/usr/bin/env python3
"""
Live Tracker Core Module

This module contains the main LiveTracker class that orchestrates the whole
application. It owns the HTTP session, the platform sources, the roster store
and the reconciler, and drives the periodic refresh loop.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging, aiohttp
from typing import Iterable
from liveroster.models import AppConfig, Member
from liveroster.services import RosterStore, StreamReconciler
from liveroster.sources import TwitchSource, YouTubeSource

# setup the logger
logger = logging.getLogger(__name__)

"""
Main application orchestrator class

Coordinates the roster store, platform sources and the refresh loop.
"""
class LiveTracker:
    """Main application class"""

    """
    Initialize the LiveTracker
    Sets up the roster store; network components are created in initialize().

    @param config: AppConfig Application configuration object
    @param members: iterable Members loaded from the roster file
    """
    def __init__(self, config: AppConfig, members: Iterable[Member]):

        # hold our class options
        self.config = config
        self.store = RosterStore(members)
        self.session = None
        self.reconciler = None
        self.refresh_task = None

    """
    Initialize the application
    Creates the HTTP session and sources, then starts the background refresh task.

    @return None
    """
    async def initialize(self):

        # every outbound call gets the same short timeout
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

        # setup the session
        self.session = aiohttp.ClientSession(timeout=timeout)

        # setup the sources and the reconciler
        twitch = TwitchSource(self.session, self.config.twitch_client_id, self.config.twitch_client_secret)
        youtube = YouTubeSource(self.session, self.config.youtube_api_key)
        self.reconciler = StreamReconciler(self.store, twitch, youtube)

        # create the async task refresher loop
        self.refresh_task = asyncio.create_task(self._refresh_loop())

    """
    Cleanup resources
    Cancels the background task and closes the HTTP session.

    @return None
    """
    async def cleanup(self):

        # if this is a refresher task
        if self.refresh_task:

            # cancel it
            self.refresh_task.cancel()

            # wait for it to wind down, and ignore the cancellation errors
            try:
                await self.refresh_task
            except asyncio.CancelledError:
                pass

        # if we have a session... close it
        if self.session:
            await self.session.close()

    """
    Run a single refresh cycle
    Errors are logged and swallowed here so the loop carries on; the store
    keeps its previous snapshot.

    @return bool: True if the cycle published, False on error
    """
    async def run_cycle(self) -> bool:

        # try the refresh, bounded by the cycle timeout if there is one
        try:
            if self.config.cycle_timeout:
                await asyncio.wait_for(self.reconciler.refresh(), timeout=self.config.cycle_timeout)
            else:
                await self.reconciler.refresh()
            return True

        # whoops, the whole cycle took too long
        except asyncio.TimeoutError:
            logger.error(f"Refresh cycle exceeded {self.config.cycle_timeout}s")
            return False

        # whoopsie... there's an error in the cycle
        except Exception as e:
            logger.error(f"Refresh cycle failed: {e}")
            return False

    """
    Background task to refresh the roster
    Refreshes right away, then every refresh interval. Cycles never overlap.

    @return None
    """
    async def _refresh_loop(self):

        # while we're still looping...
        while True:

            # try to refresh, then sleep
            try:
                await self.run_cycle()
                await asyncio.sleep(self.config.refresh_interval)

            # whoops, we are in a cancelation...
            except asyncio.CancelledError:
                break
