#!/usr/bin/env python3
"""
Roster Store Module

This module holds the published roster for the lifetime of the process.
The reconciler is its only writer, the HTTP routes its only readers.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging
from datetime import datetime, timezone
from typing import Iterable
from liveroster.models import Member, RosterSnapshot

# setup the logger
logger = logging.getLogger(__name__)

"""
In-memory roster registry

Publishes whole immutable snapshots; readers never see a half applied refresh.
"""
class RosterStore:

    """
    Initialize the RosterStore

    @param members: iterable Members loaded from the roster file
    """
    def __init__(self, members: Iterable[Member]):

        # setup the internals
        self._snapshot = RosterSnapshot(members=tuple(members))
        self._lock = asyncio.Lock()

    """
    Get the current snapshot
    A plain reference read, never waits on a refresh.

    @return RosterSnapshot: The last published snapshot
    """
    def snapshot(self) -> RosterSnapshot:
        return self._snapshot

    """
    Publish a fully refreshed member list
    The new snapshot is built before taking the lock, the lock only covers the swap.

    @param members: iterable Refreshed members
    @return RosterSnapshot: The newly published snapshot
    """
    async def publish(self, members: Iterable[Member]) -> RosterSnapshot:

        # build it off to the side
        snapshot = RosterSnapshot(members=tuple(members), refreshed_at=datetime.now(timezone.utc))

        # swap it in
        async with self._lock:
            self._snapshot = snapshot

        # log it
        logger.debug(f"Published {len(snapshot.members)} members")

        return snapshot
