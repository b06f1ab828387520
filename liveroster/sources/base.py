#!/usr/bin/env python3
"""
Base Platform Source Module

This module defines the base class for all platform sources along with the
errors they raise. It provides the common request helpers shared by sources.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging, aiohttp
from typing import Any, Iterable, Iterator, List, Optional

# setup the logger
logger = logging.getLogger(__name__)

# response codes we treat as usable
OK_STATUSES = (200,)

"""
Raised when a platform request fails in a way the caller cannot absorb
"""
class SourceError(Exception):
    pass

"""
Raised when a platform access token cannot be acquired
"""
class TokenRefreshError(SourceError):
    pass

"""
Split identifiers into fixed size chunks

Duplicates are dropped, first occurrence order is kept.

@param items: iterable Identifiers to split
@param size: int Maximum chunk size
@return iterator: Lists of at most size identifiers
"""
def chunked(items: Iterable[str], size: int) -> Iterator[List[str]]:

    # dedupe while keeping the order
    unique = list(dict.fromkeys(items))

    # yield each slice
    for start in range(0, len(unique), size):
        yield unique[start:start + size]

"""
Base class for platform sources

Holds the shared HTTP session and wraps the request/decode boilerplate.
"""
class PlatformSource:

    # platform kind served by this source
    kind = ""

    """
    Initialize the PlatformSource

    @param session: aiohttp.ClientSession HTTP session for requests
    """
    def __init__(self, session: aiohttp.ClientSession):

        # setup the internals
        self.session = session

    """
    Fetch a JSON document

    @param url: str Endpoint to request
    @param params: Query parameters
    @param headers: dict Extra request headers
    @return Any: Decoded JSON body
    @throws SourceError: On transport errors or unusable status codes
    """
    async def _get_json(self, url: str, params: Any = None, headers: Optional[dict] = None) -> Any:

        # try the request
        try:
            async with self.session.get(url, params=params, headers=headers) as resp:

                # make sure we have a valid response
                if resp.status not in OK_STATUSES:
                    raise SourceError(f"{self.kind} request to {url} returned {resp.status}")

                return await resp.json()

        # whoops... wrap up transport level failures
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise SourceError(f"{self.kind} request to {url} failed: {e}") from e

    """
    Fetch a page as text

    @param url: str Page to request
    @param headers: dict Extra request headers
    @return str: Response body
    @throws SourceError: On transport errors or unusable status codes
    """
    async def _get_text(self, url: str, headers: Optional[dict] = None) -> str:

        # try the request
        try:
            async with self.session.get(url, headers=headers) as resp:

                # make sure we have a valid response
                if resp.status not in OK_STATUSES:
                    raise SourceError(f"{self.kind} page {url} returned {resp.status}")

                return await resp.text()

        # whoops... wrap up transport level failures
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            raise SourceError(f"{self.kind} page {url} failed: {e}") from e
