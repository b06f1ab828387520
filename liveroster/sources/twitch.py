#!/usr/bin/env python3
"""
Twitch Helix API Source Module

This module implements the Twitch integration: app access token acquisition
and batched live stream lookups through the Helix streams endpoint.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging, aiohttp
from typing import Any, Dict, Iterable, List, Optional
from liveroster.models import PLATFORM_TWITCH
from liveroster.sources.base import PlatformSource, SourceError, TokenRefreshError, chunked, OK_STATUSES

# setup the logger
logger = logging.getLogger(__name__)

"""
Twitch Helix API source

Looks up which of a set of user ids are live right now, in batches.
"""
class TwitchSource(PlatformSource):

    kind = PLATFORM_TWITCH

    # endpoints
    TOKEN_URL = "https://id.twitch.tv/oauth2/token"
    STREAMS_URL = "https://api.twitch.tv/helix/streams"

    # maximum user ids per streams request
    PAGE_SIZE = 100

    """
    Initialize the TwitchSource
    Sets up the client credentials used for the app access token.

    @param session: aiohttp.ClientSession HTTP session for requests
    @param client_id: str Twitch application client id
    @param client_secret: str Twitch application client secret
    """
    def __init__(self, session: aiohttp.ClientSession, client_id: str, client_secret: str):

        super().__init__(session)
        self.client_id = client_id
        self.client_secret = client_secret
        self.access_token: Optional[str] = None

    """
    Acquire a fresh app access token
    Uses the client credentials grant and stores the token for later requests.

    @return None
    @throws TokenRefreshError: When the token cannot be acquired
    """
    async def refresh_token(self):

        # setup the parameters
        params = {
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'grant_type': 'client_credentials',
        }

        # let's try to fetch
        try:
            async with self.session.post(self.TOKEN_URL, params=params) as resp:

                # make sure we have a valid response code
                if resp.status not in OK_STATUSES:
                    raise TokenRefreshError(f"Twitch token request returned {resp.status}")

                data = await resp.json()

        # whoopsie... wrap the transport error
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TokenRefreshError(f"Twitch token request failed: {e}") from e

        # make sure what we need is in the response
        token = (data or {}).get('access_token')
        if not token:
            raise TokenRefreshError("Twitch token response has no access_token")

        self.access_token = token

    """
    Fetch the live streams for a set of user ids
    Ids are deduplicated and sent in chunks of the page size, results are merged.

    @param user_ids: iterable Twitch user ids
    @return list: Raw Helix stream objects for the users that are live
    @throws SourceError: When any batch request fails
    """
    async def fetch_streams(self, user_ids: Iterable[str]) -> List[Dict[str, Any]]:

        # hold the streams
        streams = []

        # loop each chunk, nothing to do for an empty set
        for chunk in chunked(user_ids, self.PAGE_SIZE):

            # setup the parameters
            params = [('user_id', user_id) for user_id in chunk]
            params.append(('first', str(self.PAGE_SIZE)))

            data = await self._get_json(self.STREAMS_URL, params=params, headers=self._headers())
            streams.extend((data or {}).get('data') or [])

        # log it and return them
        logger.debug(f"Twitch reported {len(streams)} live streams")
        return streams

    """
    Build the Helix request headers

    @return dict: Authorization headers
    @throws SourceError: When no token has been acquired yet
    """
    def _headers(self) -> Dict[str, str]:

        # we need a token first
        if not self.access_token:
            raise SourceError("Twitch access token has not been acquired")

        return {
            'Client-Id': self.client_id,
            'Authorization': f"Bearer {self.access_token}",
        }
