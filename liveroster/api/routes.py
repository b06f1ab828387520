#!/usr/bin/env python3
"""
API Routes Module

This module defines the REST API endpoint for the KPTV Live Roster application:
the current roster snapshot as JSON.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# imports
import logging
from fastapi import APIRouter, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

# setup the logger
logger = logging.getLogger(__name__)

# setup the api router
router = APIRouter()

"""
Get roster store from application state

@param request: Request FastAPI request object
@return RosterStore: Roster store from app state
"""
def get_store(request: Request):
    """Get roster store from app state"""
    return request.app.state.store

"""
Get the current roster snapshot

Returns every member with its channels and the streams from the last
successful refresh. Never waits on or triggers a refresh.

@param request: Request FastAPI request object
@return JSONResponse: JSON array of members
@throws HTTPException: 500 if the snapshot cannot be serialized
"""
@router.get("/")
async def get_roster(request: Request):
    """Get the current roster snapshot"""
    snapshot = get_store(request).snapshot()

    try:
        content = jsonable_encoder([member.to_dict() for member in snapshot.members])
        return JSONResponse(content=content)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize roster: {e}")
        raise HTTPException(status_code=500, detail="Failed to serialize roster")
