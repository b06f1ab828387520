#!/usr/bin/env python3
"""
Roster Loader Module

This module handles loading and parsing of the YAML roster file
for the KPTV Live Roster application. It converts raw YAML data into
member objects with their channel bindings.

@package KPTV Live Roster
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, List
from liveroster.models import Member, MemberChannel, PLATFORM_KINDS

# setup the logger
logger = logging.getLogger(__name__)

"""
Load and parse the roster from a YAML file

Reads the specified YAML roster file, validates its existence,
and converts each entry under the top level members key into a
Member with its channel bindings and an empty stream list.

@param data_path: str Path to the YAML roster file
@return list: List of Member objects in file order
@throws FileNotFoundError: When the specified roster file does not exist
@throws ValueError: When the roster structure is invalid
"""
def load_roster(data_path: str) -> List[Member]:

    # load the roster file
    roster_file = Path(data_path)

    # make sure it actually exists
    if not roster_file.exists():
        raise FileNotFoundError(f"Roster file not found: {data_path}")

    # now open it grab the data as yaml
    with open(roster_file, 'r') as f:
        roster_data = yaml.safe_load(f) or {}

    # the document has to be a mapping
    if not isinstance(roster_data, dict):
        raise ValueError(f"Roster file must contain a mapping: {data_path}")

    # setup and hold the members
    members = []
    for index, member_data in enumerate(roster_data.get('members') or []):
        members.append(_parse_member(index, member_data))

    # log it and return them
    logger.info(f"Loaded {len(members)} members from {data_path}")
    return members

"""
Parse a single roster entry

@param index: int Position of the entry, used in error messages
@param member_data: dict Raw member mapping
@return Member: Parsed member
@throws ValueError: When the entry is missing required fields
"""
def _parse_member(index: int, member_data: Any) -> Member:

    # make sure we have a name
    if not isinstance(member_data, dict) or not member_data.get('name'):
        raise ValueError(f"Roster member #{index} is missing a name")

    name = str(member_data['name'])

    # the data bag is passed through untouched
    data = member_data.get('data') or {}
    if not isinstance(data, dict):
        raise ValueError(f"Roster member '{name}' has non-mapping data")

    # setup and hold the channels
    channels = []
    for channel_data in member_data.get('channels') or []:
        channels.append(_parse_channel(name, channel_data))

    return Member(name=name, data=data, channels=channels, streams=[])

"""
Parse a single channel binding

Unknown platform types are kept, they just never match anything.

@param member_name: str Owning member name, used in messages
@param channel_data: dict Raw channel mapping with type and value
@return MemberChannel: Parsed channel binding
@throws ValueError: When type or value is missing
"""
def _parse_channel(member_name: str, channel_data: Dict[str, Any]) -> MemberChannel:

    # make sure both parts are there
    if not isinstance(channel_data, dict) or not channel_data.get('type') or not channel_data.get('value'):
        raise ValueError(f"Roster member '{member_name}' has a channel without type or value")

    channel = MemberChannel(type=str(channel_data['type']), value=str(channel_data['value']))

    # oof... a platform we don't resolve
    if channel.type not in PLATFORM_KINDS:
        logger.warning(f"Unknown channel type '{channel.type}' for member '{member_name}'")

    return channel
