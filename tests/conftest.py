"""Shared fixtures: a fake HTTP session and mocked platform sources."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from liveroster.models import Member, MemberChannel
from liveroster.services import RosterStore, StreamReconciler
from tests.fakes import FakeSession


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def alex() -> Member:
    return Member(
        name="Alex",
        data={"color": "red"},
        channels=[MemberChannel("twitch", "u1"), MemberChannel("youtube", "c1")],
    )


@pytest.fixture
def twitch_source() -> MagicMock:
    source = MagicMock()
    source.refresh_token = AsyncMock(return_value=None)
    source.fetch_streams = AsyncMock(return_value=[])
    return source


@pytest.fixture
def youtube_source() -> MagicMock:
    source = MagicMock()
    source.fetch_live_video_id = AsyncMock(return_value=None)
    source.fetch_videos = AsyncMock(return_value=[])
    source.fetch_game_name = AsyncMock(return_value="")
    return source


@pytest.fixture
def make_reconciler(twitch_source: MagicMock, youtube_source: MagicMock):
    def _make(*members: Member) -> StreamReconciler:
        return StreamReconciler(RosterStore(members), twitch_source, youtube_source)

    return _make
