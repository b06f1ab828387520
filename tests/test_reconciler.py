"""Tests for a single reconciliation pass.

Covers the published roster shape, partial failure handling (Twitch and
YouTube), idempotence, de-duplication and unknown channel types.
"""

from __future__ import annotations

import asyncio
import json
import logging
from unittest.mock import AsyncMock

import pytest

from liveroster.models import Member, MemberChannel, format_timestamp
from liveroster.services import RosterStore, StreamReconciler
from liveroster.sources import SourceError, TokenRefreshError, YouTubeSource
from tests.fakes import FakeResponse
from tests.payloads import twitch_stream, youtube_video

LIVE_PAGE = '<link rel="canonical" href="https://www.youtube.com/watch?v=v9">'


def _streams(reconciler, name: str) -> list:
    member = next(m for m in reconciler.store.snapshot().members if m.name == name)
    return member.streams


@pytest.mark.asyncio
class TestRefresh:
    async def test_twitch_live_youtube_miss(self, make_reconciler, alex, twitch_source, youtube_source) -> None:
        twitch_source.fetch_streams.return_value = [twitch_stream("u1", viewer_count=42)]
        reconciler = make_reconciler(alex)

        await reconciler.refresh()

        streams = _streams(reconciler, "Alex")
        assert len(streams) == 1
        assert streams[0].type == "twitch"
        assert streams[0].viewer_count == 42
        youtube_source.fetch_live_video_id.assert_awaited_once_with("c1")
        youtube_source.fetch_game_name.assert_not_awaited()

    async def test_youtube_video_not_started_is_dropped(self, make_reconciler, alex, youtube_source) -> None:
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.return_value = [youtube_video("v9", "c1", start="")]
        reconciler = make_reconciler(alex)

        await reconciler.refresh()

        youtube_source.fetch_videos.assert_awaited_once_with(["v9"])
        assert _streams(reconciler, "Alex") == []
        youtube_source.fetch_game_name.assert_not_awaited()

    async def test_youtube_live_with_game_name(self, make_reconciler, alex, youtube_source) -> None:
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.return_value = [youtube_video("v9", "c1")]
        youtube_source.fetch_game_name.return_value = "Minecraft"
        reconciler = make_reconciler(alex)

        await reconciler.refresh()

        (stream,) = _streams(reconciler, "Alex")
        assert stream.type == "youtube"
        assert stream.id == "v9"
        assert stream.game_name == "Minecraft"
        youtube_source.fetch_game_name.assert_awaited_once_with("v9")

    async def test_offline_member_gets_empty_list(self, make_reconciler, alex) -> None:
        reconciler = make_reconciler(alex)

        await reconciler.refresh()

        assert _streams(reconciler, "Alex") == []
        assert json.loads(json.dumps(reconciler.store.snapshot().members[0].to_dict()))["streams"] == []

    async def test_unknown_channel_type_never_matches(self, make_reconciler, twitch_source, youtube_source) -> None:
        member = Member(name="Kick", channels=[MemberChannel("kick", "u1")])
        twitch_source.fetch_streams.return_value = [twitch_stream("u1")]
        reconciler = make_reconciler(member)

        await reconciler.refresh()

        twitch_source.fetch_streams.assert_awaited_once_with([])
        youtube_source.fetch_live_video_id.assert_not_awaited()
        assert _streams(reconciler, "Kick") == []

    async def test_discovery_failure_only_drops_that_channel(self, make_reconciler, youtube_source) -> None:
        member = Member(
            name="Multi",
            channels=[MemberChannel("youtube", "broken"), MemberChannel("youtube", "c2")],
        )

        async def discover(channel_id: str):
            if channel_id == "broken":
                raise SourceError("page down")
            return "v2"

        youtube_source.fetch_live_video_id = AsyncMock(side_effect=discover)
        youtube_source.fetch_videos.return_value = [youtube_video("v2", "c2")]
        reconciler = make_reconciler(member)

        await reconciler.refresh()

        assert [s.id for s in _streams(reconciler, "Multi")] == ["v2"]

    async def test_token_failure_leaves_prior_data(self, make_reconciler, alex, twitch_source) -> None:
        twitch_source.fetch_streams.return_value = [twitch_stream("u1")]
        reconciler = make_reconciler(alex)
        await reconciler.refresh()
        before = reconciler.store.snapshot()

        twitch_source.refresh_token.side_effect = TokenRefreshError("bad credentials")
        with pytest.raises(TokenRefreshError):
            await reconciler.refresh()

        assert reconciler.store.snapshot() is before
        assert len(_streams(reconciler, "Alex")) == 1

    async def test_twitch_batch_failure_leaves_prior_youtube_data(
        self, make_reconciler, alex, twitch_source, youtube_source
    ) -> None:
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.return_value = [youtube_video("v9", "c1")]
        reconciler = make_reconciler(alex)
        await reconciler.refresh()

        twitch_source.fetch_streams.side_effect = SourceError("helix down")
        with pytest.raises(SourceError):
            await reconciler.refresh()

        assert [s.id for s in _streams(reconciler, "Alex")] == ["v9"]

    async def test_youtube_batch_failure_leaves_prior_twitch_data(
        self, make_reconciler, alex, twitch_source, youtube_source
    ) -> None:
        twitch_source.fetch_streams.return_value = [twitch_stream("u1")]
        reconciler = make_reconciler(alex)
        await reconciler.refresh()

        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.side_effect = SourceError("quota")
        with pytest.raises(SourceError):
            await reconciler.refresh()

        assert [s.type for s in _streams(reconciler, "Alex")] == ["twitch"]

    async def test_refresh_is_idempotent(self, make_reconciler, alex, twitch_source, youtube_source) -> None:
        twitch_source.fetch_streams.return_value = [twitch_stream("u1")]
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.return_value = [youtube_video("v9", "c1")]
        reconciler = make_reconciler(alex)

        await reconciler.refresh()
        first = json.dumps([m.to_dict() for m in reconciler.store.snapshot().members])
        await reconciler.refresh()
        second = json.dumps([m.to_dict() for m in reconciler.store.snapshot().members])

        assert first == second

    async def test_shared_channels_are_deduplicated(self, make_reconciler, twitch_source, youtube_source) -> None:
        alex = Member(name="Alex", channels=[MemberChannel("twitch", "u1"), MemberChannel("twitch", "u1")])
        sam = Member(
            name="Sam",
            channels=[MemberChannel("twitch", "u1"), MemberChannel("youtube", "c1")],
        )
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.return_value = [youtube_video("v9", "c1")]
        twitch_source.fetch_streams.return_value = [twitch_stream("u1")]
        reconciler = make_reconciler(alex, sam)

        await reconciler.refresh()

        twitch_source.fetch_streams.assert_awaited_once_with(["u1"])
        assert [s.id for s in _streams(reconciler, "Alex")] == ["s-u1"]
        assert [(s.type, s.id) for s in _streams(reconciler, "Sam")] == [("twitch", "s-u1"), ("youtube", "v9")]

    async def test_streams_follow_binding_platform(self, make_reconciler, twitch_source, youtube_source) -> None:
        # a video for a channel nobody is bound to is ignored and never scraped
        member = Member(name="Alex", channels=[MemberChannel("youtube", "c1")])
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.return_value = [youtube_video("v9", "someone-else")]
        reconciler = make_reconciler(member)

        await reconciler.refresh()

        assert _streams(reconciler, "Alex") == []
        youtube_source.fetch_game_name.assert_not_awaited()

    async def test_cycle_log_includes_publish_time(self, make_reconciler, alex, caplog) -> None:
        reconciler = make_reconciler(alex)

        with caplog.at_level(logging.INFO, logger="liveroster.services.reconciler"):
            await reconciler.refresh()

        refreshed_at = reconciler.store.snapshot().refreshed_at
        assert f"at {format_timestamp(refreshed_at)}" in caplog.text

    async def test_members_are_replaced_not_mutated(self, make_reconciler, alex, twitch_source) -> None:
        reconciler = make_reconciler(alex)
        twitch_source.fetch_streams.return_value = [twitch_stream("u1")]

        await reconciler.refresh()

        assert alex.streams == []
        published = reconciler.store.snapshot().members[0]
        assert published is not alex
        assert published.data == {"color": "red"}
        assert published.channels == alex.channels


@pytest.mark.asyncio
class TestGameLabelFailures:
    async def test_undecodable_watch_page_still_publishes(self, alex, twitch_source, session) -> None:
        session.add("GET", "https://www.youtube.com/channel/c1/live", FakeResponse(text=LIVE_PAGE))
        session.add(
            "GET",
            YouTubeSource.VIDEOS_URL,
            FakeResponse(json_data={"items": [youtube_video("v9", "c1")]}),
        )
        session.add("GET", "https://www.youtube.com/watch?v=v9", FakeResponse(body=b"\xff\xfe\xfa not utf8"))
        twitch_source.fetch_streams.return_value = [twitch_stream("u1", viewer_count=42)]
        reconciler = StreamReconciler(RosterStore([alex]), twitch_source, YouTubeSource(session, "key"))

        await reconciler.refresh()

        streams = _streams(reconciler, "Alex")
        assert [(s.type, s.viewer_count) for s in streams] == [("twitch", 42), ("youtube", 7)]
        assert streams[1].game_name == ""

    async def test_game_label_exception_is_absorbed(self, make_reconciler, alex, youtube_source) -> None:
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos.return_value = [youtube_video("v9", "c1")]
        youtube_source.fetch_game_name.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        reconciler = make_reconciler(alex)

        await reconciler.refresh()

        (stream,) = _streams(reconciler, "Alex")
        assert stream.id == "v9"
        assert stream.game_name == ""


@pytest.mark.asyncio
class TestPublishAtomicity:
    async def test_readers_see_whole_previous_roster_during_refresh(
        self, make_reconciler, twitch_source, youtube_source
    ) -> None:
        alex = Member(name="Alex", channels=[MemberChannel("twitch", "u1")])
        sam = Member(name="Sam", channels=[MemberChannel("youtube", "c1")])
        reconciler = make_reconciler(alex, sam)
        store = reconciler.store
        before = store.snapshot()

        entered = asyncio.Event()
        release = asyncio.Event()
        lock_held_during_io = []

        async def slow_videos(video_ids):
            lock_held_during_io.append(store._lock.locked())
            entered.set()
            await release.wait()
            return [youtube_video("v9", "c1")]

        twitch_source.fetch_streams.return_value = [twitch_stream("u1")]
        youtube_source.fetch_live_video_id.return_value = "v9"
        youtube_source.fetch_videos = AsyncMock(side_effect=slow_videos)

        task = asyncio.create_task(reconciler.refresh())
        await asyncio.wait_for(entered.wait(), timeout=1)

        # mid-cycle: a read returns at once with the untouched previous roster
        during = store.snapshot()
        assert during is before
        assert [m.streams for m in during.members] == [[], []]
        assert not store._lock.locked()

        release.set()
        await asyncio.wait_for(task, timeout=1)

        after = store.snapshot()
        assert after is not before
        assert [[s.id for s in m.streams] for m in after.members] == [["s-u1"], ["v9"]]
        assert lock_held_during_io == [False]
        # the snapshot a reader kept hold of is still the complete old one
        assert [m.streams for m in during.members] == [[], []]
