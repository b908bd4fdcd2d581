import asyncio

import pytest

from showcase.dashboard import SpotifyDashboard
from showcase.errors import NetworkError, UpstreamApiError
from showcase.resource_client import ResourceClient


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeResources(ResourceClient):
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.top_tracks_result: dict | Exception = {"items": [{"id": "t1"}]}
        self.now_playing_results: list[dict | Exception] = [
            {"is_playing": True, "item": {"name": "Song"}}
        ]
        self.followed_result: dict | Exception = {"artists": {"items": [{"id": "a1"}]}}
        self.playback_error: Exception | None = None
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True

    @staticmethod
    def _resolve(result):
        if isinstance(result, Exception):
            raise result
        return result

    async def top_tracks(self) -> dict:
        self.calls.append(("top_tracks",))
        return self._resolve(self.top_tracks_result)

    async def currently_playing(self) -> dict:
        self.calls.append(("currently_playing",))
        result = self.now_playing_results[0]
        if len(self.now_playing_results) > 1:
            self.now_playing_results.pop(0)
        return self._resolve(result)

    async def followed_artists(self) -> dict:
        self.calls.append(("followed_artists",))
        return self._resolve(self.followed_result)

    async def play(self, uri: str | None = None) -> dict:
        self.calls.append(("play", uri))
        if self.playback_error:
            raise self.playback_error
        return {"success": True}

    async def pause(self) -> dict:
        self.calls.append(("pause",))
        if self.playback_error:
            raise self.playback_error
        return {"success": True}


@pytest.mark.asyncio
async def test_load_fetches_all_three_sections() -> None:
    resources = FakeResources()
    dashboard = SpotifyDashboard(resources, sleep=SleepRecorder())

    overview = await dashboard.load()

    assert overview is dashboard.overview
    assert overview.top_tracks == [{"id": "t1"}]
    assert overview.currently_playing == {"is_playing": True, "item": {"name": "Song"}}
    assert overview.followed_artists == [{"id": "a1"}]
    assert dashboard.error is None
    assert dashboard.loading is False
    assert sorted(call[0] for call in resources.calls) == [
        "currently_playing",
        "followed_artists",
        "top_tracks",
    ]


@pytest.mark.asyncio
async def test_load_not_playing() -> None:
    resources = FakeResources()
    resources.now_playing_results = [{"is_playing": False}]
    dashboard = SpotifyDashboard(resources, sleep=SleepRecorder())

    overview = await dashboard.load()

    assert overview.currently_playing == {"is_playing": False}


@pytest.mark.asyncio
async def test_load_failure_sets_error_and_keeps_previous_overview() -> None:
    resources = FakeResources()
    dashboard = SpotifyDashboard(resources, sleep=SleepRecorder())
    previous = await dashboard.load()

    resources.followed_result = UpstreamApiError(401, "Unauthorized - token may have expired")
    result = await dashboard.load()

    assert result is None
    assert dashboard.error == "Unauthorized - token may have expired"
    assert dashboard.overview is previous
    assert dashboard.loading is False


@pytest.mark.asyncio
async def test_retry_clears_error() -> None:
    resources = FakeResources()
    resources.top_tracks_result = NetworkError("offline")
    dashboard = SpotifyDashboard(resources, sleep=SleepRecorder())
    await dashboard.load()
    assert dashboard.error == "offline"

    resources.top_tracks_result = {"items": []}
    overview = await dashboard.retry()

    assert overview is not None
    assert dashboard.error is None


@pytest.mark.asyncio
async def test_toggle_playback_plays_uri_then_refreshes_now_playing() -> None:
    resources = FakeResources()
    resources.now_playing_results = [
        {"is_playing": False},
        {"is_playing": True, "item": {"name": "Next"}},
    ]
    sleep = SleepRecorder()
    dashboard = SpotifyDashboard(resources, refresh_delay=1.0, sleep=sleep)
    await dashboard.load()

    assert await dashboard.toggle_playback("spotify:track:2") is True

    assert ("play", "spotify:track:2") in resources.calls
    assert sleep.calls == [1.0]
    assert dashboard.overview.currently_playing["item"] == {"name": "Next"}


@pytest.mark.asyncio
async def test_toggle_playback_without_uri_pauses() -> None:
    resources = FakeResources()
    dashboard = SpotifyDashboard(resources, sleep=SleepRecorder())

    assert await dashboard.toggle_playback() is True

    assert ("pause",) in resources.calls
    assert dashboard.overview is not None


@pytest.mark.asyncio
async def test_toggle_playback_failure_sets_error() -> None:
    resources = FakeResources()
    resources.playback_error = UpstreamApiError(404, "Player command failed: No active device found")
    sleep = SleepRecorder()
    dashboard = SpotifyDashboard(resources, sleep=sleep)

    assert await dashboard.toggle_playback("spotify:track:1") is False

    assert dashboard.error == "Player command failed: No active device found"
    assert sleep.calls == []
    assert ("currently_playing",) not in resources.calls


@pytest.mark.asyncio
async def test_toggle_playback_tolerates_refresh_failure() -> None:
    resources = FakeResources()
    resources.now_playing_results = [NetworkError("offline")]
    dashboard = SpotifyDashboard(resources, sleep=SleepRecorder())

    assert await dashboard.toggle_playback() is True
    assert dashboard.error is None


@pytest.mark.asyncio
async def test_context_manager_runs_poller() -> None:
    resources = FakeResources()
    tick = asyncio.Event()

    async def sleep(seconds: float) -> None:
        if tick.is_set():
            await asyncio.Event().wait()
        tick.set()

    async with SpotifyDashboard(resources, poll_interval=30, sleep=sleep) as dashboard:
        assert dashboard.poller.running is True
        await asyncio.wait_for(tick.wait(), timeout=1)
        await asyncio.sleep(0)
        await asyncio.sleep(0)

    assert dashboard.poller.running is False
    assert resources.closed is True
    assert dashboard.overview.currently_playing["item"] == {"name": "Song"}
