from __future__ import annotations

import asyncio

from .constants import LOGGER, PLAYBACK_REFRESH_DELAY_SECONDS, POLL_INTERVAL_SECONDS
from .errors import NetworkError, UpstreamApiError
from .models import Overview, normalize_now_playing
from .polling import NowPlayingPoller
from .resource_client import ResourceClient


class SpotifyDashboard:
    """Data side of the Spotify page: what to show, and whether it failed.

    ``load`` pulls top tracks, now playing and followed artists together and
    either replaces the whole overview or records an error for the page to
    show next to a retry button. Auth state is never touched from here.
    """

    def __init__(
        self,
        resources: ResourceClient,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        refresh_delay: float = PLAYBACK_REFRESH_DELAY_SECONDS,
        sleep=asyncio.sleep,
    ) -> None:
        self.resources = resources
        self.overview: Overview | None = None
        self.error: str | None = None
        self.loading = False
        self._refresh_delay = refresh_delay
        self._sleep = sleep
        self.poller = NowPlayingPoller(
            resources.currently_playing,
            self._apply_now_playing,
            interval=poll_interval,
            sleep=sleep,
        )

    async def __aenter__(self) -> "SpotifyDashboard":
        self.poller.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.poller.stop()
        await self.resources.aclose()

    async def load(self) -> Overview | None:
        self.loading = True
        self.error = None
        try:
            top_tracks, currently_playing, followed_artists = await asyncio.gather(
                self.resources.top_tracks(),
                self.resources.currently_playing(),
                self.resources.followed_artists(),
            )
        except (UpstreamApiError, NetworkError) as error:
            LOGGER.warning("Failed to fetch Spotify data: %s", error)
            self.error = str(error) or "Failed to fetch Spotify data"
            return None
        finally:
            self.loading = False

        self.overview = Overview.from_payloads(top_tracks, currently_playing, followed_artists)
        return self.overview

    async def retry(self) -> Overview | None:
        return await self.load()

    async def toggle_playback(self, uri: str | None = None) -> bool:
        try:
            if uri:
                await self.resources.play(uri)
            else:
                await self.resources.pause()
        except (UpstreamApiError, NetworkError) as error:
            LOGGER.warning("Failed to control playback: %s", error)
            self.error = str(error) or "Failed to control playback"
            return False

        await self._sleep(self._refresh_delay)
        try:
            self._apply_now_playing(await self.resources.currently_playing())
        except (UpstreamApiError, NetworkError) as error:
            LOGGER.warning("Failed to update currently playing: %s", error)
        return True

    def _apply_now_playing(self, payload: dict) -> None:
        if self.overview is None:
            self.overview = Overview()
        self.overview.currently_playing = normalize_now_playing(payload)
