from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from .constants import LOGGER, POLL_INTERVAL_SECONDS
from .errors import NetworkError, UpstreamApiError


class NowPlayingPoller:
    """Periodically re-fetches the currently playing track.

    ``start`` schedules the loop on the running event loop and ``stop``
    cancels it and waits for it to finish. Used as an async context manager
    the poller lives exactly as long as the ``async with`` block.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[dict]],
        on_update: Callable[[dict], None],
        *,
        interval: float = POLL_INTERVAL_SECONDS,
        sleep=asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive.")
        self._fetch = fetch
        self._on_update = on_update
        self._interval = interval
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "NowPlayingPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval)
            try:
                self._on_update(await self._fetch())
            except (UpstreamApiError, NetworkError) as error:
                LOGGER.warning("Failed to update currently playing: %s", error)
            except Exception:
                LOGGER.exception("Unexpected error while polling currently playing")
