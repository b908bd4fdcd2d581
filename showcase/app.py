from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from relay.env import is_truthy, load_env, setup_logging

from .auth_state import AuthStateManager
from .config import ShowcaseConfig
from .constants import LOGGER
from .dashboard import SpotifyDashboard
from .location import BrowserLocation, Location
from .relay_client import RelayClient
from .resource_client import RelayResourceClient, ResourceClient, SpotifyResourceClient
from .store import AuthorizationStore, FileAuthorizationStore


@dataclass
class Showcase:
    config: ShowcaseConfig
    relay: RelayClient
    auth: AuthStateManager

    async def dashboard(self, **kwargs) -> SpotifyDashboard:
        return SpotifyDashboard(await self.auth.resource_client(), **kwargs)

    async def aclose(self) -> None:
        await self.relay.aclose()

    async def __aenter__(self) -> "Showcase":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_showcase(
    config: ShowcaseConfig | None = None,
    *,
    store: AuthorizationStore | None = None,
    location: Location | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Showcase:
    """Wire config, storage, relay client and auth manager together.

    Resource calls go through the relay when ``SHOWCASE_VIA_RELAY`` is set,
    otherwise straight to the Spotify Web API.
    """
    load_env()
    debug_enabled = setup_logging("SHOWCASE_DEBUG", LOGGER)
    config = config or ShowcaseConfig.from_env()

    relay = RelayClient.from_config(config, transport=transport, debug_enabled=debug_enabled)

    def resource_client_factory(access_token: str) -> ResourceClient:
        if is_truthy(os.getenv("SHOWCASE_VIA_RELAY")):
            return RelayResourceClient(relay, access_token)
        return SpotifyResourceClient(
            access_token,
            base_url=config.api_base_url,
            timeout=config.timeout,
            transport=transport,
            debug_enabled=debug_enabled,
        )

    auth = AuthStateManager(
        config,
        store or FileAuthorizationStore(os.getenv("SHOWCASE_STORE_PATH", ".spotify_auth.json")),
        relay,
        location or BrowserLocation(config.redirect_uri),
        resource_client_factory=resource_client_factory,
    )
    LOGGER.info("Showcase ready (relay=%s)", config.relay_url)
    return Showcase(config=config, relay=relay, auth=auth)
