from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from relay.constants import FOLLOWED_ARTISTS_PARAMS, TOP_TRACKS_PARAMS

from .constants import NOT_PLAYING, SPOTIFY_API_URL
from .errors import AuthenticationMissingError
from .http import build_logging_hooks, json_body, send
from .relay_client import RelayClient


class ResourceClient(ABC):
    @abstractmethod
    async def top_tracks(self) -> dict:
        raise NotImplementedError

    @abstractmethod
    async def currently_playing(self) -> dict:
        raise NotImplementedError

    @abstractmethod
    async def followed_artists(self) -> dict:
        raise NotImplementedError

    @abstractmethod
    async def play(self, uri: str | None = None) -> dict:
        raise NotImplementedError

    @abstractmethod
    async def pause(self) -> dict:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None

    async def __aenter__(self) -> "ResourceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class SpotifyResourceClient(ResourceClient):
    """Calls the Spotify Web API directly with one access token.

    A new instance is built whenever the token changes; the bearer header is
    fixed for the lifetime of the underlying ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        access_token: str | None,
        *,
        base_url: str = SPOTIFY_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        debug_enabled: bool = True,
    ) -> None:
        if not access_token:
            raise AuthenticationMissingError()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
            event_hooks=build_logging_hooks(enabled=debug_enabled),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def top_tracks(self) -> dict:
        response = await send(self._client, "GET", "/me/top/tracks", params=TOP_TRACKS_PARAMS)
        return json_body(response)

    async def currently_playing(self) -> dict:
        response = await send(self._client, "GET", "/me/player/currently-playing")
        # 204 No Content means nothing is playing.
        if response.status_code == 204 or not response.content:
            return dict(NOT_PLAYING)
        return json_body(response)

    async def followed_artists(self) -> dict:
        response = await send(
            self._client, "GET", "/me/following", params=FOLLOWED_ARTISTS_PARAMS
        )
        return json_body(response)

    async def play(self, uri: str | None = None) -> dict:
        kwargs = {"json": {"uris": [uri]}} if uri else {}
        await send(self._client, "PUT", "/me/player/play", **kwargs)
        return {"success": True}

    async def pause(self) -> dict:
        await send(self._client, "PUT", "/me/player/pause")
        return {"success": True}


class RelayResourceClient(ResourceClient):
    def __init__(self, relay: RelayClient, access_token: str | None) -> None:
        if not access_token:
            raise AuthenticationMissingError()
        self._relay = relay
        self._access_token = access_token

    async def top_tracks(self) -> dict:
        return await self._relay.top_tracks(self._access_token)

    async def currently_playing(self) -> dict:
        return await self._relay.currently_playing(self._access_token)

    async def followed_artists(self) -> dict:
        return await self._relay.followed_artists(self._access_token)

    async def play(self, uri: str | None = None) -> dict:
        return await self._relay.play(self._access_token, uri)

    async def pause(self) -> dict:
        return await self._relay.pause(self._access_token)
