from __future__ import annotations

import httpx

from .config import ShowcaseConfig
from .errors import (
    NetworkError,
    TokenExchangeError,
    TokenRefreshError,
    UpstreamApiError,
)
from .http import build_logging_hooks, json_body, send
from .models import TokenResponse


class RelayClient:
    """Client side of the token relay contract.

    Every request carries the pre-shared relay key in the ``apikey`` header.
    Pass-through calls additionally send the caller's Spotify access token as
    the bearer credential.
    """

    def __init__(
        self,
        base_url: str,
        relay_key: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        debug_enabled: bool = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"apikey": relay_key},
            timeout=timeout,
            transport=transport,
            event_hooks=build_logging_hooks(enabled=debug_enabled),
        )

    @classmethod
    def from_config(cls, config: ShowcaseConfig, **kwargs) -> "RelayClient":
        return cls(config.relay_url, config.relay_key, timeout=config.timeout, **kwargs)

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -- token operations ------------------------------------------------------

    async def exchange_code(self, code: str) -> TokenResponse:
        try:
            response = await send(self._client, "GET", "/callback", params={"code": code})
            return TokenResponse.from_payload(json_body(response))
        except (UpstreamApiError, NetworkError) as error:
            raise TokenExchangeError(f"Authorization code exchange failed: {error}") from error

    async def refresh(self, refresh_token: str) -> TokenResponse:
        try:
            response = await send(
                self._client, "GET", "/refresh", params={"refresh_token": refresh_token}
            )
            return TokenResponse.from_payload(json_body(response))
        except (UpstreamApiError, NetworkError) as error:
            raise TokenRefreshError(f"Access token refresh failed: {error}") from error

    # -- pass-through ----------------------------------------------------------

    async def top_tracks(self, access_token: str) -> dict:
        return await self._get("/top-tracks", access_token)

    async def currently_playing(self, access_token: str) -> dict:
        return await self._get("/currently-playing", access_token)

    async def followed_artists(self, access_token: str) -> dict:
        return await self._get("/followed-artists", access_token)

    async def play(self, access_token: str, uri: str | None = None) -> dict:
        kwargs = {"json": {"uri": uri}} if uri else {}
        response = await send(
            self._client, "POST", "/play", headers=self._bearer(access_token), **kwargs
        )
        return json_body(response)

    async def pause(self, access_token: str) -> dict:
        response = await send(self._client, "POST", "/pause", headers=self._bearer(access_token))
        return json_body(response)

    async def _get(self, path: str, access_token: str) -> dict:
        response = await send(self._client, "GET", path, headers=self._bearer(access_token))
        return json_body(response)

    @staticmethod
    def _bearer(access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}
