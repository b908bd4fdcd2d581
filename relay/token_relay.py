from __future__ import annotations

import json

import httpx
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from . import spotify_api, spotify_oauth
from .constants import (
    APP_VERSION,
    DEFAULT_CORS_ORIGINS,
    FOLLOWED_ARTISTS_PARAMS,
    LOGGER,
    SERVICE_NAME,
    SPOTIFY_API_URL,
    TOP_TRACKS_PARAMS,
)
from .cors import cors_error_response, cors_json_response, cors_preflight_response
from .ingress import extract_bearer_token, is_authorized_caller
from .spotify_api import SpotifyApiError
from .spotify_oauth import ClientCredentials, TokenRequestError


class TokenRelay:
    """Holds the Spotify client secret and brokers token calls for the browser.

    Every request is independent: nothing is cached between calls. Token
    endpoints hand the provider's JSON back untouched, pass-through endpoints
    forward the caller's Spotify bearer token to the Web API.
    """

    def __init__(
        self,
        *,
        spotify_client_id: str,
        spotify_client_secret: str,
        redirect_uri: str,
        relay_key: str,
        cors_origins: set[str] | None = None,
        api_base_url: str = SPOTIFY_API_URL,
        client: httpx.AsyncClient | None = None,
        exchange_code_fn=spotify_oauth.exchange_code,
        refresh_token_fn=spotify_oauth.refresh_token,
        fetch_fn=spotify_api.fetch_from_spotify,
        playback_fn=spotify_api.control_playback,
    ) -> None:
        self.credentials = ClientCredentials(
            client_id=spotify_client_id,
            client_secret=spotify_client_secret,
            redirect_uri=redirect_uri,
        )
        self.relay_key = relay_key
        self.cors_origins = set(cors_origins) if cors_origins else set(DEFAULT_CORS_ORIGINS)
        self.api_base_url = api_base_url
        self.client = client

        self._exchange_code_fn = exchange_code_fn
        self._refresh_token_fn = refresh_token_fn
        self._fetch_fn = fetch_fn
        self._playback_fn = playback_fn

    # -- routes ----------------------------------------------------------------

    def routes(self) -> list[Route]:
        return [
            Route("/health", self._handle_health, methods=["GET"]),
            Route("/callback", self._handle_callback, methods=["GET"]),
            Route("/refresh", self._handle_refresh, methods=["GET"]),
            Route("/top-tracks", self._handle_top_tracks, methods=["GET"]),
            Route("/currently-playing", self._handle_currently_playing, methods=["GET"]),
            Route("/followed-artists", self._handle_followed_artists, methods=["GET"]),
            Route("/play", self._handle_play, methods=["POST"]),
            Route("/pause", self._handle_pause, methods=["POST"]),
            Route("/{path:path}", self._handle_preflight, methods=["OPTIONS"]),
            Route("/{path:path}", self._handle_unknown, methods=["GET", "POST"]),
        ]

    # -- handlers --------------------------------------------------------------

    async def _handle_health(self, request: Request) -> Response:
        return self._json(
            request,
            {"status": "ok", "version": APP_VERSION, "service": SERVICE_NAME},
        )

    async def _handle_preflight(self, request: Request) -> Response:
        return cors_preflight_response(request, self.cors_origins)

    async def _handle_unknown(self, request: Request) -> Response:
        return self._error(request, "Unknown endpoint", 404)

    async def _handle_callback(self, request: Request) -> Response:
        if not is_authorized_caller(request, self.relay_key, allow_bearer=True):
            return self._unauthorized(request)

        code = request.query_params.get("code")
        if not code:
            return self._error(request, "Missing authorization code", 400)

        return await self._token_call(
            request,
            self._exchange_code_fn(self.credentials, code, **self._client_kwargs()),
            "code exchange",
        )

    async def _handle_refresh(self, request: Request) -> Response:
        if not is_authorized_caller(request, self.relay_key, allow_bearer=True):
            return self._unauthorized(request)

        refresh_token = request.query_params.get("refresh_token")
        if not refresh_token:
            return self._error(request, "Missing refresh token", 400)

        return await self._token_call(
            request,
            self._refresh_token_fn(self.credentials, refresh_token, **self._client_kwargs()),
            "token refresh",
        )

    async def _handle_top_tracks(self, request: Request) -> Response:
        return await self._pass_through(request, "/me/top/tracks", TOP_TRACKS_PARAMS)

    async def _handle_currently_playing(self, request: Request) -> Response:
        return await self._pass_through(request, "/me/player/currently-playing")

    async def _handle_followed_artists(self, request: Request) -> Response:
        return await self._pass_through(request, "/me/following", FOLLOWED_ARTISTS_PARAMS)

    async def _handle_play(self, request: Request) -> Response:
        access_token = self._spotify_token(request)
        if access_token is None:
            return self._unauthorized(request)

        body = await request.body()
        uri = None
        if body.strip():
            try:
                payload = json.loads(body)
            except json.JSONDecodeError:
                return self._error(request, "Invalid JSON body", 400)
            if not isinstance(payload, dict):
                return self._error(request, "Invalid JSON body", 400)
            uri = payload.get("uri")
            if uri is not None and not isinstance(uri, str):
                return self._error(request, "uri must be a string", 400)

        return await self._playback(request, "play", access_token, uri)

    async def _handle_pause(self, request: Request) -> Response:
        access_token = self._spotify_token(request)
        if access_token is None:
            return self._unauthorized(request)
        return await self._playback(request, "pause", access_token)

    # -- helpers ---------------------------------------------------------------

    async def _token_call(self, request: Request, call, operation: str) -> Response:
        try:
            payload = await call
        except TokenRequestError as error:
            LOGGER.warning("Spotify %s rejected status=%s", operation, error.status_code)
            return self._json(request, error.payload, error.status_code)
        except httpx.HTTPError as error:
            LOGGER.warning("Spotify %s failed: %s", operation, error)
            return self._error(request, f"Token endpoint unreachable: {error}", 502)
        return self._json(request, payload)

    async def _pass_through(
        self,
        request: Request,
        path: str,
        params: dict | None = None,
    ) -> Response:
        access_token = self._spotify_token(request)
        if access_token is None:
            return self._unauthorized(request)

        try:
            payload = await self._fetch_fn(
                path,
                access_token,
                params=params,
                base_url=self.api_base_url,
                **self._client_kwargs(),
            )
        except SpotifyApiError as error:
            return self._json(request, error.payload(), error.status_code)
        except httpx.HTTPError as error:
            LOGGER.warning("Spotify API unreachable path=%s: %s", path, error)
            return self._error(request, f"Spotify API unreachable: {error}", 502)
        return self._json(request, payload)

    async def _playback(
        self,
        request: Request,
        action: str,
        access_token: str,
        uri: str | None = None,
    ) -> Response:
        try:
            payload = await self._playback_fn(
                action,
                access_token,
                uri,
                base_url=self.api_base_url,
                **self._client_kwargs(),
            )
        except SpotifyApiError as error:
            return self._json(request, error.payload(), error.status_code)
        except httpx.HTTPError as error:
            LOGGER.warning("Spotify playback %s unreachable: %s", action, error)
            return self._error(request, f"Spotify API unreachable: {error}", 502)
        return self._json(request, payload)

    def _spotify_token(self, request: Request) -> str | None:
        if not is_authorized_caller(request, self.relay_key, allow_bearer=False):
            return None
        return extract_bearer_token(request.headers.get("authorization"))

    def _client_kwargs(self) -> dict:
        if self.client is None:
            return {}
        return {"client": self.client}

    def _json(self, request: Request, payload: dict, status_code: int = 200) -> Response:
        return cors_json_response(request, self.cors_origins, payload, status_code)

    def _unauthorized(self, request: Request) -> Response:
        return self._error(request, "Missing or invalid Authorization header", 401)

    def _error(self, request: Request, message: str, status_code: int) -> Response:
        return cors_error_response(
            request=request,
            allowed_origins=self.cors_origins,
            message=message,
            status_code=status_code,
        )
