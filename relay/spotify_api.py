from __future__ import annotations

import httpx

from .constants import LOGGER, NOT_PLAYING, SPOTIFY_API_URL


class SpotifyApiError(RuntimeError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def payload(self) -> dict:
        return {"error": self.message, "status": self.status_code}


def _error_message(response: httpx.Response, fallback: str) -> str:
    if response.status_code == 401:
        return "Unauthorized - token may have expired"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return fallback


async def fetch_from_spotify(
    path: str,
    access_token: str,
    *,
    params: dict[str, str | int] | None = None,
    client: httpx.AsyncClient | None = None,
    base_url: str = SPOTIFY_API_URL,
) -> dict:
    own_client = client is None
    http_client = client or httpx.AsyncClient()

    try:
        response = await http_client.get(
            f"{base_url.rstrip('/')}{path}",
            params=params,
            headers={"Authorization": f"Bearer {access_token}"},
        )
    finally:
        if own_client:
            await http_client.aclose()

    if response.is_error:
        message = _error_message(response, f"Spotify API error: {response.status_code}")
        LOGGER.warning("Spotify API error status=%s path=%s", response.status_code, path)
        raise SpotifyApiError(response.status_code, message)

    # Spotify answers 204 when nothing is playing.
    if response.status_code == 204 or not response.content:
        return dict(NOT_PLAYING)

    try:
        return response.json()
    except ValueError as error:
        LOGGER.warning("Spotify API returned a non-JSON body path=%s", path)
        raise SpotifyApiError(502, "Spotify API returned an invalid response") from error


async def control_playback(
    action: str,
    access_token: str,
    uri: str | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    base_url: str = SPOTIFY_API_URL,
) -> dict:
    if action not in {"play", "pause"}:
        raise ValueError(f"Unsupported playback action: {action}")

    request_kwargs: dict = {"headers": {"Authorization": f"Bearer {access_token}"}}
    if action == "play" and uri:
        request_kwargs["json"] = {"uris": [uri]}

    own_client = client is None
    http_client = client or httpx.AsyncClient()

    try:
        response = await http_client.put(
            f"{base_url.rstrip('/')}/me/player/{action}",
            **request_kwargs,
        )
    finally:
        if own_client:
            await http_client.aclose()

    if response.is_error:
        message = _error_message(response, f"Failed to {action} playback")
        LOGGER.warning("Spotify playback %s failed status=%s", action, response.status_code)
        raise SpotifyApiError(response.status_code, message)

    return {"success": True}
