from __future__ import annotations

import logging

import httpx

from .constants import LOGGER
from .errors import NetworkError, UpstreamApiError


def build_logging_hooks(logger: logging.Logger | None = None, *, enabled: bool = True) -> dict:
    log = logger or LOGGER

    # Query strings are left out: /refresh carries the refresh token there.
    async def log_request(request: httpx.Request) -> None:
        if not enabled:
            return
        log.info("Request %s %s%s", request.method, request.url.host, request.url.path)

    async def log_response(response: httpx.Response) -> None:
        if not enabled:
            return
        log.info(
            "Response %s %s%s -> %s",
            response.request.method,
            response.request.url.host,
            response.request.url.path,
            response.status_code,
        )

    return {"request": [log_request], "response": [log_response]}


def error_message(response: httpx.Response) -> str:
    fallback = f"Spotify API error: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback

    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    description = body.get("error_description")
    if isinstance(description, str) and description:
        return description
    if isinstance(error, str) and error:
        return error
    return fallback


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {"body": body}


def json_body(response: httpx.Response) -> dict:
    try:
        return response.json()
    except ValueError as error:
        LOGGER.warning("Non-JSON body from %s", response.request.url.path)
        raise UpstreamApiError(
            502, f"Invalid response from {response.request.url.path}"
        ) from error


async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    """Issue one request, mapping failures onto the showcase error kinds.

    Transport failures become ``NetworkError``. Any status other than 2xx
    becomes ``UpstreamApiError`` carrying the provider's message.
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as error:
        raise NetworkError(f"{method} {url} failed: {error}") from error

    if response.is_success:
        return response

    message = error_message(response)
    LOGGER.warning("Upstream error status=%s %s %s: %s", response.status_code, method, url, message)
    raise UpstreamApiError(response.status_code, message, _json_or_empty(response))
