from __future__ import annotations

import logging

import httpx

from .constants import LOGGER


def build_logging_hooks(logger: logging.Logger | None = None, *, enabled: bool = True) -> dict:
    log = logger or LOGGER

    async def log_request(request: httpx.Request) -> None:
        if not enabled:
            return
        log.info("Spotify request %s %s", request.method, request.url)

    async def log_response(response: httpx.Response) -> None:
        if not enabled:
            return
        log.info(
            "Spotify response %s %s -> %s",
            response.request.method,
            response.request.url,
            response.status_code,
        )
        if response.status_code >= 400:
            body = await response.aread()
            text = body.decode("utf-8", errors="replace")
            if len(text) > 1000:
                text = text[:1000] + "...<truncated>"
            log.warning("Spotify error body: %s", text)

    return {"request": [log_request], "response": [log_response]}


def build_http_client(
    *,
    timeout: float = 30.0,
    debug_enabled: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        event_hooks=build_logging_hooks(enabled=debug_enabled),
    )
