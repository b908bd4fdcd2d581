from __future__ import annotations

import contextlib
import os

from starlette.applications import Starlette

from relay.constants import LOGGER, SPOTIFY_API_URL
from relay.env import (
    get_env_float,
    get_env_int,
    load_env,
    parse_csv_env,
    setup_logging,
    validate_env,
)
from relay.http import build_http_client
from relay.token_relay import TokenRelay


def create_app() -> Starlette:
    load_env()
    debug_enabled = setup_logging()
    validate_env()

    client = build_http_client(
        timeout=get_env_float("RELAY_TIMEOUT", 30.0),
        debug_enabled=debug_enabled,
    )
    relay = TokenRelay(
        spotify_client_id=os.getenv("SPOTIFY_CLIENT_ID", "").strip(),
        spotify_client_secret=os.getenv("SPOTIFY_CLIENT_SECRET", "").strip(),
        redirect_uri=os.getenv("SPOTIFY_REDIRECT_URI", "").strip(),
        relay_key=os.getenv("RELAY_ACCESS_KEY", "").strip(),
        cors_origins=parse_csv_env("RELAY_CORS_ORIGINS"),
        api_base_url=os.getenv("SPOTIFY_API_URL", SPOTIFY_API_URL).strip() or SPOTIFY_API_URL,
        client=client,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        LOGGER.info("Spotify relay ready (cors=%s)", sorted(relay.cors_origins))
        try:
            yield
        finally:
            await client.aclose()

    app = Starlette(routes=relay.routes(), lifespan=lifespan)
    app.state.relay = relay
    return app


def main() -> None:
    import uvicorn

    host = os.getenv("RELAY_HOST", "127.0.0.1")
    port = get_env_int("RELAY_PORT", 8000)
    app = create_app()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
