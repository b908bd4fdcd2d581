from __future__ import annotations

import logging

LOGGER = logging.getLogger("relay")
APP_VERSION = "0.1.0"
SERVICE_NAME = "spotify-relay"

DEFAULT_CORS_ORIGINS = {"*"}
CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
RELAY_KEY_HEADER = "apikey"

TOP_TRACKS_PARAMS = {"limit": 10, "time_range": "medium_term"}
FOLLOWED_ARTISTS_PARAMS = {"type": "artist", "limit": 20}

SPOTIFY_API_URL = "https://api.spotify.com/v1"
NOT_PLAYING = {"is_playing": False}
