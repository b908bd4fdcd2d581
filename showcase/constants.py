from __future__ import annotations

import logging

from relay.constants import NOT_PLAYING, SPOTIFY_API_URL

LOGGER = logging.getLogger("showcase")

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"

DEFAULT_SCOPES = (
    "user-read-private",
    "user-read-email",
    "user-top-read",
    "user-read-currently-playing",
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-follow-read",
)

ACCESS_TOKEN_KEY = "spotify_access_token"
REFRESH_TOKEN_KEY = "spotify_refresh_token"
TOKEN_EXPIRY_KEY = "spotify_token_expiry"
AUTH_STATE_KEY = "spotify_auth_state"
STORE_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TOKEN_EXPIRY_KEY, AUTH_STATE_KEY)

OAUTH_CALLBACK_PARAMS = ("code", "state", "error", "error_description")

POLL_INTERVAL_SECONDS = 30.0
PLAYBACK_REFRESH_DELAY_SECONDS = 1.0
