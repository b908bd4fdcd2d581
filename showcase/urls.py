from __future__ import annotations

import urllib.parse
from collections.abc import Iterable

from .constants import SPOTIFY_AUTHORIZE_URL


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: Iterable[str],
    state: str,
    *,
    authorize_url: str = SPOTIFY_AUTHORIZE_URL,
) -> str:
    query = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "state": state,
        "scope": " ".join(scopes),
    }
    return f"{authorize_url}?{urllib.parse.urlencode(query)}"


def query_param(url: str, name: str) -> str | None:
    values = urllib.parse.parse_qs(urllib.parse.urlparse(url).query).get(name)
    if not values:
        return None
    return values[0]


def strip_query_params(url: str, names: Iterable[str]) -> str:
    parsed = urllib.parse.urlparse(url)
    drop = set(names)
    kept = [
        (key, value)
        for key, value in urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
        if key not in drop
    ]
    new_query = urllib.parse.urlencode(kept)
    return urllib.parse.urlunparse(parsed._replace(query=new_query))
