from __future__ import annotations

import os
from dataclasses import dataclass, field

from pydantic import AnyHttpUrl, ValidationError

from .constants import DEFAULT_SCOPES, SPOTIFY_API_URL


def _http_url(key: str, value: str) -> str:
    try:
        AnyHttpUrl(value)
    except ValidationError as error:
        raise RuntimeError(f"{key} must be a valid http(s) URL.") from error
    return value


@dataclass
class ShowcaseConfig:
    client_id: str
    redirect_uri: str
    relay_url: str
    relay_key: str
    scopes: tuple[str, ...] = field(default=DEFAULT_SCOPES)
    api_base_url: str = SPOTIFY_API_URL
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.client_id:
            raise RuntimeError("client_id is required.")
        if not self.relay_key:
            raise RuntimeError("relay_key is required.")
        if not self.scopes:
            raise RuntimeError("At least one scope is required.")
        self.scopes = tuple(self.scopes)
        _http_url("redirect_uri", self.redirect_uri)
        _http_url("relay_url", self.relay_url)
        _http_url("api_base_url", self.api_base_url)
        self.relay_url = self.relay_url.rstrip("/")
        self.api_base_url = self.api_base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> "ShowcaseConfig":
        required = (
            "SPOTIFY_CLIENT_ID",
            "SPOTIFY_REDIRECT_URI",
            "RELAY_URL",
            "RELAY_ACCESS_KEY",
        )
        missing = [key for key in required if not os.getenv(key, "").strip()]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables for the client: {', '.join(missing)}"
            )

        scopes = tuple(os.getenv("SPOTIFY_SCOPES", "").split()) or DEFAULT_SCOPES
        raw_timeout = os.getenv("SHOWCASE_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else 30.0
        except ValueError:
            raise RuntimeError("SHOWCASE_TIMEOUT must be a number.")

        return cls(
            client_id=os.getenv("SPOTIFY_CLIENT_ID", "").strip(),
            redirect_uri=os.getenv("SPOTIFY_REDIRECT_URI", "").strip(),
            relay_url=os.getenv("RELAY_URL", "").strip(),
            relay_key=os.getenv("RELAY_ACCESS_KEY", "").strip(),
            scopes=scopes,
            api_base_url=os.getenv("SPOTIFY_API_URL", "").strip() or SPOTIFY_API_URL,
            timeout=timeout,
        )
