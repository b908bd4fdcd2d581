from __future__ import annotations

from dataclasses import dataclass, field

from .constants import NOT_PLAYING
from .errors import MalformedTokenResponseError


@dataclass
class AuthorizationState:
    access_token: str | None = None
    refresh_token: str | None = None
    expiry: int | None = None
    csrf_state: str | None = None

    def has_valid_access_token(self, now_ms: int) -> bool:
        if not self.access_token or self.expiry is None:
            return False
        return self.expiry > now_ms

    def is_empty(self) -> bool:
        return not any((self.access_token, self.refresh_token, self.expiry, self.csrf_state))


@dataclass
class TokenResponse:
    access_token: str
    expires_in: int
    refresh_token: str | None = None
    scope: str = ""
    token_type: str = "Bearer"

    def expiry_from(self, now_ms: int) -> int:
        return now_ms + self.expires_in * 1000

    @classmethod
    def from_payload(cls, payload: dict) -> "TokenResponse":
        if not isinstance(payload, dict):
            raise MalformedTokenResponseError("Token response must be a JSON object.")

        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        expires_in = payload.get("expires_in")
        scope = payload.get("scope", "")
        token_type = payload.get("token_type", "Bearer")

        if not isinstance(access_token, str) or not access_token:
            raise MalformedTokenResponseError("Token response missing access_token.", payload)
        if isinstance(expires_in, bool) or not isinstance(expires_in, int):
            raise MalformedTokenResponseError("Token response missing expires_in.", payload)
        if expires_in <= 0:
            raise MalformedTokenResponseError("Token response expires_in must be positive.", payload)
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise MalformedTokenResponseError("Token response refresh_token must be a string.", payload)

        return cls(
            access_token=access_token,
            expires_in=expires_in,
            refresh_token=refresh_token or None,
            scope=scope if isinstance(scope, str) else "",
            token_type=token_type if isinstance(token_type, str) else "Bearer",
        )


@dataclass(frozen=True)
class AuthStatus:
    authenticated: bool
    loading: bool = False


@dataclass
class Overview:
    top_tracks: list[dict] = field(default_factory=list)
    currently_playing: dict = field(default_factory=lambda: dict(NOT_PLAYING))
    followed_artists: list[dict] = field(default_factory=list)

    @classmethod
    def from_payloads(cls, top_tracks: dict, currently_playing: dict, followed_artists: dict) -> "Overview":
        return cls(
            top_tracks=list(top_tracks.get("items") or []),
            currently_playing=normalize_now_playing(currently_playing),
            followed_artists=list((followed_artists.get("artists") or {}).get("items") or []),
        )


def normalize_now_playing(payload: dict | None) -> dict:
    if payload and payload.get("item"):
        return payload
    return dict(NOT_PLAYING)
