from __future__ import annotations

import base64
from dataclasses import dataclass

import httpx

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


class TokenRequestError(RuntimeError):
    """Spotify's token endpoint rejected an exchange or refresh.

    ``payload`` is the provider's error body, kept verbatim so the relay can
    hand it back to the caller unchanged.
    """

    def __init__(self, status_code: int, payload: dict) -> None:
        description = payload.get("error_description") or payload.get("error") or "unknown error"
        super().__init__(f"Token request failed with status {status_code}: {description}")
        self.status_code = status_code
        self.payload = payload


@dataclass
class ClientCredentials:
    client_id: str
    client_secret: str
    redirect_uri: str

    def basic_authorization(self) -> str:
        raw = f"{self.client_id}:{self.client_secret}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"


def _error_payload(response: httpx.Response) -> dict:
    try:
        payload = response.json()
    except ValueError:
        return {"error": response.text or f"HTTP {response.status_code}"}
    if not isinstance(payload, dict):
        return {"error": payload}
    return payload


async def _token_request(
    credentials: ClientCredentials,
    form: dict[str, str],
    *,
    client: httpx.AsyncClient | None = None,
    token_url: str = SPOTIFY_TOKEN_URL,
) -> dict:
    own_client = client is None
    http_client = client or httpx.AsyncClient()

    try:
        response = await http_client.post(
            token_url,
            data=form,
            headers={"Authorization": credentials.basic_authorization()},
        )
    finally:
        if own_client:
            await http_client.aclose()

    if response.is_error:
        raise TokenRequestError(response.status_code, _error_payload(response))

    try:
        payload = response.json()
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        raise TokenRequestError(
            502,
            {
                "error": "invalid_response",
                "error_description": "Token endpoint returned a non-JSON body",
            },
        )
    return payload


async def exchange_code(
    credentials: ClientCredentials,
    code: str,
    *,
    client: httpx.AsyncClient | None = None,
    token_url: str = SPOTIFY_TOKEN_URL,
) -> dict:
    return await _token_request(
        credentials,
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": credentials.redirect_uri,
        },
        client=client,
        token_url=token_url,
    )


async def refresh_token(
    credentials: ClientCredentials,
    refresh_token: str,
    *,
    client: httpx.AsyncClient | None = None,
    token_url: str = SPOTIFY_TOKEN_URL,
) -> dict:
    return await _token_request(
        credentials,
        {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        },
        client=client,
        token_url=token_url,
    )
