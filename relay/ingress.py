from __future__ import annotations

import hmac

from starlette.requests import Request

from .constants import RELAY_KEY_HEADER


def extract_bearer_token(authorization_header: str | None) -> str | None:
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def is_authorized_caller(request: Request, relay_key: str, *, allow_bearer: bool) -> bool:
    """Check the pre-shared relay credential on an incoming request.

    The key normally travels in the ``apikey`` header. Token endpoints also
    accept it as the bearer token, since on those routes the Authorization
    header carries nothing else.
    """
    if not relay_key:
        return False

    candidate = request.headers.get(RELAY_KEY_HEADER)
    if not candidate and allow_bearer:
        candidate = extract_bearer_token(request.headers.get("authorization"))
    if not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), relay_key.encode("utf-8"))
