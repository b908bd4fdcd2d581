from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .constants import CORS_ALLOW_HEADERS


def _allowed_origin(origin: str | None, allowed_origins: set[str]) -> str | None:
    if "*" in allowed_origins:
        return "*"
    if origin and origin in allowed_origins:
        return origin
    return None


def apply_cors_response(
    request: Request,
    response: Response,
    allowed_origins: set[str],
) -> Response:
    allow_origin = _allowed_origin(request.headers.get("origin"), allowed_origins)
    if allow_origin is not None:
        response.headers["Access-Control-Allow-Origin"] = allow_origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        if allow_origin != "*":
            response.headers["Vary"] = "Origin"
    return response


def cors_preflight_response(request: Request, allowed_origins: set[str]) -> Response:
    return apply_cors_response(request, Response(status_code=204), allowed_origins)


def cors_json_response(
    request: Request,
    allowed_origins: set[str],
    payload: dict,
    status_code: int = 200,
) -> Response:
    return apply_cors_response(
        request,
        JSONResponse(payload, status_code=status_code),
        allowed_origins,
    )


def cors_error_response(
    request: Request,
    allowed_origins: set[str],
    message: str,
    status_code: int,
) -> Response:
    return cors_json_response(request, allowed_origins, {"error": message}, status_code)
