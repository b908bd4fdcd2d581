from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import AnyHttpUrl, ValidationError

from .constants import LOGGER


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_csv_env(key: str) -> set[str]:
    raw = os.getenv(key, "")
    if not raw.strip():
        return set()
    return {item.strip() for item in raw.split(",") if item.strip()}


def get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number.")


def get_env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer value.")


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    from dotenv import load_dotenv

    load_dotenv(env_path, override=True)


def validate_http_url(key: str, value: str) -> str:
    try:
        return str(AnyHttpUrl(value))
    except ValidationError as error:
        raise RuntimeError(f"{key} must be a valid http(s) URL.") from error


def validate_env() -> None:
    required = (
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
        "SPOTIFY_REDIRECT_URI",
        "RELAY_ACCESS_KEY",
    )
    missing = [key for key in required if not os.getenv(key, "").strip()]
    if missing:
        raise RuntimeError(
            f"Missing required environment variables for the relay: {', '.join(missing)}"
        )

    validate_http_url("SPOTIFY_REDIRECT_URI", os.getenv("SPOTIFY_REDIRECT_URI", "").strip())

    api_url = os.getenv("SPOTIFY_API_URL", "").strip()
    if api_url:
        validate_http_url("SPOTIFY_API_URL", api_url)

    if "*" in parse_csv_env("RELAY_CORS_ORIGINS") and len(parse_csv_env("RELAY_CORS_ORIGINS")) > 1:
        LOGGER.warning("RELAY_CORS_ORIGINS contains '*'; other origins are ignored.")


def setup_logging(env_key: str = "RELAY_DEBUG", logger: logging.Logger | None = None) -> bool:
    debug_enabled = is_truthy(os.getenv(env_key, "1"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        (logger or LOGGER).setLevel(logging.INFO)
    return debug_enabled
