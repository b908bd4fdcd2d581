import logging

import pytest
from starlette.testclient import TestClient

import server
from relay.env import setup_logging, validate_env


def _set_relay_env(monkeypatch) -> None:
    monkeypatch.setattr(server, "load_env", lambda: None)
    monkeypatch.setattr(server, "setup_logging", lambda: False)
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "spotify-client")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "spotify-secret")
    monkeypatch.setenv("SPOTIFY_REDIRECT_URI", "https://portfolio.example.com/spotify")
    monkeypatch.setenv("RELAY_ACCESS_KEY", "relay-key")
    monkeypatch.delenv("RELAY_CORS_ORIGINS", raising=False)
    monkeypatch.delenv("SPOTIFY_API_URL", raising=False)


def test_health_returns_200(monkeypatch) -> None:
    _set_relay_env(monkeypatch)

    with TestClient(server.create_app()) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": "0.1.0", "service": "spotify-relay"}


def test_create_app_reads_relay_settings(monkeypatch) -> None:
    _set_relay_env(monkeypatch)
    monkeypatch.setenv("RELAY_CORS_ORIGINS", "https://a.example, https://b.example")

    app = server.create_app()
    relay = app.state.relay

    assert relay.relay_key == "relay-key"
    assert relay.credentials.client_id == "spotify-client"
    assert relay.credentials.redirect_uri == "https://portfolio.example.com/spotify"
    assert relay.cors_origins == {"https://a.example", "https://b.example"}
    assert relay.api_base_url == "https://api.spotify.com/v1"


def test_validate_env_missing_vars(monkeypatch) -> None:
    for key in ("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET", "SPOTIFY_REDIRECT_URI", "RELAY_ACCESS_KEY"):
        monkeypatch.delenv(key, raising=False)

    with pytest.raises(RuntimeError) as excinfo:
        validate_env()

    message = str(excinfo.value)
    assert "SPOTIFY_CLIENT_ID" in message
    assert "SPOTIFY_CLIENT_SECRET" in message
    assert "SPOTIFY_REDIRECT_URI" in message
    assert "RELAY_ACCESS_KEY" in message


def test_validate_env_rejects_bad_redirect_uri(monkeypatch) -> None:
    _set_relay_env(monkeypatch)
    monkeypatch.setenv("SPOTIFY_REDIRECT_URI", "not a url")

    with pytest.raises(RuntimeError, match="SPOTIFY_REDIRECT_URI"):
        validate_env()


def test_main_runs_uvicorn_with_local_defaults(monkeypatch) -> None:
    calls: list[dict] = []
    sentinel = object()
    monkeypatch.setattr(server, "create_app", lambda: sentinel)
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append({"app": app, **kwargs}))
    monkeypatch.delenv("RELAY_HOST", raising=False)
    monkeypatch.delenv("RELAY_PORT", raising=False)

    server.main()

    assert calls == [{"app": sentinel, "host": "127.0.0.1", "port": 8000}]


def test_main_reads_host_and_port_from_env(monkeypatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(server, "create_app", lambda: "app")
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setenv("RELAY_HOST", "0.0.0.0")
    monkeypatch.setenv("RELAY_PORT", "9100")

    server.main()

    assert calls == [{"host": "0.0.0.0", "port": 9100}]


def test_setup_logging_reads_given_key(monkeypatch) -> None:
    logger = logging.getLogger("showcase.test")
    logger.setLevel(logging.WARNING)

    monkeypatch.setenv("SHOWCASE_DEBUG", "0")
    assert setup_logging("SHOWCASE_DEBUG", logger) is False
    assert logger.level == logging.WARNING

    monkeypatch.setenv("SHOWCASE_DEBUG", "1")
    assert setup_logging("SHOWCASE_DEBUG", logger) is True
    assert logger.level == logging.INFO
