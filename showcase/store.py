from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from .constants import (
    ACCESS_TOKEN_KEY,
    AUTH_STATE_KEY,
    REFRESH_TOKEN_KEY,
    STORE_KEYS,
    TOKEN_EXPIRY_KEY,
)
from .models import AuthorizationState


class AuthorizationStore(ABC):
    """Durable string key-value storage for the client's authorization state.

    Only the four keys in ``STORE_KEYS`` are ever written. ``load`` and
    ``save_tokens`` work on the typed view so callers never touch raw keys.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def clear(self) -> None:
        for key in STORE_KEYS:
            await self.delete(key)

    async def load(self) -> AuthorizationState:
        raw_expiry = await self.get(TOKEN_EXPIRY_KEY)
        try:
            expiry = int(raw_expiry) if raw_expiry is not None else None
        except ValueError:
            expiry = None
        return AuthorizationState(
            access_token=await self.get(ACCESS_TOKEN_KEY),
            refresh_token=await self.get(REFRESH_TOKEN_KEY),
            expiry=expiry,
            csrf_state=await self.get(AUTH_STATE_KEY),
        )

    async def save_tokens(
        self,
        access_token: str,
        expiry: int,
        refresh_token: str | None = None,
    ) -> None:
        await self.set(ACCESS_TOKEN_KEY, access_token)
        await self.set(TOKEN_EXPIRY_KEY, str(expiry))
        if refresh_token:
            await self.set(REFRESH_TOKEN_KEY, refresh_token)


class MemoryAuthorizationStore(AuthorizationStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._values)


class FileAuthorizationStore(AuthorizationStore):
    def __init__(self, path: str | Path = ".spotify_auth.json") -> None:
        self._path = Path(path)

    async def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    async def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        self._write_all(values)

    async def delete(self, key: str) -> None:
        values = self._read_all()
        if key not in values:
            return
        values.pop(key)
        self._write_all(values)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise RuntimeError("Authorization store file is invalid; expected top-level JSON object.")
        return {str(key): str(value) for key, value in raw.items()}

    def _write_all(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
