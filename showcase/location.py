from __future__ import annotations

import webbrowser
from abc import ABC, abstractmethod


class Location(ABC):
    """The page the client is running on: its URL and how to leave it."""

    @property
    @abstractmethod
    def current_url(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def assign(self, url: str) -> None:
        """Navigate away to ``url``."""
        raise NotImplementedError

    @abstractmethod
    def replace(self, url: str) -> None:
        """Rewrite the current URL in place without a new history entry."""
        raise NotImplementedError


class MemoryLocation(Location):
    def __init__(self, url: str = "") -> None:
        self._url = url
        self.navigations: list[str] = []

    @property
    def current_url(self) -> str:
        return self._url

    def assign(self, url: str) -> None:
        self.navigations.append(url)

    def replace(self, url: str) -> None:
        self._url = url


class BrowserLocation(MemoryLocation):
    def assign(self, url: str) -> None:
        super().assign(url)
        webbrowser.open(url)
