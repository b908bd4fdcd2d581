import pytest

from showcase.config import ShowcaseConfig
from showcase.location import MemoryLocation
from showcase.models import TokenResponse
from showcase.store import MemoryAuthorizationStore

REDIRECT_URI = "https://portfolio.example.com/spotify"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    @property
    def now_ms(self) -> int:
        return int(self.now * 1000)


class FakeRelay:
    """Stands in for RelayClient; records every token call."""

    def __init__(self) -> None:
        self.exchange_calls: list[str] = []
        self.refresh_calls: list[str] = []
        self.exchange_result: TokenResponse | Exception = TokenResponse(
            access_token="new-access",
            expires_in=3600,
            refresh_token="new-refresh",
        )
        self.refresh_result: TokenResponse | Exception = TokenResponse(
            access_token="refreshed-access",
            expires_in=3600,
        )

    async def exchange_code(self, code: str) -> TokenResponse:
        self.exchange_calls.append(code)
        if isinstance(self.exchange_result, Exception):
            raise self.exchange_result
        return self.exchange_result

    async def refresh(self, refresh_token: str) -> TokenResponse:
        self.refresh_calls.append(refresh_token)
        if isinstance(self.refresh_result, Exception):
            raise self.refresh_result
        return self.refresh_result

    @property
    def network_calls(self) -> int:
        return len(self.exchange_calls) + len(self.refresh_calls)


@pytest.fixture
def config() -> ShowcaseConfig:
    return ShowcaseConfig(
        client_id="spotify-client",
        redirect_uri=REDIRECT_URI,
        relay_url="https://relay.example.com/functions/v1/spotify-api",
        relay_key="relay-key",
    )


@pytest.fixture
def store() -> MemoryAuthorizationStore:
    return MemoryAuthorizationStore()


@pytest.fixture
def location() -> MemoryLocation:
    return MemoryLocation(REDIRECT_URI)


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
