from __future__ import annotations

import asyncio
import hmac
import secrets
import time
from collections.abc import Callable

from .config import ShowcaseConfig
from .constants import AUTH_STATE_KEY, LOGGER, OAUTH_CALLBACK_PARAMS
from .errors import (
    AuthenticationMissingError,
    CsrfStateMismatchError,
    TokenExchangeError,
    TokenRefreshError,
)
from .location import Location
from .models import AuthorizationState, AuthStatus
from .relay_client import RelayClient
from .resource_client import ResourceClient, SpotifyResourceClient
from .store import AuthorizationStore
from .urls import build_authorization_url, query_param, strip_query_params


class AuthStateManager:
    """Owns the client's side of the Spotify authorization-code flow.

    One instance corresponds to one page load. ``get_status`` runs the check
    sequence the first time it is awaited and every later caller shares that
    result:

    1. a stored access token that has not expired is trusted as-is;
    2. otherwise an authorization ``code`` on the current URL is removed from
       the URL, its ``state`` is checked against the one saved by ``login``,
       and the code is exchanged through the relay;
    3. otherwise a stored refresh token is traded for a new access token.

    Any failed exchange or refresh, and any callback whose state does not
    match, wipes all persisted fields.
    """

    def __init__(
        self,
        config: ShowcaseConfig,
        store: AuthorizationStore,
        relay: RelayClient,
        location: Location,
        *,
        clock: Callable[[], float] = time.time,
        resource_client_factory: Callable[[str], ResourceClient] | None = None,
    ) -> None:
        self.config = config
        self._store = store
        self._relay = relay
        self._location = location
        self._clock = clock
        self._resource_client_factory = resource_client_factory
        self._status = AuthStatus(authenticated=False, loading=True)
        self._check_task: asyncio.Task | None = None

    @property
    def status(self) -> AuthStatus:
        return self._status

    async def get_status(self) -> AuthStatus:
        if self._check_task is None:
            self._check_task = asyncio.ensure_future(self._check())
        await self._check_task
        return self._status

    async def login(self) -> None:
        state = secrets.token_urlsafe(16)
        await self._store.set(AUTH_STATE_KEY, state)
        url = build_authorization_url(
            client_id=self.config.client_id,
            redirect_uri=self.config.redirect_uri,
            scopes=self.config.scopes,
            state=state,
        )
        LOGGER.info("Redirecting to Spotify authorization")
        self._location.assign(url)

    async def logout(self) -> None:
        await self._store.clear()
        self._status = AuthStatus(authenticated=False, loading=False)
        LOGGER.info("Logged out of Spotify")

    async def access_token(self) -> str:
        state = await self._store.load()
        if not state.access_token:
            raise AuthenticationMissingError()
        return state.access_token

    async def resource_client(self) -> ResourceClient:
        token = await self.access_token()
        if self._resource_client_factory is not None:
            return self._resource_client_factory(token)
        return SpotifyResourceClient(
            token,
            base_url=self.config.api_base_url,
            timeout=self.config.timeout,
        )

    # -- check sequence --------------------------------------------------------

    async def _check(self) -> AuthStatus:
        state = await self._store.load()
        if state.has_valid_access_token(self._now_ms()):
            return self._resolve(True)

        url = self._location.current_url
        code = query_param(url, "code")
        if code:
            self._location.replace(strip_query_params(url, OAUTH_CALLBACK_PARAMS))
            authenticated = await self._complete_callback(code, query_param(url, "state"), state)
            return self._resolve(authenticated)

        error = query_param(url, "error")
        if error:
            self._location.replace(strip_query_params(url, OAUTH_CALLBACK_PARAMS))
            LOGGER.warning("Spotify authorization was not granted: %s", error)
            await self._store.clear()
            return self._resolve(False)

        if state.refresh_token:
            return self._resolve(await self._refresh(state.refresh_token))

        return self._resolve(False)

    async def _complete_callback(
        self,
        code: str,
        returned_state: str | None,
        state: AuthorizationState,
    ) -> bool:
        try:
            self._verify_csrf_state(returned_state, state.csrf_state)
            tokens = await self._relay.exchange_code(code)
        except (CsrfStateMismatchError, TokenExchangeError) as error:
            LOGGER.warning("Authorization callback rejected: %s", error)
            await self._store.clear()
            return False

        await self._store.clear()
        await self._store.save_tokens(
            tokens.access_token,
            tokens.expiry_from(self._now_ms()),
            tokens.refresh_token,
        )
        LOGGER.info("Spotify authorization completed")
        return True

    async def _refresh(self, refresh_token: str) -> bool:
        try:
            tokens = await self._relay.refresh(refresh_token)
        except TokenRefreshError as error:
            LOGGER.warning("Token refresh failed, signing out: %s", error)
            await self._store.clear()
            return False

        await self._store.save_tokens(
            tokens.access_token,
            tokens.expiry_from(self._now_ms()),
            tokens.refresh_token,
        )
        LOGGER.info("Spotify access token refreshed")
        return True

    @staticmethod
    def _verify_csrf_state(returned_state: str | None, expected_state: str | None) -> None:
        if not returned_state or not expected_state:
            raise CsrfStateMismatchError("Authorization callback is missing its state.")
        if not hmac.compare_digest(returned_state.encode("utf-8"), expected_state.encode("utf-8")):
            raise CsrfStateMismatchError()

    def _resolve(self, authenticated: bool) -> AuthStatus:
        self._status = AuthStatus(authenticated=authenticated, loading=False)
        return self._status

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)
