from __future__ import annotations


class ShowcaseError(RuntimeError):
    pass


class AuthenticationMissingError(ShowcaseError):
    def __init__(self, message: str = "Not authenticated with Spotify") -> None:
        super().__init__(message)


class TokenExchangeError(ShowcaseError):
    pass


class TokenRefreshError(ShowcaseError):
    pass


class CsrfStateMismatchError(ShowcaseError):
    def __init__(self, message: str = "Authorization callback state does not match.") -> None:
        super().__init__(message)


class UpstreamApiError(ShowcaseError):
    """Non-2xx answer from Spotify or from the relay in front of it."""

    def __init__(self, status_code: int, message: str, payload: dict | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}

    @property
    def token_expired(self) -> bool:
        return self.status_code == 401


class MalformedTokenResponseError(UpstreamApiError):
    def __init__(self, message: str, payload: dict | None = None) -> None:
        super().__init__(502, message, payload)


class NetworkError(ShowcaseError):
    pass
