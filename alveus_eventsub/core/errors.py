"""Error taxonomy for the EventSub subscription manager."""

from __future__ import annotations

from typing import Any


class EventSubError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(EventSubError):
    """Required credentials or settings are missing or invalid. Not retried."""


class AuthAcquisitionError(EventSubError):
    """The OAuth token endpoint did not yield a usable access token."""


class ExpiredAccessTokenError(EventSubError):
    """Helix answered 403: the cached auth headers are stale."""

    def __init__(self, message: str = "Twitch API: access token rejected (403)") -> None:
        super().__init__(message)


class ResponseShapeError(EventSubError):
    """A response body failed schema validation and must not be trusted."""

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class RemoteRequestError(EventSubError):
    """Any other failed Helix request (non-2xx status, timeout, transport error)."""

    def __init__(self, message: str, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:
        # Transport errors and 5xx are worth another attempt on the next pass
        return self.status is None or self.status >= 500
