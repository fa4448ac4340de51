"""Retry-once-on-403 policy shared by every Helix call."""

import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from ..core.errors import ExpiredAccessTokenError
from .credentials import CredentialCache

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class TokenRetryPolicy:
    """Invalidate cached credentials and retry exactly once on ExpiredAccessTokenError.

    A second 403 propagates to the caller unchanged.
    """

    def __init__(self, credentials: CredentialCache, provider: str = "twitch"):
        self.credentials = credentials
        self.provider = provider
        self.retries = 0

    async def run(
        self, operation: Callable[P, Awaitable[T]], *args: P.args, **kwargs: P.kwargs
    ) -> T:
        try:
            return await operation(*args, **kwargs)
        except ExpiredAccessTokenError:
            name = getattr(operation, "__name__", repr(operation))
            logger.warning(f"{name}: {self.provider} access token expired, refreshing and retrying")
            self.credentials.invalidate(self.provider)
            self.retries += 1
            return await operation(*args, **kwargs)
