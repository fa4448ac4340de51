"""App access token cache.

Holds one client-credentials header set per provider for the lifetime of the
process. Tokens are not tracked for expiry: a 403 from Helix is the signal
that the cached headers are stale (see ``TokenRetryPolicy``). Setting *ttl*
adds proactive expiry on top of that.

There is no lock around acquisition. Two callers that both see a missing or
invalidated entry will both fetch a token; the last one written wins. The
client-credentials grant is idempotent per credentials, so the only cost is a
redundant request.
"""

import logging
from collections.abc import MutableMapping

import httpx
from cachetools import TTLCache  # type: ignore[import-untyped]

from ..core.config import OAUTH_BASE
from ..core.errors import AuthAcquisitionError, ConfigurationError

logger = logging.getLogger(__name__)

TOKEN_URLS: dict[str, str] = {
    "twitch": f"{OAUTH_BASE}/token",
}


class CredentialCache:
    """Per-provider cache of ``{"Client-Id", "Authorization"}`` headers."""

    def __init__(
        self,
        *,
        ttl: float | None = None,
        timeout: float = 10.0,
        token_urls: dict[str, str] | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self._headers: MutableMapping[str, dict[str, str]]
        if ttl is None:
            self._headers = {}
        else:
            self._headers = TTLCache(maxsize=16, ttl=ttl)
        self.ttl = ttl
        self.token_urls = dict(token_urls or TOKEN_URLS)

        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._owns_http = http is None

        # Observability counters
        self.acquisitions = 0
        self.invalidations = 0

    async def close(self) -> None:
        """Close the HTTP client if this cache created it."""
        if self._owns_http:
            await self._http.aclose()

    def is_cached(self, provider: str) -> bool:
        return provider in self._headers

    async def get_auth_headers(
        self, provider: str, client_id: str | None, client_secret: str | None
    ) -> dict[str, str]:
        """Return cached auth headers for *provider*, acquiring a token if needed."""
        cached = self._headers.get(provider)
        if cached is not None:
            return dict(cached)

        if not client_id or not client_secret:
            raise ConfigurationError(
                f"{provider}: client id or client secret missing, cannot request an app token"
            )

        access_token = await self.get_access_token(provider, client_id, client_secret)
        headers = {
            "Client-Id": client_id,
            "Authorization": f"Bearer {access_token}",
        }
        self._headers[provider] = headers
        self.acquisitions += 1
        logger.info(f"Obtained {provider} app access token")
        return dict(headers)

    def invalidate(self, provider: str) -> None:
        """Drop the cached headers so the next call re-acquires a token."""
        self._headers.pop(provider, None)
        self.invalidations += 1
        logger.debug(f"Invalidated cached {provider} credentials")

    async def get_access_token(self, provider: str, client_id: str, client_secret: str) -> str:
        """Perform a client-credentials grant and return the raw access token."""
        token_url = self.token_urls.get(provider)
        if token_url is None:
            raise ConfigurationError(f"No OAuth token endpoint known for provider '{provider}'")

        try:
            response = await self._http.post(
                token_url,
                data={
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.TimeoutException as e:
            raise AuthAcquisitionError(f"{provider}: timeout while requesting app token") from e
        except httpx.HTTPError as e:
            raise AuthAcquisitionError(f"{provider}: app token request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Failed to get {provider} app token: {response.status_code}")
            logger.debug(f"Response: {response.text}")
            raise AuthAcquisitionError(
                f"{provider}: could not obtain OAuth access token (HTTP {response.status_code})"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AuthAcquisitionError(f"{provider}: token endpoint returned invalid JSON") from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise AuthAcquisitionError(f"{provider}: no access_token in token response")
        return access_token
