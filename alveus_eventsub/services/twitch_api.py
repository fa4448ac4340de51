"""Twitch Helix EventSub client.

Every request is authorised with app access token headers from a shared
``CredentialCache``. A 403 is reported as ``ExpiredAccessTokenError`` and is
never retried here; wrap calls in ``TokenRetryPolicy`` for that.
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from ..core.config import HELIX_BASE
from ..core.errors import ExpiredAccessTokenError, RemoteRequestError, ResponseShapeError
from ..models import HelixModel, Pagination, StreamsResponse, SubscriptionsResponse
from .credentials import CredentialCache

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=HelixModel)

PROVIDER = "twitch"


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _response_body(response: httpx.Response) -> Any:
    """Best-effort decoded body for diagnostics."""
    try:
        return response.json()
    except ValueError:
        return response.text


class TwitchEventSubClient:
    """Typed wrapper over the Helix EventSub and Streams endpoints.

    Owns an httpx client unless one is passed in. Usable as an async
    context manager.
    """

    def __init__(
        self,
        credentials: CredentialCache,
        client_id: str,
        client_secret: str,
        *,
        helix_base: str = HELIX_BASE,
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ):
        self.credentials = credentials
        self.client_id = client_id
        self.client_secret = client_secret
        self.helix_base = helix_base.rstrip("/")

        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._owns_http = http is None

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "TwitchEventSubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _auth_headers(self) -> dict[str, str]:
        return await self.credentials.get_auth_headers(
            PROVIDER, self.client_id, self.client_secret
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = await self._auth_headers()
        try:
            response = await self._http.request(
                method,
                f"{self.helix_base}/{path}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise RemoteRequestError(f"Helix {method} /{path} timed out") from e
        except httpx.HTTPError as e:
            raise RemoteRequestError(f"Helix {method} /{path} failed: {e}") from e

        if response.status_code == 403:
            raise ExpiredAccessTokenError()
        return response

    async def _get_validated(self, path: str, params: Any, model: type[M], what: str) -> M:
        """GET *path* and parse the body into *model*."""
        response = await self._request("GET", path, params=params)

        if not _is_success(response.status_code):
            body = _response_body(response)
            logger.error(f"Could not get {what}: HTTP {response.status_code} {body!r}")
            raise RemoteRequestError(
                f"Could not get {what}!", status=response.status_code, body=body
            )

        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            payload = _response_body(response)
            logger.error(
                f"Unexpected {what} response ({e.error_count()} validation errors): {payload!r}"
            )
            raise ResponseShapeError(f"Malformed {what} response: {e}", payload=payload) from e

    # ------------------------------------------------------------------
    # EventSub subscriptions
    # ------------------------------------------------------------------

    async def list_subscriptions(self, after: str | None = None) -> SubscriptionsResponse:
        """Get one page of EventSub subscriptions; *after* is a pagination cursor."""
        params = {"after": after} if after else None
        return await self._get_validated(
            "eventsub/subscriptions", params, SubscriptionsResponse, "subscriptions"
        )

    async def list_subscriptions_for_user(self, user_id: str) -> SubscriptionsResponse:
        """Get subscriptions whose condition references *user_id*."""
        return await self._get_validated(
            "eventsub/subscriptions",
            {"user_id": user_id},
            SubscriptionsResponse,
            "subscriptions for user",
        )

    async def create_subscription(
        self, type: str, user_id: str, callback: str, secret: str
    ) -> bool:
        """Request a webhook subscription. True iff Twitch accepted it (usually 202)."""
        response = await self._request(
            "POST",
            "eventsub/subscriptions",
            json={
                "type": type,
                "version": "1",
                "condition": {"broadcaster_user_id": user_id},
                "transport": {
                    "method": "webhook",
                    "callback": callback,
                    "secret": secret,
                },
            },
        )
        if not _is_success(response.status_code):
            logger.warning(
                f"Create {type} for {user_id} rejected: HTTP {response.status_code} "
                f"{_response_body(response)!r}"
            )
            return False
        return True

    async def remove_subscription(self, id: str, *, missing_ok: bool = False) -> bool:
        """Delete a subscription by id. True iff Twitch confirmed it (usually 204).

        With ``missing_ok`` a 404 also counts as removed: the subscription is
        already gone.
        """
        response = await self._request("DELETE", "eventsub/subscriptions", params={"id": id})
        if missing_ok and response.status_code == 404:
            logger.debug(f"Subscription {id} already removed")
            return True
        if not _is_success(response.status_code):
            logger.warning(
                f"Delete subscription {id} rejected: HTTP {response.status_code} "
                f"{_response_body(response)!r}"
            )
            return False
        return True

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def get_streams_for_channels(self, channel_ids: list[str]) -> StreamsResponse:
        """Get live stream info for a batch of channel ids in one request."""
        if not channel_ids:
            return StreamsResponse(data=[], pagination=Pagination())
        return await self._get_validated(
            "streams",
            [("user_id", channel_id) for channel_id in channel_ids],
            StreamsResponse,
            "streams",
        )
