"""
Pytest configuration
Provides a cooperative in-memory Twitch API and wired-up service fixtures
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

from alveus_eventsub.core.errors import EventSubError
from alveus_eventsub.models import TwitchConfig
from alveus_eventsub.services import (
    CredentialCache,
    ReconcileResult,
    SubscriptionReconciler,
    TokenRetryPolicy,
    TwitchEventSubClient,
)

CLIENT_ID = "test-client-id"
CLIENT_SECRET = "test-client-secret"
CALLBACK_URL = "https://example.test/api/twitch/webhook"
EVENTSUB_SECRET = "s3cr3t-s3cr3t"


class FakeTwitch:
    """Minimal stand-in for id.twitch.tv and the Helix EventSub/Streams endpoints."""

    def __init__(self) -> None:
        self.subscriptions: dict[str, dict] = {}
        self.streams: list[dict] = []
        self.page_size = 100

        self.tokens_issued: list[str] = []
        self.valid_tokens: set[str] = set()
        self.token_status = 200
        self.always_forbid = False

        self.new_status = "webhook_callback_verification_pending"
        self.reject_create_types: set[str] = set()
        self.forbid_create_broadcasters: set[str] = set()
        self.reject_delete_ids: set[str] = set()
        self.list_override: object | None = None
        self.list_status = 200

        self.requests: list[httpx.Request] = []
        self.created: list[dict] = []
        self.deleted: list[str] = []
        self._seq = 0

    # --- helpers used by tests ---

    def _next_timestamp(self) -> str:
        self._seq += 1
        return f"2024-05-01T12:{self._seq // 60:02d}:{self._seq % 60:02d}.123456789Z"

    def add_subscription(
        self, type: str, broadcaster_user_id: str, *, status: str = "enabled"
    ) -> str:
        self._seq += 1
        sub_id = f"sub-{self._seq:04d}"
        self.subscriptions[sub_id] = {
            "id": sub_id,
            "status": status,
            "type": type,
            "version": "1",
            "condition": {"broadcaster_user_id": broadcaster_user_id},
            "created_at": self._next_timestamp(),
            "transport": {"method": "webhook", "callback": CALLBACK_URL},
            "cost": 1,
        }
        return sub_id

    def identities(self) -> list[tuple[str, str]]:
        return sorted(
            (s["type"], s["condition"]["broadcaster_user_id"])
            for s in self.subscriptions.values()
        )

    def expire_tokens(self) -> None:
        self.valid_tokens.clear()

    def helix_requests(self, method: str | None = None, path: str | None = None) -> list:
        return [
            r
            for r in self.requests
            if r.url.host == "api.twitch.tv"
            and (method is None or r.method == method)
            and (path is None or r.url.path.endswith(path))
        ]

    # --- transport ---

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "id.twitch.tv":
            return self._token(request)

        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if (
            self.always_forbid
            or token not in self.valid_tokens
            or request.headers.get("Client-Id") != CLIENT_ID
        ):
            return httpx.Response(403, json={"error": "Forbidden", "status": 403})

        path = request.url.path
        if path == "/helix/eventsub/subscriptions":
            if request.method == "GET":
                return self._list(request)
            if request.method == "POST":
                return self._create(request)
            if request.method == "DELETE":
                return self._delete(request)
        if path == "/helix/streams" and request.method == "GET":
            return self._streams(request)
        return httpx.Response(404, json={"error": "Not Found", "status": 404})

    def _token(self, request: httpx.Request) -> httpx.Response:
        form = parse_qs(request.content.decode())
        if self.token_status != 200:
            return httpx.Response(self.token_status, json={"message": "invalid client"})
        if form.get("grant_type") != ["client_credentials"] or form.get("client_id") != [CLIENT_ID]:
            return httpx.Response(400, json={"message": "bad grant"})
        token = f"app-token-{len(self.tokens_issued) + 1}"
        self.tokens_issued.append(token)
        self.valid_tokens.add(token)
        return httpx.Response(
            200, json={"access_token": token, "expires_in": 5000000, "token_type": "bearer"}
        )

    def _list(self, request: httpx.Request) -> httpx.Response:
        if self.list_override is not None:
            return httpx.Response(self.list_status, json=self.list_override)

        subs = list(self.subscriptions.values())
        user_id = request.url.params.get("user_id")
        if user_id:
            subs = [s for s in subs if s["condition"]["broadcaster_user_id"] == user_id]

        start = int(request.url.params.get("after") or 0)
        page = subs[start : start + self.page_size]
        pagination = {}
        if start + self.page_size < len(subs):
            pagination["cursor"] = str(start + self.page_size)

        return httpx.Response(
            200,
            json={
                "total": len(subs),
                "data": page,
                "total_cost": sum(s["cost"] for s in subs),
                "max_total_cost": 10000,
                "pagination": pagination,
            },
        )

    def _create(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if body["condition"]["broadcaster_user_id"] in self.forbid_create_broadcasters:
            return httpx.Response(403, json={"error": "Forbidden", "status": 403})
        self.created.append(body)
        if body["type"] in self.reject_create_types:
            return httpx.Response(400, json={"error": "Bad Request", "message": "nope"})
        sub_id = self.add_subscription(
            body["type"], body["condition"]["broadcaster_user_id"], status=self.new_status
        )
        return httpx.Response(202, json={"data": [self.subscriptions[sub_id]], "total": 1})

    def _delete(self, request: httpx.Request) -> httpx.Response:
        sub_id = request.url.params.get("id")
        self.deleted.append(sub_id)
        if sub_id in self.reject_delete_ids:
            return httpx.Response(500, json={"error": "Internal Server Error"})
        if sub_id not in self.subscriptions:
            return httpx.Response(404, json={"error": "Not Found"})
        del self.subscriptions[sub_id]
        return httpx.Response(204)

    def _streams(self, request: httpx.Request) -> httpx.Response:
        ids = request.url.params.get_list("user_id")
        data = [s for s in self.streams if s["user_id"] in ids]
        return httpx.Response(200, json={"data": data, "pagination": {}})


class RecordingSink:
    def __init__(self) -> None:
        self.results: list[ReconcileResult] = []
        self.failures: list[EventSubError] = []

    async def record(self, result: ReconcileResult) -> None:
        self.results.append(result)

    async def record_failure(self, error: EventSubError) -> None:
        self.failures.append(error)


def make_stream(user_id: str, user_login: str, **overrides) -> dict:
    stream = {
        "id": f"stream-{user_id}",
        "user_id": user_id,
        "user_login": user_login,
        "user_name": user_login.capitalize(),
        "game_id": "509658",
        "game_name": "Animals, Aquariums, and Zoos",
        "type": "live",
        "title": "Sanctuary cams",
        "viewer_count": 1234,
        "started_at": "2024-05-01T10:00:00Z",
        "language": "en",
        "thumbnail_url": "https://static-cdn.jtvnw.net/previews/live_user_x-{width}x{height}.jpg",
        "tag_ids": [],
        "tags": ["English"],
        "is_mature": False,
    }
    stream.update(overrides)
    return stream


def make_config(channels: dict[str, tuple[str, dict]]) -> TwitchConfig:
    """Build a TwitchConfig from {name: (id, notifications)}."""
    return TwitchConfig.model_validate(
        {
            "channels": {
                name: {"id": channel_id, "label": name, "notifications": notifications}
                for name, (channel_id, notifications) in channels.items()
            }
        }
    )


@pytest.fixture
def fake_twitch() -> FakeTwitch:
    return FakeTwitch()


@pytest_asyncio.fixture
async def http(fake_twitch):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_twitch.handler)) as client:
        yield client


@pytest.fixture
def credentials(http) -> CredentialCache:
    return CredentialCache(http=http)


@pytest.fixture
def client(credentials, http) -> TwitchEventSubClient:
    return TwitchEventSubClient(credentials, CLIENT_ID, CLIENT_SECRET, http=http)


@pytest.fixture
def retry_policy(credentials) -> TokenRetryPolicy:
    return TokenRetryPolicy(credentials)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def reconciler(client, retry_policy, sink) -> SubscriptionReconciler:
    return SubscriptionReconciler(
        client, retry_policy, callback_url=CALLBACK_URL, secret=EVENTSUB_SECRET, sink=sink
    )
