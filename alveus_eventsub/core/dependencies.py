"""Process-wide service wiring.

One ``CredentialCache`` lives for the whole process and is injected into the
Helix client, the retry policy and the reconciler.
"""

import logging

from ..repositories import TwitchConfigRepository
from ..services import (
    CredentialCache,
    ReconcileSink,
    SubscriptionReconciler,
    TokenRetryPolicy,
    TwitchEventSubClient,
)
from .config import get_settings

logger = logging.getLogger(__name__)

_credentials: CredentialCache | None = None
_twitch_api: TwitchEventSubClient | None = None


def get_credential_cache() -> CredentialCache:
    """Get the shared CredentialCache singleton."""
    global _credentials
    if _credentials is None:
        settings = get_settings()
        _credentials = CredentialCache(ttl=settings.token_ttl, timeout=settings.request_timeout)
    return _credentials


def get_twitch_api() -> TwitchEventSubClient:
    """Get the shared TwitchEventSubClient singleton."""
    global _twitch_api
    if _twitch_api is None:
        settings = get_settings()
        _twitch_api = TwitchEventSubClient(
            get_credential_cache(),
            settings.twitch_client_id,
            settings.twitch_client_secret,
            helix_base=settings.helix_base_url,
            timeout=settings.request_timeout,
        )
    return _twitch_api


def get_retry_policy() -> TokenRetryPolicy:
    return TokenRetryPolicy(get_credential_cache())


def get_reconciler(sink: ReconcileSink | None = None) -> SubscriptionReconciler:
    settings = get_settings()
    return SubscriptionReconciler(
        get_twitch_api(),
        get_retry_policy(),
        callback_url=settings.twitch_eventsub_callback,
        secret=settings.twitch_eventsub_secret,
        sink=sink,
    )


def get_config_repository() -> TwitchConfigRepository:
    return TwitchConfigRepository(get_settings().twitch_config_path)


async def close_services() -> None:
    """Close shared HTTP clients. Call on shutdown."""
    global _credentials, _twitch_api
    if _twitch_api is not None:
        await _twitch_api.close()
        _twitch_api = None
    if _credentials is not None:
        await _credentials.close()
        _credentials = None
