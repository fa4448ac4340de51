"""Data models for Helix payloads and channel notification config."""

from .base import HelixModel, Pagination
from .stream import Stream, StreamsResponse
from .subscription import (
    Identity,
    Subscription,
    SubscriptionCondition,
    SubscriptionsResponse,
    SubscriptionTransport,
    parse_timestamp,
)
from .twitch_config import (
    EVENT_CHANNEL_UPDATE,
    EVENT_STREAM_ONLINE,
    NOTIFICATION_EVENT_TYPES,
    ChannelConfig,
    NotificationFlags,
    TwitchConfig,
)

__all__ = [
    "ChannelConfig",
    "EVENT_CHANNEL_UPDATE",
    "EVENT_STREAM_ONLINE",
    "HelixModel",
    "Identity",
    "NOTIFICATION_EVENT_TYPES",
    "NotificationFlags",
    "Pagination",
    "Stream",
    "StreamsResponse",
    "Subscription",
    "SubscriptionCondition",
    "SubscriptionTransport",
    "SubscriptionsResponse",
    "TwitchConfig",
    "parse_timestamp",
]
