"""Data models for Helix EventSub subscription payloads."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from pydantic import field_validator

from .base import HelixModel, Pagination

# (event type, broadcaster user id)
Identity = tuple[str, str]

# Twitch timestamps may carry nanoseconds; datetime holds exactly six fraction digits
_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    """Parse a Helix RFC3339 timestamp such as 2019-11-16T10:11:12.634234626Z."""
    normalized = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip())
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SubscriptionCondition(HelixModel):
    broadcaster_user_id: str


class SubscriptionTransport(HelixModel):
    method: str
    callback: str | None = None


class Subscription(HelixModel):
    """A single EventSub subscription as reported by Twitch."""

    id: str
    status: str
    type: str
    version: str
    condition: SubscriptionCondition
    created_at: str
    transport: SubscriptionTransport
    cost: float

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: str) -> str:
        parse_timestamp(v)
        return v

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.created_at)

    @property
    def identity(self) -> Identity:
        """Logical identity used for reconciliation."""
        return (self.type, self.condition.broadcaster_user_id)


class SubscriptionsResponse(HelixModel):
    """Body of GET /eventsub/subscriptions."""

    total: int
    data: list[Subscription]
    max_total_cost: float
    total_cost: float
    pagination: Pagination
