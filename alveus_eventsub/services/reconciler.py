"""Converge remote EventSub subscriptions toward the channel notification config.

A pass is read-before-write: every page of subscriptions is fetched first,
then creates and deletes are computed and issued concurrently. Individual
create/delete failures are collected in the result; nothing already applied
is rolled back.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from ..core.config import ACTIVE_STATUSES
from ..core.errors import ConfigurationError, EventSubError, RemoteRequestError
from ..models import Identity, Subscription, TwitchConfig
from .retry import TokenRetryPolicy
from .twitch_api import TwitchEventSubClient

logger = logging.getLogger(__name__)

MAX_PAGES = 100


@dataclass(frozen=True)
class PlannedDeletion:
    """A remote subscription scheduled for removal and why."""

    subscription: Subscription
    reason: str  # 'not desired' | 'duplicate' | 'status: <status>'


@dataclass
class ReconcilePlan:
    """Pure diff between desired identities and remote subscriptions."""

    to_create: list[Identity] = field(default_factory=list)
    to_delete: list[PlannedDeletion] = field(default_factory=list)
    unchanged: list[Identity] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_create and not self.to_delete


@dataclass(frozen=True)
class ReconcileFailure:
    action: str  # 'create' | 'delete'
    identity: Identity
    subscription_id: str | None
    reason: str


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    created: list[Identity] = field(default_factory=list)
    deleted: list[PlannedDeletion] = field(default_factory=list)
    failed: list[ReconcileFailure] = field(default_factory=list)
    unchanged: list[Identity] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def changes(self) -> int:
        return len(self.created) + len(self.deleted)

    @property
    def failed_identities(self) -> set[Identity]:
        return {failure.identity for failure in self.failed}


class ReconcileSink(Protocol):
    """Receives the outcome of every pass (persistence, alerts, ...)."""

    async def record(self, result: ReconcileResult) -> None: ...

    async def record_failure(self, error: EventSubError) -> None: ...


class LoggingSink:
    """Default sink: log a summary line plus each failure."""

    async def record(self, result: ReconcileResult) -> None:
        prefix = "[dry run] " if result.dry_run else ""
        logger.info(
            f"{prefix}Reconciled EventSub: {len(result.created)} created, "
            f"{len(result.deleted)} deleted, {len(result.unchanged)} unchanged, "
            f"{len(result.failed)} failed"
        )
        for failure in result.failed:
            event_type, broadcaster_id = failure.identity
            logger.error(
                f"Failed to {failure.action} {event_type} for {broadcaster_id}: {failure.reason}"
            )

    async def record_failure(self, error: EventSubError) -> None:
        logger.error(f"Reconcile pass aborted before any change: {type(error).__name__}: {error}")


def plan_reconciliation(
    desired: set[Identity], subscriptions: list[Subscription]
) -> ReconcilePlan:
    """Diff *desired* against the remote *subscriptions*.

    Subscriptions outside ``ACTIVE_STATUSES`` are stale and always removed.
    When several active subscriptions share an identity, the most recently
    created one is kept.
    """
    plan = ReconcilePlan()
    by_identity: dict[Identity, list[Subscription]] = {}

    for subscription in subscriptions:
        if subscription.status not in ACTIVE_STATUSES:
            plan.to_delete.append(PlannedDeletion(subscription, f"status: {subscription.status}"))
            continue
        by_identity.setdefault(subscription.identity, []).append(subscription)

    for identity, group in by_identity.items():
        if identity not in desired:
            plan.to_delete.extend(PlannedDeletion(sub, "not desired") for sub in group)
            continue
        _newest, *duplicates = sorted(group, key=lambda sub: sub.created, reverse=True)
        plan.unchanged.append(identity)
        plan.to_delete.extend(PlannedDeletion(sub, "duplicate") for sub in duplicates)

    plan.to_create = sorted(desired - set(by_identity))
    plan.unchanged.sort()
    return plan


class SubscriptionReconciler:
    """Runs reconciliation passes against Twitch."""

    def __init__(
        self,
        client: TwitchEventSubClient,
        retry_policy: TokenRetryPolicy,
        *,
        callback_url: str,
        secret: str,
        sink: ReconcileSink | None = None,
    ):
        self.client = client
        self.retry = retry_policy
        self.callback_url = callback_url
        self.secret = secret
        self.sink: ReconcileSink = sink or LoggingSink()

    @staticmethod
    def desired_identities(config: TwitchConfig) -> set[Identity]:
        return config.desired_identities()

    async def fetch_subscriptions(self) -> list[Subscription]:
        """Fetch every page of subscriptions, retrying once on an expired token.

        Raises ``RemoteRequestError`` when paging cannot reach the last page,
        so a pass never diffs against a partial remote set.
        """
        subscriptions: list[Subscription] = []
        seen_cursors: set[str] = set()
        cursor: str | None = None

        for _ in range(MAX_PAGES):
            page = await self.retry.run(self.client.list_subscriptions, after=cursor)
            subscriptions.extend(page.data)
            cursor = page.pagination.cursor
            if not cursor:
                break
            if cursor in seen_cursors:
                raise RemoteRequestError(f"Subscription paging repeated cursor {cursor!r}")
            seen_cursors.add(cursor)
        else:
            raise RemoteRequestError(
                f"Subscription paging did not finish within {MAX_PAGES} pages"
            )

        logger.debug(f"Fetched {len(subscriptions)} EventSub subscriptions")
        return subscriptions

    async def plan(self, config: TwitchConfig) -> ReconcilePlan:
        subscriptions = await self.fetch_subscriptions()
        return plan_reconciliation(self.desired_identities(config), subscriptions)

    async def reconcile(self, config: TwitchConfig, *, dry_run: bool = False) -> ReconcileResult:
        """Run one pass. Raises if the subscription list cannot be fetched.

        A pass that aborts before applying anything is reported to the sink
        through ``record_failure`` and the error is re-raised.
        """
        try:
            plan = await self.plan(config)
            if not dry_run and plan.to_create and (not self.callback_url or not self.secret):
                raise ConfigurationError(
                    "EventSub callback url or secret missing, cannot create subscriptions"
                )
        except EventSubError as e:
            await self.sink.record_failure(e)
            raise

        if dry_run:
            result = ReconcileResult(
                created=list(plan.to_create),
                deleted=list(plan.to_delete),
                unchanged=list(plan.unchanged),
                dry_run=True,
            )
        else:
            result = await self.apply(plan)

        await self.sink.record(result)
        return result

    async def apply(self, plan: ReconcilePlan) -> ReconcileResult:
        """Issue all creates and deletes concurrently and collect the outcomes."""
        result = ReconcileResult(unchanged=list(plan.unchanged))

        create_outcomes, delete_outcomes = await asyncio.gather(
            asyncio.gather(*(self._create(identity) for identity in plan.to_create)),
            asyncio.gather(*(self._delete(deletion) for deletion in plan.to_delete)),
        )

        for identity, failure in zip(plan.to_create, create_outcomes):
            if failure is None:
                result.created.append(identity)
            else:
                result.failed.append(failure)

        for deletion, failure in zip(plan.to_delete, delete_outcomes):
            if failure is None:
                result.deleted.append(deletion)
            else:
                result.failed.append(failure)

        return result

    async def _create(self, identity: Identity) -> ReconcileFailure | None:
        event_type, broadcaster_id = identity
        try:
            accepted = await self.retry.run(
                self.client.create_subscription,
                event_type,
                broadcaster_id,
                self.callback_url,
                self.secret,
            )
        except EventSubError as e:
            return ReconcileFailure("create", identity, None, f"{type(e).__name__}: {e}")

        if not accepted:
            return ReconcileFailure("create", identity, None, "rejected by Twitch")
        logger.info(f"Created {event_type} subscription for {broadcaster_id}")
        return None

    async def _delete(self, deletion: PlannedDeletion) -> ReconcileFailure | None:
        subscription = deletion.subscription
        try:
            removed = await self.retry.run(
                self.client.remove_subscription, subscription.id, missing_ok=True
            )
        except EventSubError as e:
            return ReconcileFailure(
                "delete", subscription.identity, subscription.id, f"{type(e).__name__}: {e}"
            )

        if not removed:
            return ReconcileFailure(
                "delete", subscription.identity, subscription.id, "rejected by Twitch"
            )
        logger.info(
            f"Deleted {subscription.type} subscription {subscription.id} "
            f"for {subscription.condition.broadcaster_user_id} ({deletion.reason})"
        )
        return None
