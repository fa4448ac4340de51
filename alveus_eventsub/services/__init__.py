"""Service layer: credentials, Helix client, retry policy, reconciliation."""

from .credentials import TOKEN_URLS, CredentialCache
from .live_status import get_live_channels
from .reconciler import (
    LoggingSink,
    PlannedDeletion,
    ReconcileFailure,
    ReconcilePlan,
    ReconcileResult,
    ReconcileSink,
    SubscriptionReconciler,
    plan_reconciliation,
)
from .retry import TokenRetryPolicy
from .twitch_api import TwitchEventSubClient

__all__ = [
    "CredentialCache",
    "LoggingSink",
    "PlannedDeletion",
    "ReconcileFailure",
    "ReconcilePlan",
    "ReconcileResult",
    "ReconcileSink",
    "SubscriptionReconciler",
    "TOKEN_URLS",
    "TokenRetryPolicy",
    "TwitchEventSubClient",
    "get_live_channels",
    "plan_reconciliation",
]
