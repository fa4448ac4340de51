"""Command line entry point.

Usage:
    python -m alveus_eventsub sync [--dry-run]
    python -m alveus_eventsub list [--user-id ID]
    python -m alveus_eventsub streams
    python -m alveus_eventsub remove ID [ID ...]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .core.config import get_settings
from .core.dependencies import (
    close_services,
    get_config_repository,
    get_reconciler,
    get_retry_policy,
    get_twitch_api,
)
from .core.errors import ConfigurationError, EventSubError
from .core.logging import setup_logging
from .models import Subscription
from .repositories import TwitchConfigRepository
from .services import ReconcileResult, get_live_channels

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_PASS_FAILED = 3

console = Console(markup=False, highlight=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alveus-eventsub",
        description="Manage Twitch EventSub webhook subscriptions",
    )
    parser.add_argument("--config", type=Path, help="JSON channel notification config")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")

    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser("sync", help="Run one reconciliation pass")
    sync.add_argument("--dry-run", action="store_true", help="Only print the planned changes")

    list_ = sub.add_parser("list", help="List EventSub subscriptions")
    list_.add_argument("--user-id", help="Only subscriptions for this broadcaster id")

    sub.add_parser("streams", help="Show which configured channels are live")

    remove = sub.add_parser("remove", help="Delete subscriptions by id")
    remove.add_argument("ids", nargs="+", metavar="ID")

    return parser


def print_subscriptions(subscriptions: list[Subscription]) -> None:
    table = Table(title=f"EventSub subscriptions ({len(subscriptions)})")
    for column in ("id", "type", "broadcaster", "status", "created", "callback"):
        table.add_column(column)
    for s in subscriptions:
        table.add_row(
            s.id,
            s.type,
            s.condition.broadcaster_user_id,
            s.status,
            s.created_at,
            s.transport.callback or s.transport.method,
        )
    console.print(table)


def print_result(result: ReconcileResult) -> None:
    verb = "Would" if result.dry_run else "Did"
    for event_type, broadcaster_id in result.created:
        console.print(f"{verb} create {event_type} for {broadcaster_id}")
    for deletion in result.deleted:
        s = deletion.subscription
        console.print(
            f"{verb} delete {s.type} for {s.condition.broadcaster_user_id} "
            f"({s.id}, {deletion.reason})"
        )
    for failure in result.failed:
        event_type, broadcaster_id = failure.identity
        console.print(f"FAILED {failure.action} {event_type} for {broadcaster_id}: {failure.reason}")
    if not result.changes and not result.failed:
        console.print("Subscriptions already up to date")


async def run(args: argparse.Namespace) -> int:
    repository = TwitchConfigRepository(args.config) if args.config else get_config_repository()
    client = get_twitch_api()
    retry_policy = get_retry_policy()

    if args.command == "sync":
        config = await repository.get_config()
        result = await get_reconciler().reconcile(config, dry_run=args.dry_run)
        print_result(result)
        return EXIT_OK if result.ok else EXIT_PARTIAL_FAILURE

    if args.command == "list":
        if args.user_id:
            response = await retry_policy.run(client.list_subscriptions_for_user, args.user_id)
            subscriptions = response.data
        else:
            subscriptions = await get_reconciler().fetch_subscriptions()
        print_subscriptions(subscriptions)
        return EXIT_OK

    if args.command == "streams":
        config = await repository.get_config()
        live = await get_live_channels(client, retry_policy, config)
        if not live:
            console.print("No configured channel is live")
        for name, stream in live.items():
            label = config.channels[name].label
            console.print(f"{label}: {stream.title} [{stream.game_name}] {stream.viewer_count} viewers")
        return EXIT_OK

    if args.command == "remove":
        failed = 0
        for subscription_id in args.ids:
            if await retry_policy.run(client.remove_subscription, subscription_id):
                console.print(f"Deleted {subscription_id}")
            else:
                console.print(f"Could not delete {subscription_id}")
                failed += 1
        return EXIT_PARTIAL_FAILURE if failed else EXIT_OK

    raise ValueError(f"Unknown command: {args.command}")


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.log_level:
        settings = settings.model_copy(update={"log_level": args.log_level.upper()})
    setup_logging(settings)

    try:
        return await run(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIGURATION_ERROR
    except EventSubError as e:
        logger.error(f"{type(e).__name__}: {e}")
        payload = getattr(e, "payload", None)
        if payload is not None:
            logger.debug(f"Offending payload: {payload!r}")
        return EXIT_PASS_FAILED
    finally:
        await close_services()


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
