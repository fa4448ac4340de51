"""Logging for the command line tool.

Command output (tables, plans) is printed to stdout by ``__main__``; log
records go to stderr so the two never interleave in a pipe.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import EventSubSettings

# Logger name -> level when not debugging
NOISY_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.ERROR,
}


def build_log_handler(level: int) -> RichHandler:
    """Rich handler on stderr. Paths and full tracebacks only when debugging."""
    debug = level <= logging.DEBUG
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        omit_repeated_times=True,
        log_time_format="[%H:%M:%S]",
        show_level=True,
        show_path=debug,
        markup=False,
        rich_tracebacks=debug,
        tracebacks_show_locals=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s"))
    return handler


def setup_logging(settings: EventSubSettings) -> None:
    """Route all logging through a single Rich handler at ``settings.log_level``."""
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, handlers=[build_log_handler(level)], force=True)

    for name, quiet_level in NOISY_LOGGERS.items():
        # httpx logs every request at INFO, useful with --log-level debug
        logging.getLogger(name).setLevel(logging.INFO if level <= logging.DEBUG else quiet_level)

    logging.getLogger(__name__).debug(f"Logging: {settings.log_level}")
