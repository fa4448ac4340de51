"""Core modules: settings, logging, error taxonomy."""

from .config import (
    ACTIVE_STATUSES,
    HELIX_BASE,
    OAUTH_BASE,
    EventSubSettings,
    get_settings,
)
from .errors import (
    AuthAcquisitionError,
    ConfigurationError,
    EventSubError,
    ExpiredAccessTokenError,
    RemoteRequestError,
    ResponseShapeError,
)
from .logging import setup_logging

__all__ = [
    # Settings
    "EventSubSettings",
    "get_settings",
    # Constants
    "ACTIVE_STATUSES",
    "HELIX_BASE",
    "OAUTH_BASE",
    # Setup functions
    "setup_logging",
    # Errors
    "EventSubError",
    "ConfigurationError",
    "AuthAcquisitionError",
    "ExpiredAccessTokenError",
    "ResponseShapeError",
    "RemoteRequestError",
]
