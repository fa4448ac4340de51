"""Repository layer for externally supplied configuration."""

from .twitch_config import DEFAULT_TWITCH_CONFIG, TwitchConfigRepository

__all__ = [
    "DEFAULT_TWITCH_CONFIG",
    "TwitchConfigRepository",
]
