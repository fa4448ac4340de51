"""Repository for the channel notification config."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..core.errors import ConfigurationError
from ..models import TwitchConfig

logger = logging.getLogger(__name__)

DEFAULT_TWITCH_CONFIG: dict = {
    "channels": {
        "maya": {
            "id": "235835559",
            "label": "Maya",
            "notifications": {
                "live": True,
                "streamTitleChange": True,
                "streamCategoryChange": True,
            },
        },
        "alveussanctuary": {
            "id": "636587384",
            "label": "AlveusSanctuary",
            "notifications": {
                "live": False,  # always live anyway
                "streamTitleChange": True,
                "streamCategoryChange": True,
            },
        },
        "pjeweb": {
            "id": "60734874",
            "label": "pjeweb",
            "notifications": {
                "live": True,
                "streamTitleChange": True,
                "streamCategoryChange": True,
            },
        },
        "alveusgg": {
            "id": "858050963",
            "label": "AlveusGG",
            "notifications": {
                "live": True,
                "streamTitleChange": True,
                "streamCategoryChange": True,
            },
        },
    },
}


class TwitchConfigRepository:
    """Loads the desired notification config from a JSON file or the built-in default."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else None

    async def get_config(self) -> TwitchConfig:
        if self.path is None:
            return TwitchConfig.model_validate(DEFAULT_TWITCH_CONFIG)
        return self._load_file(self.path)

    @staticmethod
    def _load_file(path: Path) -> TwitchConfig:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigurationError(f"Twitch config file not found: {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not read Twitch config {path}: {e}") from e

        try:
            config = TwitchConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Twitch config {path}: {e}") from e

        logger.debug(f"Loaded {len(config.channels)} channels from {path}")
        return config
