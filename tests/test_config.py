"""
Tests for EventSubSettings
"""

import pytest
from pydantic import ValidationError

from alveus_eventsub.core.config import HELIX_BASE, EventSubSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "TWITCH_CLIENT_ID",
        "TWITCH_CLIENT_SECRET",
        "TWITCH_EVENTSUB_CALLBACK",
        "TWITCH_EVENTSUB_SECRET",
        "TWITCH_CONFIG_PATH",
        "TOKEN_TTL",
        "LOG_LEVEL",
        "HELIX_BASE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = EventSubSettings(_env_file=None)

    assert settings.twitch_client_id == ""
    assert settings.helix_base_url == HELIX_BASE
    assert settings.token_ttl is None
    assert settings.twitch_config_path is None
    assert settings.log_level == "INFO"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("TWITCH_CLIENT_ID", "abc")
    monkeypatch.setenv("TWITCH_EVENTSUB_CALLBACK", "https://example.test/cb")
    monkeypatch.setenv("TOKEN_TTL", "3600")
    monkeypatch.setenv("HELIX_BASE", "https://helix.example.test/")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = EventSubSettings(_env_file=None)

    assert settings.twitch_client_id == "abc"
    assert settings.twitch_eventsub_callback == "https://example.test/cb"
    assert settings.token_ttl == 3600
    assert settings.helix_base_url == "https://helix.example.test"
    assert settings.log_level == "DEBUG"


def test_empty_optional_values_are_none(monkeypatch):
    monkeypatch.setenv("TOKEN_TTL", "")
    monkeypatch.setenv("TWITCH_CONFIG_PATH", "")

    settings = EventSubSettings(_env_file=None)

    assert settings.token_ttl is None
    assert settings.twitch_config_path is None


def test_invalid_log_level_falls_back():
    assert EventSubSettings(_env_file=None, log_level="chatty").log_level == "INFO"


def test_non_positive_ttl_rejected():
    with pytest.raises(ValidationError):
        EventSubSettings(_env_file=None, token_ttl=0)
