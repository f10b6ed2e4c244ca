"""Tests for configuration handling."""

import pytest

from votebot.config import Config, SyncSettings


def test_to_sync_settings(monkeypatch):
    monkeypatch.setattr(Config, "TRACKED_ENTITY_ID", "srv-1")
    monkeypatch.setattr(Config, "SERVER_KEY", "KEY")
    monkeypatch.setattr(Config, "CHANNEL_ID", 42)
    monkeypatch.setattr(Config, "PERIOD", None)
    monkeypatch.setattr(Config, "SYNC_INTERVAL_MINUTES", 10.0)

    settings = Config.to_sync_settings()

    assert isinstance(settings, SyncSettings)
    assert settings.tracked_entity_id == "srv-1"
    assert settings.channel_id == 42
    assert settings.period is None
    assert settings.interval_seconds == 600


def test_validate_requires_server_key(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_TOKEN", "token")
    monkeypatch.setattr(Config, "CHANNEL_ID", 42)
    monkeypatch.setattr(Config, "SERVER_KEY", "")

    with pytest.raises(ValueError, match="SERVER_KEY"):
        Config.validate()


def test_guild_ids(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_GUILD_IDS", "1, 2,3")
    assert Config.get_guild_ids() == [1, 2, 3]

    monkeypatch.setattr(Config, "DISCORD_GUILD_IDS", "")
    monkeypatch.setattr(Config, "DISCORD_GUILD_ID", 0)
    assert Config.get_guild_ids() == []
