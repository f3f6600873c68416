"""Tests for MessageBus.from_config."""

from chatcmd.messagebus.base import MessageBus
from chatcmd.messagebus.discord_bus import DiscordBus
from chatcmd.utils.config import Config, DiscordConfig


def test_from_config_without_platforms(tmp_path):
    config = Config(workspace=tmp_path)

    assert MessageBus.from_config(config) == []


def test_from_config_creates_discord_bus(tmp_path):
    config = Config(workspace=tmp_path, discord=DiscordConfig(bot_token="token"))

    buses = MessageBus.from_config(config)

    assert len(buses) == 1
    assert isinstance(buses[0], DiscordBus)
    assert buses[0].config.bot_token == "token"


def test_from_config_skips_disabled_platforms(tmp_path):
    config = Config(
        workspace=tmp_path, discord=DiscordConfig(enabled=False, bot_token="token")
    )

    assert MessageBus.from_config(config) == []
