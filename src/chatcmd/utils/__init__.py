"""Utilities package."""

from chatcmd.utils.config import CliConfig, CommandsConfig, Config, DiscordConfig
from chatcmd.utils.logging import setup_logging

__all__ = [
    "CliConfig",
    "CommandsConfig",
    "Config",
    "DiscordConfig",
    "setup_logging",
]
