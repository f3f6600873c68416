"""Message bus implementations for different platforms."""

from chatcmd.messagebus.base import MessageBus
from chatcmd.messagebus.cli_bus import CliBus
from chatcmd.messagebus.discord_bus import DiscordBus

__all__ = ["MessageBus", "DiscordBus", "CliBus"]
