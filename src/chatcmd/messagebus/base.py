"""Abstract base class for message bus implementations."""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from chatcmd.core.model import Message, StateProvider
from chatcmd.core.response import MessageSender
from chatcmd.utils.config import Config

OnMessage = Callable[[Message], Awaitable[None]]


class MessageBus(ABC):
    """
    A connection to one chat platform.

    A bus turns platform events into ``Message`` objects for the command
    system, and exposes the platform's guild/member directory (``state``)
    and outbound side (``sender``) in platform-neutral form.
    """

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """
        Platform identifier.

        Returns:
            Platform name (e.g., 'discord', 'cli')
        """
        pass

    @property
    @abstractmethod
    def state(self) -> StateProvider:
        pass

    @property
    @abstractmethod
    def sender(self) -> MessageSender:
        pass

    @abstractmethod
    async def run(self, on_message: OnMessage) -> None:
        """
        Run the message bus. Blocks until stop() is called.

        Args:
            on_message: Callback receiving every allowed incoming message

        Raises:
            RuntimeError: If run() is called when already running.
        """
        pass

    @abstractmethod
    def is_allowed(self, msg: Message) -> bool:
        """Check if the message's author may use the bot."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop listening and cleanup resources."""
        pass

    @staticmethod
    def from_config(config: Config) -> list["MessageBus"]:
        """
        Create message bus instances from configuration.

        Returns:
            List of configured and enabled message buses
        """
        # Inline import to avoid circular dependency
        from chatcmd.messagebus.discord_bus import DiscordBus

        buses: list[MessageBus] = []
        if config.discord and config.discord.enabled:
            buses.append(DiscordBus(config.discord))

        return buses
