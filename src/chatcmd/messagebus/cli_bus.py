"""CLI message bus implementation."""

import asyncio
import itertools
import logging

from rich.console import Console
from rich.panel import Panel

from chatcmd.core.model import Channel, InMemoryState, Message, User
from chatcmd.core.response import Embed, MessageSender, SentMessage
from chatcmd.messagebus.base import MessageBus, OnMessage
from chatcmd.utils.config import CliConfig

logger = logging.getLogger(__name__)

CLI_CHANNEL_ID = 1


class CliSender(MessageSender):
    """Prints replies to stdout using a Rich Console."""

    def __init__(self, console: Console):
        self.console = console
        self._ids = itertools.count(1)

    async def send_message(self, channel_id: int, content: str) -> SentMessage:
        self.console.print(content, markup=False)
        return SentMessage(id=next(self._ids), channel_id=channel_id)

    async def send_embed(self, channel_id: int, embed: Embed) -> SentMessage:
        body = embed.description
        for f in embed.fields:
            body += f"\n\n{f.name}\n{f.value}"

        self.console.print(
            Panel(
                body,
                title=embed.title or None,
                subtitle=embed.footer or None,
                border_style=f"#{embed.color:06x}" if embed.color else "none",
            )
        )
        return SentMessage(id=next(self._ids), channel_id=channel_id)

    async def delete_messages(self, channel_id: int, message_ids: list[int]) -> None:
        # Printed output can't be taken back
        logger.debug(f"Ignoring deletion of {len(message_ids)} CLI message(s)")


class CliBus(MessageBus):
    """
    CLI platform implementation using stdin/stdout.

    Every input line is delivered as a direct message from the configured
    CLI user, so commands run without a prefix.
    """

    platform_name = "cli"

    def __init__(self, config: CliConfig | None = None, console: Console | None = None):
        self.config = config or CliConfig()
        self.console = console or Console()
        self.user = User(id=self.config.user_id, username=self.config.username)
        self._state = InMemoryState(
            bot_user=User(id=self.config.bot_id, username="chatcmd", bot=True),
            channels=[Channel(id=CLI_CHANNEL_ID, name="cli")],
            users=[self.user],
        )
        self._sender = CliSender(self.console)
        self._message_ids = itertools.count(1)
        self._stop_event = asyncio.Event()
        self._running = False

    @property
    def state(self) -> InMemoryState:
        return self._state

    @property
    def sender(self) -> CliSender:
        return self._sender

    def is_allowed(self, msg: Message) -> bool:
        """CLI always allows all users."""
        return True

    def to_message(self, text: str) -> Message:
        return Message(
            id=next(self._message_ids),
            content=text,
            author=self.user,
            channel_id=CLI_CHANNEL_ID,
        )

    async def feed(self, text: str, on_message: OnMessage) -> None:
        """Deliver a single line of input as a message."""
        msg = self.to_message(text)
        logger.debug(f"Received CLI message from user {msg.author.id}")
        await on_message(msg)

    async def run(self, on_message: OnMessage) -> None:
        """
        Run the CLI message bus. Blocks until stop() is called or quit command.

        Raises:
            RuntimeError: If run() is called when already running.
        """
        if self._running:
            raise RuntimeError("CliBus already running")

        self._running = True
        self._stop_event.clear()
        logger.info(f"Message bus enabled with platform: {self.platform_name}")

        try:
            while not self._stop_event.is_set():
                try:
                    user_input = await asyncio.to_thread(input, "> ")
                except EOFError:
                    logger.info("EOF received, stopping CLI bus")
                    break
                except KeyboardInterrupt:
                    logger.info("Keyboard interrupt received, stopping CLI bus")
                    break

                if user_input.lower().strip() in ("quit", "exit", "q"):
                    logger.info("Quit command received, stopping CLI bus")
                    break

                if not user_input.strip():
                    continue

                try:
                    await self.feed(user_input, on_message)
                except Exception as e:
                    logger.error(f"Error in message callback: {e}")
        finally:
            self._running = False
            logger.info("CliBus stopped")

    async def stop(self) -> None:
        """Stop CLI bus and cleanup."""
        if not self._running:
            return
        logger.info("Stopping CliBus")
        self._stop_event.set()
