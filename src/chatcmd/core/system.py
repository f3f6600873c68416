"""Entry point turning incoming messages into command invocations."""

import logging
from abc import ABC, abstractmethod

from chatcmd.core.container import Container, ContainerConfig
from chatcmd.core.data import Data, TriggerSource
from chatcmd.core.exceptions import ResourceUnavailableError
from chatcmd.core.model import Message, StateProvider
from chatcmd.core.parse import arg_parser_hook
from chatcmd.core.response import MessageSender, ResponseSender, StdResponseSender

logger = logging.getLogger(__name__)


class PrefixProvider(ABC):
    """Supplies the command prefix, possibly different per guild."""

    @abstractmethod
    async def prefix(self, data: Data) -> str:
        """
        Get the prefix for the message's context.

        Returns:
            The prefix, or an empty string if none is configured
        """
        pass


class SimplePrefixProvider(PrefixProvider):
    """A single fixed prefix everywhere."""

    def __init__(self, prefix: str):
        self._prefix = prefix

    async def prefix(self, data: Data) -> str:
        return self._prefix


class System:
    """Ties together the command tree, prefix handling and response sending."""

    def __init__(
        self,
        state: StateProvider,
        response_sender: ResponseSender,
        root: Container | None = None,
        prefix: PrefixProvider | None = None,
    ):
        self.state = state
        self.response_sender = response_sender
        self.root = root or Container()
        self.prefix = prefix

    @classmethod
    def standard(
        cls,
        state: StateProvider,
        sender: MessageSender,
        static_prefix: str = "",
        config: ContainerConfig | None = None,
        log_errors: bool = True,
    ) -> "System":
        """Create a system whose root container parses command arguments."""
        root = Container(config=config or ContainerConfig(help_title_emoji="ℹ️", help_color=0xBEFF7A))
        root.add_hooks(arg_parser_hook)

        return cls(
            state=state,
            response_sender=StdResponseSender(sender, log_errors=log_errors),
            root=root,
            prefix=SimplePrefixProvider(static_prefix) if static_prefix else None,
        )

    async def handle_message(self, msg: Message) -> None:
        """
        Handle one incoming message, never raising.

        Suitable as a message bus callback: any failure is logged and
        contained to this message.
        """
        try:
            await self.check_message(msg)
        except ResourceUnavailableError as e:
            logger.error(f"Failed checking message: {e}")
        except Exception:
            logger.exception(f"Unexpected error handling message {msg.id}")

    async def check_message(self, msg: Message) -> bool:
        """
        Run the command the message triggers, if any, and send the response.

        Returns:
            True if the message triggered the command system
        """
        data = self.fill_data(msg)

        if not await self.find_prefix(data):
            return False

        try:
            response = await self.root.run(data)
            error = None
        except Exception as e:
            response, error = None, e

        await self.response_sender.send_response(data, response, error)
        return True

    def fill_data(self, msg: Message) -> Data:
        """
        Build the invocation context for a message.

        Raises:
            ResourceUnavailableError: If the channel, guild or author's member
                profile is not available
        """
        channel = msg.channel or self.state.channel(msg.channel_id)
        if channel is None:
            raise ResourceUnavailableError("channel", msg.channel_id)

        data = Data(msg=msg, state=self.state, channel=channel, system=self)

        if msg.guild_id is not None:
            guild = self.state.guild(msg.guild_id)
            if guild is None:
                raise ResourceUnavailableError("guild", msg.guild_id)
            if msg.member is None:
                raise ResourceUnavailableError("member", msg.author.id)
            data.guild = guild
        else:
            data.source = TriggerSource.DM

        return data

    async def find_prefix(self, data: Data) -> bool:
        """
        Work out how the message invokes a command and strip that part.

        Sets ``data.source``, ``data.prefix_used`` and
        ``data.msg_stripped_prefix`` when found.
        """
        content = data.msg.content

        if data.msg.guild_id is None:
            data.source = TriggerSource.DM
            data.msg_stripped_prefix = content
            return True

        if self.find_mention_prefix(data):
            return True

        if self.prefix is None:
            return False

        prefix = await self.prefix.prefix(data)
        if not prefix:
            return False

        if content.startswith(prefix):
            data.source = TriggerSource.PREFIX
            data.prefix_used = prefix
            data.msg_stripped_prefix = content[len(prefix):].strip()
            return True

        return False

    def find_mention_prefix(self, data: Data) -> bool:
        """Check whether the message starts by mentioning the bot."""
        bot_user = self.state.bot_user
        if bot_user is None:
            return False

        content = data.msg.content
        for mention in (f"<@{bot_user.id}>", f"<@!{bot_user.id}>"):
            if content.startswith(mention):
                data.source = TriggerSource.MENTION
                data.prefix_used = mention
                data.msg_stripped_prefix = content[len(mention):].strip()
                return True

        return False
