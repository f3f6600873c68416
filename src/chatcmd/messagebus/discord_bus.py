"""Discord message bus implementation."""

import asyncio
import logging
from typing import Iterator

import discord

from chatcmd.core.model import Channel, Guild, Member, Message, StateProvider, User
from chatcmd.core.response import Embed, MessageSender, SentMessage
from chatcmd.messagebus.base import MessageBus, OnMessage
from chatcmd.utils.config import DiscordConfig

logger = logging.getLogger(__name__)


def to_user(user: discord.abc.User) -> User:
    return User(id=user.id, username=user.name, bot=user.bot)


def to_member(member: discord.Member) -> Member:
    return Member(user=to_user(member), guild_id=member.guild.id, nick=member.nick)


def to_channel(channel) -> Channel:
    guild = getattr(channel, "guild", None)
    return Channel(
        id=channel.id,
        name=getattr(channel, "name", None) or "",
        guild_id=guild.id if guild is not None else None,
    )


class DiscordGuild(Guild):
    """
    A Guild reading the discord.py cache on demand.

    Nothing is copied when the view is created; only ``iter_members``
    walks the member cache.
    """

    def __init__(self, guild: discord.Guild):
        super().__init__(id=guild.id, name=guild.name)
        self._guild = guild

    def member(self, user_id: int) -> Member | None:
        member = self._guild.get_member(user_id)
        return to_member(member) if member is not None else None

    def channel(self, channel_id: int) -> Channel | None:
        channel = self._guild.get_channel(channel_id)
        if not isinstance(channel, discord.TextChannel):
            return None
        return to_channel(channel)

    def iter_members(self) -> Iterator[Member]:
        return (to_member(m) for m in self._guild.members)


def to_message(message: discord.Message) -> Message:
    """Convert a discord.py message into the platform-neutral model."""
    guild = message.guild
    member = None
    if guild is not None and isinstance(message.author, discord.Member):
        member = to_member(message.author)

    return Message(
        id=message.id,
        content=message.content,
        author=to_user(message.author),
        channel_id=message.channel.id,
        guild_id=guild.id if guild is not None else None,
        mentions=[to_user(u) for u in message.mentions],
        member=member,
        channel=to_channel(message.channel),
    )


def to_discord_embed(embed: Embed) -> discord.Embed:
    result = discord.Embed(
        title=embed.title or None,
        description=embed.description or None,
        color=embed.color,
    )
    for f in embed.fields:
        result.add_field(name=f.name, value=f.value, inline=f.inline)
    if embed.footer:
        result.set_footer(text=embed.footer)
    return result


class DiscordState(StateProvider):
    """Guild and member directory backed by the discord.py client cache."""

    def __init__(self, bus: "DiscordBus"):
        self._bus = bus

    @property
    def _client(self) -> discord.Client:
        if self._bus.client is None:
            raise RuntimeError("DiscordBus not started")
        return self._bus.client

    @property
    def bot_user(self) -> User | None:
        if self._bus.client is None or self._bus.client.user is None:
            return None
        return to_user(self._bus.client.user)

    def channel(self, channel_id: int) -> Channel | None:
        channel = self._client.get_channel(channel_id)
        return to_channel(channel) if channel is not None else None

    def guild(self, guild_id: int) -> Guild | None:
        guild = self._client.get_guild(guild_id)
        return DiscordGuild(guild) if guild is not None else None

    async def get_member(self, guild_id: int, user_id: int) -> Member | None:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            return None

        member = guild.get_member(user_id)
        if member is None:
            try:
                member = await guild.fetch_member(user_id)
            except discord.NotFound:
                return None
        return to_member(member)

    async def get_user(self, user_id: int) -> User | None:
        user = self._client.get_user(user_id)
        if user is None:
            try:
                user = await self._client.fetch_user(user_id)
            except discord.NotFound:
                return None
        return to_user(user)


class DiscordSender(MessageSender):
    """Sends replies through the discord.py client."""

    def __init__(self, bus: "DiscordBus"):
        self._bus = bus

    async def _get_channel(self, channel_id: int):
        client = self._bus.client
        if client is None:
            raise RuntimeError("DiscordBus not started")

        channel = client.get_channel(channel_id)
        if channel is None:
            channel = await client.fetch_channel(channel_id)
        return channel

    async def send_message(self, channel_id: int, content: str) -> SentMessage:
        channel = await self._get_channel(channel_id)
        sent = await channel.send(content)
        logger.debug(f"Sent Discord message to {channel_id}")
        return SentMessage(id=sent.id, channel_id=channel_id)

    async def send_embed(self, channel_id: int, embed: Embed) -> SentMessage:
        channel = await self._get_channel(channel_id)
        sent = await channel.send(embed=to_discord_embed(embed))
        logger.debug(f"Sent Discord embed to {channel_id}")
        return SentMessage(id=sent.id, channel_id=channel_id)

    async def delete_messages(self, channel_id: int, message_ids: list[int]) -> None:
        channel = await self._get_channel(channel_id)
        for message_id in message_ids:
            await channel.get_partial_message(message_id).delete()

    def can_embed(self, channel_id: int) -> bool:
        client = self._bus.client
        if client is None:
            return True

        channel = client.get_channel(channel_id)
        guild = getattr(channel, "guild", None)
        if channel is None or guild is None:
            return True
        return channel.permissions_for(guild.me).embed_links


class DiscordBus(MessageBus):
    """Discord platform implementation using discord.py."""

    platform_name = "discord"

    def __init__(self, config: DiscordConfig):
        self.config = config
        self.client: discord.Client | None = None
        self._running_task: asyncio.Task | None = None
        self._state = DiscordState(self)
        self._sender = DiscordSender(self)

    @property
    def state(self) -> DiscordState:
        return self._state

    @property
    def sender(self) -> DiscordSender:
        return self._sender

    async def run(self, on_message: OnMessage) -> None:
        """
        Run the Discord message bus. Blocks until stop() is called.

        Raises:
            RuntimeError: If run() is called when already running.
        """
        if self._running_task is not None:
            raise RuntimeError("DiscordBus already running")

        logger.info(f"Message bus enabled with platform: {self.platform_name}")

        intents = discord.Intents.default()
        intents.message_content = True
        intents.messages = True
        intents.members = True

        self.client = discord.Client(intents=intents)

        callback = on_message

        @self.client.event
        async def on_message(message: discord.Message) -> None:
            await self._handle(message, callback)

        self._running_task = asyncio.create_task(self.client.start(self.config.bot_token))

        logger.info("DiscordBus started")
        try:
            await self._running_task
        finally:
            self._running_task = None

    async def _handle(self, message: discord.Message, on_message: OnMessage) -> None:
        if self.client is not None and message.author == self.client.user:
            return

        if self.config.channel_id and str(message.channel.id) != self.config.channel_id:
            return

        if not message.content:
            return

        msg = to_message(message)
        if not self.is_allowed(msg):
            logger.debug(f"Ignoring Discord message from non-allowed user {msg.author.id}")
            return

        logger.debug(f"Received Discord message from user {msg.author.id} in channel {msg.channel_id}")

        try:
            await on_message(msg)
        except Exception as e:
            logger.error(f"Error in message callback: {e}")

    def is_allowed(self, msg: Message) -> bool:
        if not self.config.allowed_user_ids:
            return True
        return str(msg.author.id) in self.config.allowed_user_ids

    async def stop(self) -> None:
        """Stop Discord bot and cleanup."""
        if self.client is None:
            logger.debug("DiscordBus not running, skipping stop")
            return

        await self.client.close()

        if self._running_task and not self._running_task.done():
            try:
                await asyncio.wait_for(self._running_task, timeout=2.0)
            except asyncio.TimeoutError:
                logger.warning("Running task did not complete in time")
            except Exception as e:
                logger.debug(f"Running task ended with error: {e}")

        self.client = None
        self._running_task = None
        logger.info("DiscordBus stopped")
