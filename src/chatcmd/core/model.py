"""Platform-neutral message model and guild state directory."""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable


@dataclass
class User:
    """A chat user profile."""

    id: int
    username: str
    bot: bool = False

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"


@dataclass
class Member:
    """A user's guild-specific profile."""

    user: User
    guild_id: int
    nick: str | None = None

    @property
    def display_name(self) -> str:
        return self.nick or self.user.username


@dataclass
class Channel:
    """A text channel. Channels without a guild are private (DM) channels."""

    id: int
    name: str = ""
    guild_id: int | None = None

    @property
    def is_private(self) -> bool:
        return self.guild_id is None

    @property
    def mention(self) -> str:
        return f"<#{self.id}>"


@dataclass
class Guild:
    """
    A guild with its known members and channels.

    Read it through ``member``, ``channel`` and ``iter_members``: platform
    adapters subclass it to read their own cache on demand. The plain
    lists are for in-memory guilds; iterate them only while holding ``lock``.
    """

    id: int
    name: str = ""
    members: list[Member] = field(default_factory=list)
    channels: dict[int, Channel] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def member(self, user_id: int) -> Member | None:
        """Look up a cached member by user id."""
        with self.lock:
            for member in self.members:
                if member.user.id == user_id:
                    return member
        return None

    def channel(self, channel_id: int) -> Channel | None:
        """Look up a channel of this guild by id."""
        with self.lock:
            return self.channels.get(channel_id)

    def iter_members(self) -> Iterable[Member]:
        """All known members, in member order. Used by name searches."""
        with self.lock:
            return list(self.members)


@dataclass
class Message:
    """An incoming chat message."""

    content: str
    author: User
    channel_id: int
    guild_id: int | None = None
    mentions: list[User] = field(default_factory=list)
    member: Member | None = None  # author's guild profile, guild messages only
    id: int = 0
    # Channel as delivered by the platform, for channels its cache may lack (DMs)
    channel: Channel | None = None


class StateProvider(ABC):
    """Directory of channels, guilds and members consulted while handling a message."""

    @property
    @abstractmethod
    def bot_user(self) -> User | None:
        """The bot's own user, None until the platform connection is ready."""
        pass

    @abstractmethod
    def channel(self, channel_id: int) -> Channel | None:
        """Look up a cached channel."""
        pass

    @abstractmethod
    def guild(self, guild_id: int) -> Guild | None:
        """Look up a cached guild."""
        pass

    @abstractmethod
    async def get_member(self, guild_id: int, user_id: int) -> Member | None:
        """
        Look up a guild member, fetching it from the platform if not cached.

        Returns:
            The member, or None if the user is not in the guild
        """
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None:
        """Fetch a user profile from the platform regardless of guild membership."""
        pass


class InMemoryState(StateProvider):
    """StateProvider backed by plain in-process objects."""

    def __init__(
        self,
        bot_user: User | None = None,
        guilds: list[Guild] | None = None,
        channels: list[Channel] | None = None,
        users: list[User] | None = None,
    ) -> None:
        self._bot_user = bot_user
        self.guilds: dict[int, Guild] = {g.id: g for g in guilds or []}
        self.channels: dict[int, Channel] = {c.id: c for c in channels or []}
        self.users: dict[int, User] = {u.id: u for u in users or []}

        for guild in self.guilds.values():
            self.channels.update(guild.channels)
            for member in guild.iter_members():
                self.users.setdefault(member.user.id, member.user)

    @property
    def bot_user(self) -> User | None:
        return self._bot_user

    def channel(self, channel_id: int) -> Channel | None:
        return self.channels.get(channel_id)

    def guild(self, guild_id: int) -> Guild | None:
        return self.guilds.get(guild_id)

    async def get_member(self, guild_id: int, user_id: int) -> Member | None:
        guild = self.guilds.get(guild_id)
        if guild is None:
            return None
        return guild.member(user_id)

    async def get_user(self, user_id: int) -> User | None:
        return self.users.get(user_id)
