"""Shared test fixtures for chat-cmd test suite."""

from pathlib import Path
from typing import Callable

import pytest

from chatcmd.core.data import Data, TriggerSource
from chatcmd.core.model import Channel, Guild, InMemoryState, Member, Message, User
from chatcmd.core.response import Embed, MessageSender, SentMessage
from chatcmd.utils.config import Config

BOT_ID = 12345
GUILD_ID = 100
CHANNEL_ID = 200
DM_CHANNEL_ID = 300


@pytest.fixture
def anyio_backend() -> str:
    """The package is built on asyncio; run anyio-marked tests on it only."""
    return "asyncio"


class RecordingSender(MessageSender):
    """MessageSender that keeps everything it was asked to send."""

    def __init__(self, embeds_allowed: bool = True):
        self.messages: list[tuple[int, str]] = []
        self.embeds: list[tuple[int, Embed]] = []
        self.deleted: list[tuple[int, list[int]]] = []
        self.embeds_allowed = embeds_allowed
        self._next_id = 1000

    def _sent(self, channel_id: int) -> SentMessage:
        self._next_id += 1
        return SentMessage(id=self._next_id, channel_id=channel_id)

    async def send_message(self, channel_id: int, content: str) -> SentMessage:
        self.messages.append((channel_id, content))
        return self._sent(channel_id)

    async def send_embed(self, channel_id: int, embed: Embed) -> SentMessage:
        self.embeds.append((channel_id, embed))
        return self._sent(channel_id)

    async def delete_messages(self, channel_id: int, message_ids: list[int]) -> None:
        self.deleted.append((channel_id, message_ids))

    def can_embed(self, channel_id: int) -> bool:
        return self.embeds_allowed

    @property
    def texts(self) -> list[str]:
        return [content for _, content in self.messages]


@pytest.fixture
def bot_user() -> User:
    return User(id=BOT_ID, username="chatcmd", bot=True)


@pytest.fixture
def author() -> User:
    return User(id=1, username="tester")


@pytest.fixture
def members(author: User) -> list[Member]:
    """Guild members: the author plus alice, alice2 and bob."""
    return [
        Member(user=author, guild_id=GUILD_ID),
        Member(user=User(id=11, username="alice"), guild_id=GUILD_ID),
        Member(user=User(id=12, username="alice2"), guild_id=GUILD_ID, nick="Al"),
        Member(user=User(id=13, username="bob"), guild_id=GUILD_ID, nick="Bobby"),
    ]


@pytest.fixture
def guild(members: list[Member]) -> Guild:
    return Guild(
        id=GUILD_ID,
        name="Test Guild",
        members=members,
        channels={
            CHANNEL_ID: Channel(id=CHANNEL_ID, name="general", guild_id=GUILD_ID),
            201: Channel(id=201, name="random", guild_id=GUILD_ID),
        },
    )


@pytest.fixture
def state(bot_user: User, guild: Guild) -> InMemoryState:
    """State with one guild and one DM channel; user 99 exists outside the guild."""
    return InMemoryState(
        bot_user=bot_user,
        guilds=[guild],
        channels=[Channel(id=DM_CHANNEL_ID, name="dm")],
        users=[User(id=99, username="outsider")],
    )


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def guild_message(author: User, members: list[Member]) -> Callable[..., Message]:
    """Factory for messages posted in the test guild by the author."""

    def make(content: str, mentions: list[User] | None = None, **kwargs) -> Message:
        return Message(
            content=content,
            author=kwargs.pop("author", author),
            channel_id=kwargs.pop("channel_id", CHANNEL_ID),
            guild_id=GUILD_ID,
            mentions=mentions or [],
            member=kwargs.pop("member", members[0]),
            **kwargs,
        )

    return make


@pytest.fixture
def dm_message(author: User) -> Callable[..., Message]:
    """Factory for direct messages sent by the author."""

    def make(content: str, **kwargs) -> Message:
        return Message(
            content=content,
            author=kwargs.pop("author", author),
            channel_id=DM_CHANNEL_ID,
            **kwargs,
        )

    return make


@pytest.fixture
def make_data(
    state: InMemoryState, guild: Guild, guild_message: Callable[..., Message]
) -> Callable[..., Data]:
    """Factory for guild invocation contexts with the given remaining text."""

    def make(text: str = "", mentions: list[User] | None = None, **kwargs) -> Data:
        msg = guild_message(text, mentions=mentions)
        return Data(
            msg=msg,
            state=state,
            channel=guild.channel(CHANNEL_ID),
            guild=kwargs.pop("guild", guild),
            source=kwargs.pop("source", TriggerSource.PREFIX),
            msg_stripped_prefix=text,
            **kwargs,
        )

    return make


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config with workspace pointing to tmp_path."""
    return Config(workspace=tmp_path)
