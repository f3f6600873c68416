"""Turning command results into outgoing messages."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from chatcmd.core.exceptions import UnknownReplyTypeError, is_user_error

if TYPE_CHECKING:
    from chatcmd.core.data import Data

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


@dataclass
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass
class Embed:
    """A rich message."""

    title: str = ""
    description: str = ""
    color: int = 0
    fields: list[EmbedField] = field(default_factory=list)
    footer: str = ""


@dataclass
class SentMessage:
    """Reference to a message the bot sent."""

    id: int
    channel_id: int


class MessageSender(ABC):
    """Outbound side of a platform connection."""

    @abstractmethod
    async def send_message(self, channel_id: int, content: str) -> SentMessage:
        pass

    @abstractmethod
    async def send_embed(self, channel_id: int, embed: Embed) -> SentMessage:
        pass

    @abstractmethod
    async def delete_messages(self, channel_id: int, message_ids: list[int]) -> None:
        pass

    def can_embed(self, channel_id: int) -> bool:
        """Whether the bot may send embeds in the channel."""
        return True


class Response(ABC):
    """A result type that knows how to send itself."""

    @abstractmethod
    async def send(self, data: "Data", sender: MessageSender) -> list[SentMessage]:
        pass


def escape_everyone_mention(text: str) -> str:
    """Break ``@everyone`` and ``@here`` so they don't ping anyone."""
    return text.replace("@everyone", "@\u200beveryone").replace("@here", "@\u200bhere")


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """
    Split text into chunks of at most ``limit`` characters.

    Splits at the last newline, or failing that the last space, inside
    the limit; words longer than the limit are cut.
    """
    chunks = []
    rest = text
    while len(rest) > limit:
        cut = rest.rfind("\n", 0, limit + 1)
        if cut <= 0:
            cut = rest.rfind(" ", 0, limit + 1)
        if cut <= 0:
            cut = limit
            chunks.append(rest[:cut])
            rest = rest[cut:]
        else:
            chunks.append(rest[:cut])
            rest = rest[cut + 1 :]

    if rest:
        chunks.append(rest)
    return chunks


def embed_to_text(embed: Embed) -> str:
    """Render an embed as plain markdown text."""
    body = ""
    if embed.title:
        body += f"**{embed.title}**\n"
    if embed.description:
        body += embed.description + "\n"
    if body:
        body += "\n"

    for f in embed.fields:
        body += f"**{f.name}**\n{f.value}\n\n"
    return body


async def send_reply(
    data: "Data", sender: MessageSender, reply: Any, escape_everyone: bool = False
) -> list[SentMessage]:
    """
    Send any supported reply shape to the channel the command came from.

    Raises:
        UnknownReplyTypeError: If the reply shape is not supported
    """
    channel_id = data.msg.channel_id

    if reply is None:
        return []

    if isinstance(reply, Response):
        return await reply.send(data, sender)

    if isinstance(reply, BaseException):
        reply = str(reply)

    if isinstance(reply, str):
        if escape_everyone:
            reply = escape_everyone_mention(reply)
        return [await sender.send_message(channel_id, chunk) for chunk in split_message(reply)]

    if isinstance(reply, Embed):
        return [await sender.send_embed(channel_id, reply)]

    if isinstance(reply, list) and all(isinstance(e, Embed) for e in reply):
        return [await sender.send_embed(channel_id, e) for e in reply]

    raise UnknownReplyTypeError(reply)


class TemporaryResponse(Response):
    """Sends the inner reply, then deletes it again after ``duration`` seconds."""

    def __init__(self, reply: Any, duration: float, escape_everyone: bool = False):
        self.reply = reply
        self.duration = duration
        self.escape_everyone = escape_everyone
        self._delete_task: asyncio.Task | None = None

    async def send(self, data: "Data", sender: MessageSender) -> list[SentMessage]:
        sent = await send_reply(data, sender, self.reply, self.escape_everyone)
        if sent:
            self._delete_task = asyncio.create_task(self._delete_later(sender, sent))
        return sent

    async def _delete_later(self, sender: MessageSender, sent: list[SentMessage]) -> None:
        await asyncio.sleep(self.duration)
        try:
            await sender.delete_messages(sent[0].channel_id, [m.id for m in sent])
        except Exception as e:
            logger.error(f"Failed to delete temporary response: {e}")


class FallbackEmbed(Response):
    """Sends an embed, or its text rendering if the bot cannot embed links."""

    def __init__(self, embed: Embed):
        self.embed = embed

    async def send(self, data: "Data", sender: MessageSender) -> list[SentMessage]:
        if sender.can_embed(data.msg.channel_id):
            return [await sender.send_embed(data.msg.channel_id, self.embed)]

        content = (
            embed_to_text(self.embed)
            + "\n*I have no 'embed links' permissions here, this is a fallback.*"
        )
        return await send_reply(data, sender, content)


class ResponseSender(ABC):
    """Decides what to send once a command returned or failed."""

    @abstractmethod
    async def send_response(self, data: "Data", response: Any, error: Exception | None) -> None:
        pass


class StdResponseSender(ResponseSender):
    """
    Sends results as they are, and errors as text.

    User errors are sent as their message; any other error is sent as
    ``"<command>" command returned an error: ...``.
    """

    def __init__(self, sender: MessageSender, log_errors: bool = True):
        self.sender = sender
        self.log_errors = log_errors

    async def send_response(self, data: "Data", response: Any, error: Exception | None) -> None:
        name = data.cmd.format_names() if data.cmd is not None else "<default>"

        if error is not None and self.log_errors:
            logger.error(
                f"Command {name!r} returned an error: {error}",
                exc_info=None if is_user_error(error) else error,
            )

        if response is None and error is not None:
            if is_user_error(error):
                await send_reply(data, self.sender, str(error), escape_everyone=True)
            else:
                await send_reply(
                    data,
                    self.sender,
                    f'"{name}" command returned an error: {error}',
                    escape_everyone=True,
                )
        elif response is not None:
            await send_reply(data, self.sender, response)
