"""Argument definitions, parsed values and the built-in argument types."""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from chatcmd.core.exceptions import (
    AmbiguousUserError,
    ChannelNotFoundError,
    ImproperMentionError,
    InvalidFloatError,
    InvalidIntError,
    OutOfRangeError,
    UserNotFoundError,
    UserSuggestionError,
)
from chatcmd.core.model import Channel, Guild, Member, User

if TYPE_CHECKING:
    from chatcmd.core.data import Data
    from chatcmd.core.parse import RawArg

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Max candidates collected per match kind when searching members by name
MAX_NAME_MATCHES = 5

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def parse_int64(part: str) -> int | None:
    """Parse a base-10 signed 64-bit integer, returning None if malformed."""
    if not _INT_RE.fullmatch(part):
        return None
    value = int(part)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def parse_float64(part: str) -> float | None:
    """Parse a base-10 floating point number, returning None if malformed."""
    if not _FLOAT_RE.fullmatch(part):
        return None
    return float(part)


def is_user_mention(part: str) -> bool:
    return part.startswith("<@") and part.endswith(">")


def mention_id(part: str) -> int | None:
    """Extract the user id from a ``<@id>`` or ``<@!id>`` mention."""
    if len(part) <= 3 or not is_user_mention(part):
        return None
    return parse_int64(part[2:-1].removeprefix("!"))


@dataclass(frozen=True)
class ArgDef:
    """
    Declaration of one positional argument or switch.

    Attributes:
        name: Identifier shown in help and error messages
        type: Argument type; a switch with no type is a boolean flag
        switch: Flag name when used as a switch (``-switch``)
        help: Help text
        default: Value bound when the argument is absent
    """

    name: str = ""
    type: "ArgType | None" = None
    switch: str = ""
    help: str = ""
    default: Any = None


@dataclass
class ParsedArg:
    """The value bound to one ArgDef for a single invocation."""

    definition: ArgDef
    value: Any = None
    raw: "RawArg | None" = None

    def as_str(self) -> str:
        value = self.value
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, AdvUserMatch):
            return value.username
        if isinstance(value, User):
            return value.username
        if isinstance(value, Member):
            return value.user.username
        if isinstance(value, Channel):
            return value.name
        return ""

    def as_int(self) -> int:
        value = self.value
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    def as_float(self) -> float:
        value = self.value
        if isinstance(value, float):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        return 0.0

    def as_bool(self) -> bool:
        value = self.value
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value > 0
        if isinstance(value, str):
            return value != ""
        return value is not None

    def as_user(self) -> User | None:
        value = self.value
        if isinstance(value, User):
            return value
        if isinstance(value, Member):
            return value.user
        if isinstance(value, AdvUserMatch):
            return value.user
        return None

    def as_member(self) -> Member | None:
        value = self.value
        if isinstance(value, Member):
            return value
        if isinstance(value, AdvUserMatch):
            return value.member
        return None

    def as_channel(self) -> Channel | None:
        if isinstance(self.value, Channel):
            return self.value
        return None


def new_parsed_args(defs: list[ArgDef]) -> list[ParsedArg]:
    """Create one ParsedArg per definition, index for index, seeded with defaults."""
    return [ParsedArg(definition=d, value=d.default) for d in defs]


class ArgType(ABC):
    """
    An argument type.

    ``matches`` is a cheap predicate used to pick between argument combos;
    ``parse`` does the real conversion and may consult guild state.
    """

    @abstractmethod
    def matches(self, definition: ArgDef, part: str) -> bool:
        """Return True if the raw part looks like this type."""
        pass

    @abstractmethod
    async def parse(self, definition: ArgDef, part: str, data: "Data") -> Any:
        """
        Convert the raw part.

        Raises:
            UserError: If the part cannot be converted
        """
        pass

    @abstractmethod
    def help_name(self) -> str:
        """Human readable type name for help text."""
        pass


@dataclass(frozen=True)
class IntArg(ArgType):
    """Whole numbers, range checked when ``min != max``."""

    min: int = 0
    max: int = 0

    def matches(self, definition: ArgDef, part: str) -> bool:
        return parse_int64(part) is not None

    async def parse(self, definition: ArgDef, part: str, data: "Data") -> int:
        value = parse_int64(part)
        if value is None:
            raise InvalidIntError(part)

        if self.min != self.max and not self.min <= value <= self.max:
            raise OutOfRangeError(value, self.min, self.max, arg_name=definition.name)

        return value

    def help_name(self) -> str:
        return "Whole number"


@dataclass(frozen=True)
class FloatArg(ArgType):
    """Decimal numbers, range checked when ``min != max``."""

    min: float = 0.0
    max: float = 0.0

    def matches(self, definition: ArgDef, part: str) -> bool:
        return parse_float64(part) is not None

    async def parse(self, definition: ArgDef, part: str, data: "Data") -> float:
        value = parse_float64(part)
        if value is None:
            raise InvalidFloatError(part)

        if self.min != self.max and not self.min <= value <= self.max:
            raise OutOfRangeError(
                value, self.min, self.max, arg_name=definition.name, is_float=True
            )

        return value

    def help_name(self) -> str:
        return "Decimal number"


@dataclass(frozen=True)
class StringArg(ArgType):
    """Any text."""

    def matches(self, definition: ArgDef, part: str) -> bool:
        return True

    async def parse(self, definition: ArgDef, part: str, data: "Data") -> str:
        return part

    def help_name(self) -> str:
        return "Text"


@dataclass(frozen=True)
class UserArg(ArgType):
    """
    A user given by mention, or by exact username unless ``require_mention``.

    Mentions resolve against the message's mention list, names against the
    guild member list.
    """

    require_mention: bool = False

    def matches(self, definition: ArgDef, part: str) -> bool:
        if self.require_mention:
            return is_user_mention(part)
        return True

    async def parse(self, definition: ArgDef, part: str, data: "Data") -> User:
        if part.startswith("<@"):
            user_id = mention_id(part)
            if user_id is not None:
                for user in data.msg.mentions:
                    if user.id == user_id:
                        return user
            raise ImproperMentionError(part)

        if not self.require_mention:
            return find_user_by_username(part, data.guild)

        raise ImproperMentionError(part)

    def help_name(self) -> str:
        if self.require_mention:
            return "User mention"
        return "Mention/Name"


@dataclass(frozen=True)
class UserIDArg(ArgType):
    """A user id, given either as a mention or as a bare number."""

    def matches(self, definition: ArgDef, part: str) -> bool:
        return is_user_mention(part) or parse_int64(part) is not None

    async def parse(self, definition: ArgDef, part: str, data: "Data") -> int:
        if part.startswith("<@") and len(part) > 3:
            user_id = mention_id(part)
            if user_id is None:
                raise ImproperMentionError(part)
            return user_id

        user_id = parse_int64(part)
        if user_id is None:
            raise InvalidIntError(part)
        return user_id

    def help_name(self) -> str:
        return "Mention/ID"


@dataclass(frozen=True)
class ChannelArg(ArgType):
    """A channel of the current guild, given as ``<#id>`` or a bare id."""

    def matches(self, definition: ArgDef, part: str) -> bool:
        if part.startswith("<#") and part.endswith(">"):
            return True
        return parse_int64(part) is not None

    async def parse(self, definition: ArgDef, part: str, data: "Data") -> Channel | None:
        if data.guild is None:
            return None

        if part.startswith("<#"):
            if not part.endswith(">") or len(part) <= 3:
                raise ChannelNotFoundError(0)
            channel_id = parse_int64(part[2:-1])
        else:
            channel_id = parse_int64(part)

        if channel_id is not None and channel_id > 0:
            channel = data.guild.channel(channel_id)
            if channel is not None:
                return channel

        raise ChannelNotFoundError(channel_id or 0)

    def help_name(self) -> str:
        return "Channel"


@dataclass
class AdvUserMatch:
    """Result of an AdvUserArg lookup; ``member`` is None for non-members."""

    user: User
    member: Member | None = None

    @property
    def username(self) -> str:
        return self.user.username


@dataclass(frozen=True)
class AdvUserArg(ArgType):
    """
    A user found by mention, id or (fuzzy) name.

    Resolution order:
        1. A mention present in the message's mention list
        2. With ``enable_id_search``: the guild member with that id, else the
           user profile fetched from the platform unless ``require_membership``
        3. With ``enable_username_search``: a member name search in the guild
    """

    enable_id_search: bool = False
    enable_username_search: bool = False
    require_membership: bool = False

    def matches(self, definition: ArgDef, part: str) -> bool:
        if self.enable_username_search:
            return True
        if self.enable_id_search and parse_int64(part) is not None:
            return True
        return is_user_mention(part)

    async def parse(self, definition: ArgDef, part: str, data: "Data") -> AdvUserMatch:
        user: User | None = None
        member: Member | None = None

        if part.startswith("<@") and len(part) > 3:
            user_id = mention_id(part)
            for mentioned in data.msg.mentions:
                if mentioned.id == user_id:
                    user = mentioned
                    break
            if user is not None and data.guild is not None:
                member = await data.state.get_member(data.guild.id, user.id)
        elif self.enable_id_search:
            user_id = parse_int64(part)
            if user_id is not None:
                if data.guild is not None:
                    member = await data.state.get_member(data.guild.id, user_id)
                if member is None and not self.require_membership:
                    user = await data.state.get_user(user_id)

        if user is None and member is None and self.enable_username_search:
            if data.guild is not None:
                member = find_member_by_name(part, data.guild)

        if member is None and (user is None or self.require_membership):
            raise UserNotFoundError(part)

        if member is not None:
            return AdvUserMatch(user=member.user, member=member)
        return AdvUserMatch(user=user)

    def help_name(self) -> str:
        return "User"


def find_user_by_username(name: str, guild: Guild | None) -> User:
    """
    Find a guild member's user by exact, case-insensitive username.

    Raises:
        UserNotFoundError: If no member has that username
    """
    if guild is None:
        raise UserNotFoundError(name)

    folded = name.casefold()
    for member in guild.iter_members():
        if member.user.username.casefold() == folded:
            return member.user

    raise UserNotFoundError(name)


def find_member_by_name(name: str, guild: Guild) -> Member:
    """
    Search guild members by username or nickname.

    Exact (case-insensitive) matches on username or nickname are preferred;
    substring matches are collected as suggestions. At most MAX_NAME_MATCHES
    of each kind are kept, in member order.

    Raises:
        UserNotFoundError: If nothing matched
        AmbiguousUserError: If more than one member matched exactly
        UserSuggestionError: If only partial matches were found
    """
    folded = name.casefold()
    exact: list[Member] = []
    partial: list[Member] = []

    for member in guild.iter_members():
        names = [member.user.username.casefold()]
        if member.nick:
            names.append(member.nick.casefold())

        if folded in names:
            exact.append(member)
            if len(exact) >= MAX_NAME_MATCHES:
                break
        elif len(partial) < MAX_NAME_MATCHES and any(folded in n for n in names):
            partial.append(member)

    if len(exact) == 1:
        return exact[0]

    if not exact and not partial:
        raise UserNotFoundError(name)

    if len(exact) > 1:
        raise AmbiguousUserError(name, [m.user.username for m in exact])

    logger.debug(f"No exact member match for {name!r}, {len(partial)} partial")
    raise UserSuggestionError(name, [m.user.username for m in partial])


# Shared argument types, never mutated after creation
Int = IntArg()
Float = FloatArg()
String = StringArg()
UserType = UserArg()
UserReqMention = UserArg(require_mention=True)
UserID = UserIDArg()
ChannelType = ChannelArg()
AdvUser = AdvUserArg(
    enable_id_search=True, enable_username_search=True, require_membership=True
)
AdvUserNoMember = AdvUserArg(enable_id_search=True, enable_username_search=True)
