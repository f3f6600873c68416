"""Core command dispatch functionality."""

from .arguments import (
    AdvUser,
    AdvUserArg,
    AdvUserMatch,
    AdvUserNoMember,
    ArgDef,
    ArgType,
    ChannelArg,
    ChannelType,
    Float,
    FloatArg,
    Int,
    IntArg,
    ParsedArg,
    String,
    StringArg,
    UserArg,
    UserID,
    UserIDArg,
    UserReqMention,
    UserType,
)
from .commands import Category, Command, HelpCommand, command, register_builtins
from .container import Container, ContainerConfig, RegisteredCommand, Trigger
from .data import Data, TriggerSource
from .exceptions import CommandError, SimpleUserError, UserError, is_user_error
from .model import Channel, Guild, InMemoryState, Member, Message, StateProvider, User
from .parse import RawArg, arg_parser_hook, find_combo, split_args
from .response import (
    Embed,
    EmbedField,
    FallbackEmbed,
    MessageSender,
    Response,
    ResponseSender,
    StdResponseSender,
    TemporaryResponse,
)
from .system import PrefixProvider, SimplePrefixProvider, System

__all__ = [
    "AdvUser",
    "AdvUserArg",
    "AdvUserMatch",
    "AdvUserNoMember",
    "ArgDef",
    "ArgType",
    "Category",
    "Channel",
    "ChannelArg",
    "ChannelType",
    "Command",
    "CommandError",
    "Container",
    "ContainerConfig",
    "Data",
    "Embed",
    "EmbedField",
    "FallbackEmbed",
    "Float",
    "FloatArg",
    "Guild",
    "HelpCommand",
    "InMemoryState",
    "Int",
    "IntArg",
    "Member",
    "Message",
    "MessageSender",
    "ParsedArg",
    "PrefixProvider",
    "RawArg",
    "RegisteredCommand",
    "Response",
    "ResponseSender",
    "SimplePrefixProvider",
    "SimpleUserError",
    "StateProvider",
    "StdResponseSender",
    "String",
    "StringArg",
    "System",
    "TemporaryResponse",
    "Trigger",
    "TriggerSource",
    "User",
    "UserArg",
    "UserError",
    "UserID",
    "UserIDArg",
    "UserReqMention",
    "UserType",
    "arg_parser_hook",
    "command",
    "find_combo",
    "is_user_error",
    "register_builtins",
    "split_args",
]
