"""Command base classes and built-in commands."""

from chatcmd.core.commands.base import Category, Command, FunctionCommand, command
from chatcmd.core.commands.handlers import HelpCommand, StdHelpFormatter, register_builtins

__all__ = [
    "Category",
    "Command",
    "FunctionCommand",
    "HelpCommand",
    "StdHelpFormatter",
    "command",
    "register_builtins",
]
