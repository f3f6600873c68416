"""Base classes for chat commands."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Sequence

from chatcmd.core.arguments import ArgDef

if TYPE_CHECKING:
    from chatcmd.core.data import Data


@dataclass(frozen=True)
class Category:
    """A help grouping shared by commands from different containers."""

    name: str
    description: str = ""
    help_emoji: str = ""
    embed_color: int = 0


class Command(ABC):
    """
    Base class for chat commands.

    Argument declarations are read by the argument parser hook:
    ``arg_defs`` are positional, ``arg_combos`` lists accepted orderings
    (indices into ``arg_defs``) and ``switches`` are ``-name [value]`` flags.
    """

    description: str = ""
    long_description: str = ""
    category: Category | None = None

    # Subclasses replace these; the defaults are shared
    arg_defs: Sequence[ArgDef] = ()
    required_args: int = 0
    arg_combos: Sequence[Sequence[int]] = ()
    switches: Sequence[ArgDef] = ()

    @abstractmethod
    async def run(self, data: "Data") -> Any:
        """
        Execute the command.

        Returns:
            Anything the response sender can send (None sends nothing)
        """
        pass


def command(
    description: str = "",
    long_description: str = "",
    arg_defs: list[ArgDef] | None = None,
    required_args: int = 0,
    arg_combos: list[list[int]] | None = None,
    switches: list[ArgDef] | None = None,
    category: Category | None = None,
) -> Callable:
    """Decorator to turn a function taking Data into a command."""

    def decorator(func: Callable) -> "FunctionCommand":
        return FunctionCommand(
            func,
            description=description,
            long_description=long_description,
            arg_defs=arg_defs,
            required_args=required_args,
            arg_combos=arg_combos,
            switches=switches,
            category=category,
        )

    return decorator


class FunctionCommand(Command):
    """A command created from a function using the @command decorator."""

    def __init__(
        self,
        func: Callable,
        description: str = "",
        long_description: str = "",
        arg_defs: list[ArgDef] | None = None,
        required_args: int = 0,
        arg_combos: list[list[int]] | None = None,
        switches: list[ArgDef] | None = None,
        category: Category | None = None,
    ):
        self._func = func
        self.description = description or (func.__doc__ or "").strip()
        self.long_description = long_description
        self.arg_defs = list(arg_defs or [])
        self.required_args = required_args
        self.arg_combos = [list(c) for c in arg_combos or []]
        self.switches = list(switches or [])
        self.category = category

    async def run(self, data: "Data") -> Any:
        result = self._func(data)
        if asyncio.iscoroutine(result):
            result = await result
        return result
