"""Command routing tree and hook composition."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from chatcmd.core.data import Data, TriggerSource
from chatcmd.core.exceptions import ContainerSealedError, InvalidRegistrationError

if TYPE_CHECKING:
    from chatcmd.core.commands.base import Command

logger = logging.getLogger(__name__)

RunFunc = Callable[[Data], Awaitable[Any]]
Hook = Callable[[RunFunc], RunFunc]


@dataclass
class Trigger:
    """Names and per-command behaviour of a registered command."""

    names: list[str]
    hooks: list[Hook] = field(default_factory=list)
    hide_from_help: bool = False
    disable_in_dm: bool = False
    disable_outside_dm: bool = False

    @classmethod
    def new(cls, name: str, *aliases: str) -> "Trigger":
        return cls(names=[name, *aliases])

    def with_hooks(self, *hooks: Hook) -> "Trigger":
        self.hooks = list(hooks)
        return self

    def with_hide_from_help(self, hide: bool = True) -> "Trigger":
        self.hide_from_help = hide
        return self

    def with_disable_in_dm(self, disable: bool = True) -> "Trigger":
        self.disable_in_dm = disable
        return self

    def with_disable_outside_dm(self, disable: bool = True) -> "Trigger":
        self.disable_outside_dm = disable
        return self


@dataclass
class RegisteredCommand:
    """A command (or sub container) bound to its trigger in a container."""

    command: "Command | Container"
    trigger: Trigger
    full_chain: RunFunc | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.trigger.names[0]

    def format_names(self, aliases: bool = False, separator: str = "/") -> str:
        if not aliases:
            return self.name
        return separator.join(self.trigger.names)

    @property
    def is_container(self) -> bool:
        return isinstance(self.command, Container)


@dataclass(frozen=True)
class ContainerConfig:
    """Settings a sub container inherits from its parent."""

    ignore_bots: bool = False
    run_in_dm: bool = False
    help_title_emoji: str = ""
    help_color: int = 0
    help_own_embed: bool = False


class Container:
    """
    A namespace of commands and nested containers.

    Containers are filled at startup and then only read while handling
    messages. ``seal()`` precomputes every command's full hook chain; after
    that, registering more commands or hooks is an error.
    """

    def __init__(
        self,
        names: list[str] | None = None,
        description: str = "",
        long_description: str = "",
        config: ContainerConfig | None = None,
        parent: "Container | None" = None,
    ) -> None:
        self.names = list(names or [])
        self.description = description
        self.long_description = long_description
        self.config = config or ContainerConfig()
        self.parent = parent

        self.commands: list[RegisteredCommand] = []
        self.hooks: list[Hook] = []

        # Default handlers
        self.default_mention: "Command | None" = None
        self.not_found: "Command | None" = None
        self.dm_not_found: "Command | None" = None

        self._sealed = False

    # Registration

    def add_command(self, cmd: "Command", trigger: Trigger) -> RegisteredCommand:
        """Register a command under the trigger's names."""
        self._check_not_sealed()
        if not trigger.names:
            raise InvalidRegistrationError("A trigger needs at least one name")
        if not isinstance(cmd, Container):
            _validate_declarations(cmd, trigger.names[0])

        registered = RegisteredCommand(command=cmd, trigger=trigger)
        self.commands.append(registered)
        return registered

    def add_hooks(self, *hooks: Hook) -> None:
        """Add hooks that wrap every command in this container and below."""
        self._check_not_sealed()
        self.hooks.extend(hooks)

    def sub(self, name: str, *aliases: str, description: str = "") -> "Container":
        """Create and register a child container inheriting this container's config."""
        self._check_not_sealed()
        child = Container(
            names=[name, *aliases],
            description=description,
            config=self.config,
            parent=self,
        )
        self.add_command(child, Trigger.new(name, *aliases))
        return child

    def _check_not_sealed(self) -> None:
        if self._sealed:
            raise ContainerSealedError(
                f"Container {self.full_name() or '<root>'!r} is sealed"
            )

    # Lookup

    def find_command(self, search: str) -> tuple[RegisteredCommand | None, str]:
        """
        Match the first word of ``search`` against the registered names.

        Returns:
            (command, rest) on a match, (None, search) otherwise
        """
        first = search.split(" ", 1)[0]

        for registered in self.commands:
            for name in registered.trigger.names:
                if name.lower() == first.lower():
                    return registered, search[len(first):].strip()

        return None, search

    def abs_find_command(self, search: str) -> tuple[RegisteredCommand | None, "Container"]:
        """Resolve ``search`` through nested containers."""
        if not search:
            return None, self

        registered, rest = self.find_command(search)
        if registered is None:
            return None, self

        if isinstance(registered.command, Container):
            if not rest:
                return registered, self
            return registered.command.abs_find_command(rest)

        return registered, self

    def full_name(self, aliases: bool = False) -> str:
        """Space separated names from the root down to this container."""
        name = self.parent.full_name(aliases) if self.parent is not None else ""
        if not self.names:
            return name

        own = "/".join(self.names) if aliases else self.names[0]
        return f"{name} {own}" if name else own

    # Hook chains

    def _wrap(self, run: RunFunc) -> RunFunc:
        for hook in reversed(self.hooks):
            run = hook(run)
        return run

    def seal(self) -> None:
        """Build and cache the full hook chain of every command in the tree."""
        self._seal([])

    def _seal(self, chain: list["Container"]) -> None:
        chain = [*chain, self]
        for registered in self.commands:
            if isinstance(registered.command, Container):
                registered.command._seal(chain)
            else:
                registered.full_chain = build_chain(registered, chain)
        self._sealed = True
        logger.debug(f"Sealed container {self.full_name() or '<root>'!r}")

    # Running

    def _should_ignore(self, data: Data) -> bool:
        if self.config.ignore_bots and data.msg.author.bot:
            return True

        if data.source == TriggerSource.DM and not self.config.run_in_dm:
            return True

        return False

    async def run(self, data: Data) -> Any:
        """Route the remaining message text to a command and run it."""
        if self._should_ignore(data):
            return None

        registered, rest = self.find_command(data.msg_stripped_prefix)
        data.container_chain.append(self)

        if registered is None:
            handler = self._default_handler(data)
            if handler is None:
                return None
            return await handler.run(data)

        data.msg_stripped_prefix = rest

        if isinstance(registered.command, Container):
            return await registered.command.run(data)

        data.cmd = registered

        if registered.trigger.disable_in_dm and data.source == TriggerSource.DM:
            return None
        if registered.trigger.disable_outside_dm and data.source != TriggerSource.DM:
            return None

        logger.debug(f"Running command {registered.name!r}")
        run = registered.full_chain
        if run is None:
            run = build_chain(registered, data.container_chain)
        return await run(data)

    def _default_handler(self, data: Data) -> "Command | None":
        if (
            data.source == TriggerSource.MENTION
            and not data.msg_stripped_prefix
            and self.default_mention is not None
        ):
            return self.default_mention
        if data.source in (TriggerSource.MENTION, TriggerSource.PREFIX):
            return self.not_found
        if data.source == TriggerSource.DM:
            return self.dm_not_found or self.not_found
        return None


def build_chain(registered: RegisteredCommand, containers: list[Container]) -> RunFunc:
    """
    Wrap a command in its hooks.

    The trigger's own hooks end up innermost, the root container's hooks
    outermost.
    """
    run: RunFunc = registered.command.run
    for hook in reversed(registered.trigger.hooks):
        run = hook(run)
    for container in reversed(containers):
        run = container._wrap(run)
    return run


def _validate_declarations(cmd: "Command", name: str) -> None:
    for switch in cmd.switches:
        if not switch.switch:
            raise InvalidRegistrationError(
                f"Switch {switch.name!r} of command {name!r} has no switch name"
            )

    for combo in cmd.arg_combos:
        for index in combo:
            if not 0 <= index < len(cmd.arg_defs):
                raise InvalidRegistrationError(
                    f"Combo {combo} of command {name!r} refers to unknown argument {index}"
                )

    for definition in cmd.arg_defs:
        if definition.type is None:
            raise InvalidRegistrationError(
                f"Argument {definition.name!r} of command {name!r} has no type"
            )
