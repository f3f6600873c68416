"""Built-in command handlers."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chatcmd.core.arguments import ArgDef, String
from chatcmd.core.commands.base import Category, Command
from chatcmd.core.container import Container, RegisteredCommand, Trigger
from chatcmd.core.exceptions import SimpleUserError
from chatcmd.core.response import Embed

if TYPE_CHECKING:
    from chatcmd.core.data import Data


@dataclass
class CommandSet:
    """Commands shown together in one help embed, grouped by category or container."""

    category: Category | None = None
    container: Container | None = None
    entries: list[tuple[RegisteredCommand, Container]] = field(default_factory=list)

    @property
    def name(self) -> str:
        if self.category is not None:
            return self.category.name
        return self.container.full_name() if self.container else ""

    @property
    def color(self) -> int:
        if self.category is not None:
            return self.category.embed_color
        return self.container.config.help_color if self.container else 0

    @property
    def emoji(self) -> str:
        if self.category is not None:
            return self.category.help_emoji
        return self.container.config.help_title_emoji if self.container else ""


def _find_set(
    sets: list[CommandSet], category: Category | None, container: Container | None
) -> CommandSet | None:
    for s in sets:
        if category is not None and category != s.category:
            continue
        if container is not None and container is not s.container:
            continue
        return s
    return None


def sort_commands(group: Container, container: Container) -> list[CommandSet]:
    """
    Group the visible commands under ``container`` for help output.

    Commands with a category are grouped by category; others by ``group``,
    the closest container (this one or above) that wants its own embed.
    """
    sets: list[CommandSet] = []

    for registered in container.commands:
        if registered.trigger.hide_from_help:
            continue

        cmd = registered.command
        if isinstance(cmd, Container):
            top = cmd if cmd.config.help_own_embed else group
            for merging in sort_commands(top, cmd):
                existing = _find_set(sets, merging.category, merging.container)
                if existing is not None:
                    existing.entries.extend(merging.entries)
                else:
                    sets.append(merging)
            continue

        category = cmd.category
        key_container = None if category is not None else group

        existing = _find_set(sets, category, key_container)
        if existing is None:
            existing = CommandSet(category=category, container=key_container)
            sets.append(existing)
        existing.entries.append((registered, container))

    return sets


def format_args(cmd: Command) -> str:
    """Usage string for a command's positional arguments, e.g. ``<User:User> [Reason:Text]``."""
    parts = []
    for i, definition in enumerate(cmd.arg_defs):
        inner = f"{definition.name}:{definition.type.help_name()}"
        parts.append(f"<{inner}>" if i < cmd.required_args else f"[{inner}]")
    return " ".join(parts)


class StdHelpFormatter:
    """Formats command help as markdown text."""

    def short_cmd_help(self, registered: RegisteredCommand, container: Container) -> str:
        name = container.full_name(aliases=True)
        if name:
            name += " "
        name += registered.format_names(aliases=True)

        cmd = registered.command
        desc = ""
        if cmd.description:
            desc = ": " + cmd.description
        elif cmd.long_description:
            desc = ": " + cmd.long_description

        return f"`{name}`{desc}\n"

    def full_cmd_help(self, registered: RegisteredCommand, container: Container) -> str:
        name = container.full_name()
        if name:
            name += " "
        name += registered.format_names(aliases=True)

        cmd = registered.command
        usage = format_args(cmd)
        out = f"`{name}{' ' + usage if usage else ''}`\n"

        desc = cmd.long_description or cmd.description
        if desc:
            out += desc + "\n"

        if cmd.arg_defs:
            out += "\n**Arguments**\n"
            for definition in cmd.arg_defs:
                out += f"`{definition.name}` ({definition.type.help_name()})"
                out += f": {definition.help}\n" if definition.help else "\n"

        if cmd.switches:
            out += "\n**Switches**\n"
            for switch in cmd.switches:
                value = f" <{switch.type.help_name()}>" if switch.type is not None else ""
                out += f"`-{switch.switch}{value}`"
                out += f": {switch.help}\n" if switch.help else "\n"

        return out


def generate_help(
    data: "Data | None", container: Container, formatter: StdHelpFormatter
) -> list[Embed]:
    """Generate overview help embeds for every visible command under ``container``."""
    invoked = ""
    if data is not None and data.prefix_used:
        invoked = data.prefix_used + " "

    embeds = []
    for command_set in sort_commands(container, container):
        title = command_set.emoji + command_set.name
        if title:
            title += " "

        embeds.append(
            Embed(
                title=title + "Help",
                color=command_set.color,
                description="".join(
                    formatter.short_cmd_help(registered, in_container)
                    for registered, in_container in command_set.entries
                ),
                footer=(
                    f"Do `{invoked}help cmd/container` for more detailed "
                    "information on a command/group of commands"
                ),
            )
        )

    return embeds


class HelpCommand(Command):
    """Show help for all commands, or for one command."""

    description = "Shows short help for all commands, or a longer help for a specific command"
    long_description = (
        "Shows help for all or a specific command\n"
        "Examples:\n"
        "`help` - Shows a short summary about all commands\n"
        "`help info` - Shows a longer help message for info"
    )
    arg_defs = [ArgDef(name="command", type=String, help="Command or container to show help for")]

    def __init__(self, formatter: StdHelpFormatter | None = None):
        self.formatter = formatter or StdHelpFormatter()

    async def run(self, data: "Data") -> list[Embed] | Embed:
        root = data.container_chain[0]
        target = data.args[0].as_str() if data.args else ""

        if not target:
            return generate_help(data, root, self.formatter)

        registered, container = root.abs_find_command(target)
        if registered is None:
            raise SimpleUserError("Unknown command")

        if isinstance(registered.command, Container):
            return generate_help(data, registered.command, self.formatter)

        return Embed(
            title=f"Help for {registered.name}",
            color=container.config.help_color,
            description=self.formatter.full_cmd_help(registered, container),
        )


def register_builtins(container: Container, help_names: list[str] | None = None) -> None:
    """Register the built-in commands in a container."""
    names = help_names or ["help"]
    container.add_command(HelpCommand(), Trigger.new(*names))
