"""Building command systems from configuration and running the buses."""

import asyncio
import importlib
import logging

import typer

from chatcmd.core.commands.handlers import register_builtins
from chatcmd.core.container import Container, ContainerConfig
from chatcmd.core.exceptions import InvalidRegistrationError
from chatcmd.core.system import System
from chatcmd.messagebus.base import MessageBus
from chatcmd.messagebus.cli_bus import CliBus
from chatcmd.utils.config import Config
from chatcmd.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def load_extensions(root: Container, names: list[str]) -> None:
    """
    Import extension modules and let them register their commands.

    Every extension module must define ``setup(container)``.

    Raises:
        ImportError: If a module cannot be imported
        InvalidRegistrationError: If a module has no setup function
    """
    for name in names:
        module = importlib.import_module(name)
        setup = getattr(module, "setup", None)
        if not callable(setup):
            raise InvalidRegistrationError(f"Extension {name!r} has no setup(container) function")
        setup(root)
        logger.info(f"Loaded extension {name!r}")


def build_system(config: Config, bus: MessageBus) -> System:
    """Create a sealed command system for one message bus."""
    commands = config.commands
    system = System.standard(
        bus.state,
        bus.sender,
        static_prefix=commands.prefix,
        config=ContainerConfig(
            ignore_bots=commands.ignore_bots,
            run_in_dm=commands.run_in_dm,
            help_title_emoji="ℹ️",
            help_color=0xBEFF7A,
        ),
        log_errors=commands.log_errors,
    )

    register_builtins(system.root, commands.help_names)
    load_extensions(system.root, commands.extensions)
    system.root.seal()
    return system


async def run_buses(config: Config, buses: list[MessageBus]) -> None:
    """Run every bus with its own command system until all of them stop."""
    tasks = []
    for bus in buses:
        system = build_system(config, bus)
        logger.info(f"Starting {bus.platform_name} bus")
        tasks.append(asyncio.create_task(bus.run(system.handle_message)))

    try:
        await asyncio.gather(*tasks)
    finally:
        for bus in buses:
            await bus.stop()


async def dispatch_line(config: Config, text: str, bus: CliBus) -> bool:
    """
    Run one line through a fresh system as a CLI direct message.

    Returns:
        False if no registered command matches the line
    """
    system = build_system(config, bus)
    registered, _ = system.root.abs_find_command(text.strip())
    if registered is None:
        return False

    await system.check_message(bus.to_message(text))
    return True


def run_command(ctx: typer.Context, cli: bool = False) -> None:
    """Start the configured message buses."""
    config: Config = ctx.obj.get("config")

    setup_logging(config, console_output=not cli)

    buses = [CliBus(config.cli)] if cli else MessageBus.from_config(config)
    if not buses:
        typer.echo("No message bus enabled, configure discord or use --cli")
        raise typer.Exit(1)

    typer.echo(f"Starting chat-cmd with platform(s): {', '.join(b.platform_name for b in buses)}")
    typer.echo("Press Ctrl+C to stop")

    try:
        asyncio.run(run_buses(config, buses))
    except KeyboardInterrupt:
        typer.echo("\nStopped")


def try_command(ctx: typer.Context, text: str) -> None:
    """Dispatch a single line of text as if it came from the CLI bus."""
    config: Config = ctx.obj.get("config")
    setup_logging(config, console_output=False)

    triggered = asyncio.run(dispatch_line(config, text, CliBus(config.cli)))
    if not triggered:
        typer.echo(f"No command matches {text!r}")
        raise typer.Exit(1)
