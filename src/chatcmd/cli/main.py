"""CLI interface for chat-cmd using Typer."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from chatcmd.cli.server import run_command, try_command
from chatcmd.utils.config import Config

app = typer.Typer(
    name="chatcmd",
    help="chat-cmd: command dispatch for chat bots",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()


def load_config_callback(ctx: typer.Context, workspace: str):
    """Load configuration and store it in the context."""
    try:
        cfg = Config.load(Path(workspace))
    except Exception as e:
        console.print(f"[red]Error loading config: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@app.callback()
def main(
    ctx: typer.Context,
    workspace: str = typer.Option(
        Path.home() / ".chat-cmd",
        "--workspace",
        "-w",
        help="Path to workspace directory",
        callback=load_config_callback,
    ),
) -> None:
    """
    chat-cmd: command dispatch for chat bots.

    Configuration is loaded from ~/.chat-cmd/ by default.
    Use --workspace to specify a custom workspace directory.
    """


@app.command()
def run(
    ctx: typer.Context,
    cli: Annotated[
        bool,
        typer.Option("--cli", "-c", help="Read commands from stdin instead of the configured buses"),
    ] = False,
) -> None:
    """Start the bot on the configured message buses."""
    run_command(ctx, cli=cli)


@app.command("try")
def try_(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Message text to dispatch, e.g. 'help'")],
) -> None:
    """Dispatch one message through the command system and print the reply."""
    try_command(ctx, text)


if __name__ == "__main__":
    app()
