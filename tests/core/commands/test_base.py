"""Tests for command base classes."""

import pytest

from chatcmd.core.arguments import ArgDef, Int
from chatcmd.core.commands.base import Category, Command, FunctionCommand, command


class TestCommandDecorator:
    """Tests for the @command decorator."""

    def test_creates_function_command(self):
        @command(
            arg_defs=[ArgDef(name="n", type=Int)],
            required_args=1,
            switches=[ArgDef(name="loud", switch="l")],
        )
        async def shout(data):
            """Shouts a number"""
            return "!"

        assert isinstance(shout, FunctionCommand)
        assert shout.description == "Shouts a number"
        assert shout.required_args == 1
        assert [d.name for d in shout.arg_defs] == ["n"]
        assert shout.switches[0].switch == "l"

    def test_explicit_description_wins(self):
        @command(description="Explicit")
        async def cmd(data):
            """Docstring"""

        assert cmd.description == "Explicit"

    def test_declarations_are_copied(self):
        defs = [ArgDef(name="n", type=Int)]
        combos = [[0]]
        cmd = FunctionCommand(lambda data: None, arg_defs=defs, arg_combos=combos)

        defs.append(ArgDef(name="m", type=Int))
        combos[0].append(1)

        assert len(cmd.arg_defs) == 1
        assert cmd.arg_combos == [[0]]

    @pytest.mark.anyio
    async def test_runs_async_function(self):
        @command()
        async def cmd(data):
            return f"got {data}"

        assert await cmd.run("data") == "got data"

    @pytest.mark.anyio
    async def test_runs_sync_function(self):
        cmd = FunctionCommand(lambda data: "sync")

        assert await cmd.run(None) == "sync"


class TestCommandClass:
    """Tests for subclassing Command."""

    def test_run_is_abstract(self):
        with pytest.raises(TypeError):
            Command()

    @pytest.mark.anyio
    async def test_subclass_defaults(self):
        class Ping(Command):
            description = "Pong"
            category = Category(name="Fun", help_emoji="*", embed_color=1)

            async def run(self, data):
                return "pong"

        ping = Ping()

        assert ping.arg_defs == ()
        assert ping.switches == ()
        assert ping.required_args == 0
        assert ping.category == Category(name="Fun", help_emoji="*", embed_color=1)
        assert await ping.run(None) == "pong"
