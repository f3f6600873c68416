"""Tests for argument tokenizing and binding."""

import pytest

from chatcmd.core.arguments import ArgDef, Float, Int, IntArg, String, UserType
from chatcmd.core.commands.base import FunctionCommand
from chatcmd.core.container import RegisteredCommand, Trigger
from chatcmd.core.exceptions import (
    InvalidIntError,
    NoComboFoundError,
    NotEnoughArgumentsError,
    OutOfRangeError,
)
from chatcmd.core.parse import (
    RawArg,
    find_combo,
    parse_arg_defs,
    parse_cmd_args,
    parse_switches,
    split_args,
)


def texts(raw_args: list[RawArg]) -> list[str]:
    return [raw.text for raw in raw_args]


def bind(data, **declarations) -> None:
    """Attach a no-op command with the given argument declarations to data."""

    async def noop(d):
        return None

    cmd = FunctionCommand(noop, **declarations)
    data.cmd = RegisteredCommand(command=cmd, trigger=Trigger.new("cmd"))


class TestSplitArgs:
    """Tests for split_args."""

    def test_backtick_quoted_middle(self):
        """A backtick quoted argument keeps its spaces and records the quote."""
        result = split_args("first `middle quoted` last")

        assert texts(result) == ["first", "middle quoted", "last"]
        assert [r.container for r in result] == ["", "`", ""]

    def test_double_quotes(self):
        result = split_args('say "hello world"')

        assert result == [RawArg("say"), RawArg("hello world", '"')]

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("", []),
            ("   ", []),
            ("a", ["a"]),
            ("a   b", ["a", "b"]),
            ("a ", ["a"]),
            (r"a\ b c", ["a b", "c"]),
            (r"\"quoted", ['"quoted']),
            (r"a\\ b", ["a\\", "b"]),
            (r'"with \" inside"', ['with " inside']),
            ('ab"c d"', ['ab"c', 'd"']),
        ],
    )
    def test_splitting(self, text, expected):
        """Spaces separate arguments unless escaped or quoted."""
        assert texts(split_args(text)) == expected

    def test_unterminated_quote_keeps_quote_char(self):
        """An unterminated quote never fails, the quote becomes literal text."""
        result = split_args('one "two three')

        assert texts(result) == ["one", '"two three']
        assert result[1].container == ""

    def test_empty_quoted_argument(self):
        result = split_args('"" x')

        assert result == [RawArg("", '"'), RawArg("x")]

    def test_is_pure(self):
        """Splitting the same input twice gives identical results."""
        text = 'a "b c" `d` e\\ f'
        assert split_args(text) == split_args(text)

    def test_requoted(self):
        assert RawArg("a b", '"').requoted() == '"a b"'
        assert RawArg("plain").requoted() == "plain"


class TestFindCombo:
    """Tests for find_combo."""

    def test_no_combos_uses_all_defs_in_order(self):
        defs = [ArgDef(name="a", type=Int), ArgDef(name="b", type=Float)]

        assert find_combo(defs, None, split_args("15 30.5")) == [0, 1]
        assert find_combo(defs, [], split_args("")) == [0, 1]

    def test_longest_matching_combo_wins(self):
        defs = [ArgDef(name="num", type=Int), ArgDef(name="text", type=String)]
        combos = [[1], [0, 1]]

        assert find_combo(defs, combos, split_args("5 hello")) == [0, 1]
        assert find_combo(defs, combos, split_args("hello")) == [1]

    def test_combo_longer_than_input_is_skipped(self):
        defs = [ArgDef(name="a", type=Int), ArgDef(name="b", type=Int)]

        assert find_combo(defs, [[0, 1], [0]], split_args("1")) == [0]

    def test_tie_keeps_first_declared(self):
        defs = [ArgDef(name="a", type=String), ArgDef(name="b", type=String)]

        assert find_combo(defs, [[1], [0]], split_args("x")) == [1]

    def test_type_mismatch_rejects_combo(self):
        defs = [ArgDef(name="a", type=Int), ArgDef(name="b", type=String)]

        assert find_combo(defs, [[0, 1]], split_args("x y")) is None

    def test_no_viable_combo(self):
        defs = [ArgDef(name="a", type=Int)]

        assert find_combo(defs, [[0]], split_args("nope")) is None

    def test_is_pure(self):
        defs = [ArgDef(name="a", type=Int), ArgDef(name="b", type=String)]
        args = split_args("1 two")

        first = find_combo(defs, [[1], [0, 1]], args)
        assert find_combo(defs, [[1], [0, 1]], args) == first


class TestParseSwitches:
    """Tests for parse_switches."""

    @pytest.mark.anyio
    async def test_boolean_switch(self, make_data):
        data = make_data()
        switches = [ArgDef(name="force", switch="f")]

        remaining = await parse_switches(switches, data, split_args("-f rest"))

        assert texts(remaining) == ["rest"]
        assert data.switch("f").value is True
        assert data.switch("f").raw == RawArg("-f")

    @pytest.mark.anyio
    async def test_every_declared_switch_is_present(self, make_data):
        """Switches not given keep their default."""
        data = make_data()
        switches = [
            ArgDef(name="force", switch="f"),
            ArgDef(name="count", switch="n", type=Int, default=3),
        ]

        await parse_switches(switches, data, split_args("nothing"))

        assert data.switch("f").value is None
        assert data.switch("n").as_int() == 3
        assert data.switch("n").raw is None

    @pytest.mark.anyio
    async def test_value_switch_consumes_next_argument(self, make_data):
        data = make_data()
        switches = [ArgDef(name="count", switch="n", type=Int)]

        remaining = await parse_switches(switches, data, split_args("a -n 7 b"))

        assert texts(remaining) == ["a", "b"]
        assert data.switch("n").value == 7

    @pytest.mark.anyio
    async def test_unknown_switch_passes_through(self, make_data):
        data = make_data()
        switches = [ArgDef(name="force", switch="f")]

        remaining = await parse_switches(switches, data, split_args("-x -f"))

        assert texts(remaining) == ["-x"]
        assert data.switch("f").value is True

    @pytest.mark.anyio
    async def test_quoted_switch_is_positional(self, make_data):
        data = make_data()
        switches = [ArgDef(name="force", switch="f")]

        remaining = await parse_switches(switches, data, split_args('"-f"'))

        assert remaining == [RawArg("-f", '"')]
        assert data.switch("f").value is None

    @pytest.mark.anyio
    async def test_trailing_value_switch_is_skipped(self, make_data):
        """A value switch without a following argument keeps its default."""
        data = make_data()
        switches = [ArgDef(name="count", switch="n", type=Int, default=1)]

        remaining = await parse_switches(switches, data, split_args("5 -n"))

        assert texts(remaining) == ["5"]
        assert data.switch("n").value == 1

    @pytest.mark.anyio
    async def test_switch_value_parse_error_propagates(self, make_data):
        data = make_data()
        switches = [ArgDef(name="count", switch="n", type=Int)]

        with pytest.raises(InvalidIntError):
            await parse_switches(switches, data, split_args("-n many"))


class TestParseArgDefs:
    """Tests for parse_arg_defs."""

    @pytest.mark.anyio
    async def test_int_then_float(self, make_data):
        data = make_data()
        defs = [ArgDef(name="a", type=Int), ArgDef(name="b", type=Float)]

        await parse_arg_defs(defs, 2, None, data, split_args("15 30.5"))

        assert data.args[0].value == 15
        assert data.args[1].value == 30.5

    @pytest.mark.anyio
    async def test_last_argument_slurps_rest(self, make_data):
        data = make_data()
        defs = [ArgDef(name="n", type=Int), ArgDef(name="text", type=String)]

        await parse_arg_defs(defs, 2, None, data, split_args("5 hello world"))

        assert data.args[0].as_int() == 5
        assert data.args[1].as_str() == "hello world"

    @pytest.mark.anyio
    async def test_slurp_restores_quotes(self, make_data):
        data = make_data()
        defs = [ArgDef(name="text", type=String)]

        await parse_arg_defs(defs, 1, None, data, split_args('say "hi there" `x`'))

        assert data.args[0].as_str() == 'say "hi there" `x`'

    @pytest.mark.anyio
    async def test_optional_trailing_args_keep_defaults(self, make_data):
        data = make_data()
        defs = [
            ArgDef(name="a", type=Int),
            ArgDef(name="b", type=Int, default=42),
        ]

        await parse_arg_defs(defs, 1, None, data, split_args("1"))

        assert data.args[0].as_int() == 1
        assert data.args[1].as_int() == 42
        assert data.args[1].raw is None

    @pytest.mark.anyio
    async def test_missing_required_arg(self, make_data):
        data = make_data()
        defs = [ArgDef(name="a", type=Int), ArgDef(name="b", type=Int)]

        with pytest.raises(NotEnoughArgumentsError):
            await parse_arg_defs(defs, 2, None, data, split_args("1"))

    @pytest.mark.anyio
    async def test_combo_binds_by_definition_index(self, make_data):
        """Values land on the slot of their definition, not their input position."""
        data = make_data()
        defs = [ArgDef(name="num", type=Int), ArgDef(name="text", type=String)]

        await parse_arg_defs(defs, 0, [[1], [0, 1]], data, split_args("hello"))

        assert len(data.args) == 2
        assert data.args[0].value is None
        assert data.args[1].as_str() == "hello"

    @pytest.mark.anyio
    async def test_no_combo_found(self, make_data):
        data = make_data()
        defs = [ArgDef(name="num", type=Int)]

        with pytest.raises(NoComboFoundError):
            await parse_arg_defs(defs, 1, [[0]], data, split_args("abc"))

    @pytest.mark.anyio
    async def test_parse_error_aborts(self, make_data):
        data = make_data()
        defs = [ArgDef(name="num", type=IntArg(min=1, max=10))]

        with pytest.raises(OutOfRangeError):
            await parse_arg_defs(defs, 1, None, data, split_args("11"))


class TestParseCmdArgs:
    """Tests for parse_cmd_args."""

    @pytest.mark.anyio
    async def test_switch_then_positional(self, make_data):
        """-u someone 5 gives the switch a user and binds 5 to the int."""
        data = make_data("-u alice 5")
        bind(
            data,
            arg_defs=[ArgDef(name="n", type=Int)],
            switches=[ArgDef(name="user", switch="u", type=UserType)],
        )

        await parse_cmd_args(data)

        assert data.switch("u").as_user().username == "alice"
        assert data.args[0].value == 5

    @pytest.mark.anyio
    async def test_no_declarations_is_noop(self, make_data):
        data = make_data("anything at all")
        bind(data)

        await parse_cmd_args(data)

        assert data.args == []
        assert data.switches == {}
