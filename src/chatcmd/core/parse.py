"""
Argument tokenizing and binding.

Arguments are split at spaces, or can be put inside quotes (``"`` or a
backtick). Both spaces and quotes can be escaped with ``\\``, and ``\\\\``
escapes the escape character itself. A quote only opens a quoted argument
at the start of an argument; anywhere else it is a normal character.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chatcmd.core.arguments import ArgDef, ParsedArg, new_parsed_args
from chatcmd.core.exceptions import NoComboFoundError, NotEnoughArgumentsError

if TYPE_CHECKING:
    from chatcmd.core.container import RunFunc
    from chatcmd.core.data import Data

logger = logging.getLogger(__name__)

ARG_CONTAINERS = ('"', "`")


@dataclass(frozen=True)
class RawArg:
    """One token of input, with the quote character that delimited it (if any)."""

    text: str
    container: str = ""

    def requoted(self) -> str:
        """The token as the user typed it, quotes included."""
        if self.container:
            return f"{self.container}{self.text}{self.container}"
        return self.text


def split_args(text: str) -> list[RawArg]:
    """Split input into raw arguments. Never fails on malformed quoting."""
    raw_args: list[RawArg] = []

    buf = ""
    escape = False
    container = ""
    for char in text:
        if char == "\\" and not escape:
            escape = True
            continue

        if escape:
            buf += char
            escape = False
            continue

        if container:
            if char == container:
                raw_args.append(RawArg(buf, container))
                buf = ""
                container = ""
            else:
                buf += char
        elif char == " ":
            if buf:
                raw_args.append(RawArg(buf))
                buf = ""
        elif char in ARG_CONTAINERS and not buf:
            container = char
        else:
            buf += char

    # Unterminated quote, keep the quote character as part of the text
    if buf:
        if container:
            buf = container + buf
        raw_args.append(RawArg(buf))

    return raw_args


def find_combo(
    defs: list[ArgDef], combos: list[list[int]] | None, args: list[RawArg]
) -> list[int] | None:
    """
    Find the argument combo that best fits the input.

    With no combos declared every definition is used in order. Otherwise
    the longest combo whose types all match the input wins; on a tie the
    first declared one is kept.

    Returns:
        Indices into ``defs`` in input order, or None if no combo fits
    """
    if not combos:
        return list(range(len(defs)))

    selected: list[int] | None = None
    for combo in combos:
        if len(combo) > len(args):
            continue

        if not all(defs[d].type.matches(defs[d], args[i].text) for i, d in enumerate(combo)):
            continue

        if selected is None or len(combo) > len(selected):
            selected = combo

    return selected


async def parse_switches(
    switches: list[ArgDef], data: "Data", args: list[RawArg]
) -> list[RawArg]:
    """
    Pull ``-switch [value]`` arguments out of the input.

    Sets ``data.switches`` (keyed by switch name, every declared switch
    present) and returns the remaining arguments. Unknown ``-x`` arguments
    and quoted arguments are left in place.
    """
    parsed = {s.switch: ParsedArg(definition=s, value=s.default) for s in switches}
    remaining: list[RawArg] = []

    i = 0
    while i < len(args):
        raw = args[i]
        i += 1

        if raw.container or not raw.text.startswith("-"):
            remaining.append(raw)
            continue

        matched = next((s for s in switches if s.switch == raw.text[1:]), None)
        if matched is None:
            remaining.append(raw)
            continue

        if matched.type is None:
            parsed[matched.switch].value = True
            parsed[matched.switch].raw = raw
            continue

        if i >= len(args):
            # TODO: report a missing switch value to the user instead of ignoring it
            logger.debug(f"Switch -{matched.switch} given without a value, ignoring")
            continue

        value_raw = args[i]
        i += 1
        parsed[matched.switch].value = await matched.type.parse(matched, value_raw.text, data)
        parsed[matched.switch].raw = raw

    data.switches = parsed
    return remaining


async def parse_arg_defs(
    defs: list[ArgDef],
    required: int,
    combos: list[list[int]] | None,
    data: "Data",
    args: list[RawArg],
) -> None:
    """
    Bind positional arguments to ``data.args``.

    The last argument of the chosen combo takes the rest of the input,
    quotes restored, when more arguments were given than the combo uses.

    Raises:
        NoComboFoundError: If the input fits none of the combos
        NotEnoughArgumentsError: If a required argument is missing
        UserError: If an argument fails to parse
    """
    combo = find_combo(defs, combos, args)
    if combo is None:
        raise NoComboFoundError()

    parsed_args = new_parsed_args(defs)
    data.args = parsed_args

    for i, def_index in enumerate(combo):
        definition = defs[def_index]
        if i >= len(args):
            if i >= required and not combos:
                break
            raise NotEnoughArgumentsError()

        if i == len(combo) - 1 and len(args) - 1 > i:
            part = " ".join(raw.requoted() for raw in args[i:])
        else:
            part = args[i].text

        parsed_args[def_index].value = await definition.type.parse(definition, part, data)
        parsed_args[def_index].raw = args[i]


async def parse_cmd_args(data: "Data") -> None:
    """Parse switches and positional arguments for the matched command."""
    cmd = data.cmd.command
    if not cmd.switches and not cmd.arg_defs:
        return

    args = split_args(data.msg_stripped_prefix)

    if cmd.switches:
        args = await parse_switches(cmd.switches, data, args)

    if cmd.arg_defs:
        await parse_arg_defs(cmd.arg_defs, cmd.required_args, cmd.arg_combos, data, args)


def arg_parser_hook(inner: "RunFunc") -> "RunFunc":
    """Hook that parses the command's arguments before running it."""

    async def run(data: "Data"):
        await parse_cmd_args(data)
        return await inner(data)

    return run
