"""Per-invocation command context."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from chatcmd.core.arguments import ParsedArg
from chatcmd.core.model import Channel, Guild, Message, StateProvider

if TYPE_CHECKING:
    from chatcmd.core.container import Container, RegisteredCommand
    from chatcmd.core.system import System


class TriggerSource(Enum):
    """How a message invoked a command."""

    DM = "dm"
    MENTION = "mention"
    PREFIX = "prefix"


@dataclass
class Data:
    """
    Everything known about one message while it is being handled.

    Built fresh for every incoming message. Each routing level strips its
    matched name off ``msg_stripped_prefix`` and appends itself to
    ``container_chain``, so the first element of the chain is the root.
    """

    msg: Message
    state: StateProvider
    channel: Channel | None = None
    guild: Guild | None = None
    system: "System | None" = None
    source: TriggerSource | None = None

    prefix_used: str = ""
    # The message with the prefix (mention or command prefix) removed
    msg_stripped_prefix: str = ""

    cmd: "RegisteredCommand | None" = None
    args: list[ParsedArg] = field(default_factory=list)
    switches: dict[str, ParsedArg] = field(default_factory=dict)
    container_chain: list["Container"] = field(default_factory=list)

    # Free-form values hooks pass down the chain
    values: dict[str, Any] = field(default_factory=dict)

    def switch(self, name: str) -> ParsedArg | None:
        """Get a parsed switch by its switch name."""
        return self.switches.get(name)
