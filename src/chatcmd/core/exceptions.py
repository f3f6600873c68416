"""Exceptions raised while routing, parsing and answering commands."""


class CommandError(Exception):
    """Base class for errors raised by the command system."""

    is_user_error = False


class UserError(CommandError):
    """An error caused by the invoking user's input, safe to show back to them."""

    is_user_error = True


class SimpleUserError(UserError):
    """A user error carrying a free-form message."""

    pass


class InvalidIntError(UserError):
    """Raised when an argument is not a whole number."""

    def __init__(self, part: str):
        super().__init__(f'"{part}" is not a whole number')
        self.part = part


class InvalidFloatError(UserError):
    """Raised when an argument is not a number."""

    def __init__(self, part: str):
        super().__init__(f'"{part}" is not a number')
        self.part = part


class OutOfRangeError(UserError):
    """Raised when a numeric argument falls outside its declared range."""

    def __init__(
        self,
        got: int | float,
        min: int | float,
        max: int | float,
        arg_name: str = "",
        is_float: bool = False,
    ):
        self.got = got
        self.min = min
        self.max = max
        self.arg_name = arg_name
        self.is_float = is_float

        size = "too small" if got < min else "too big"
        if is_float:
            bounds = f"{min:f} - {max:f}"
        else:
            bounds = f"{min} - {max}"
        super().__init__(f"{arg_name} is {size} (has to be within {bounds})")


class ImproperMentionError(UserError):
    """Raised when a mention is malformed or does not refer to a mentioned user."""

    def __init__(self, part: str):
        super().__init__(f'Improper mention "{part}"')
        self.part = part


class UserNotFoundError(UserError):
    """Raised when no user matches an argument."""

    def __init__(self, part: str):
        super().__init__(f'User "{part}" not found')
        self.part = part


class AmbiguousUserError(UserError):
    """Raised when several users match a name exactly."""

    def __init__(self, part: str, candidates: list[str]):
        names = ", ".join(f"`{c}`" for c in candidates)
        super().__init__(
            f"Too many users with that name, {names}. "
            "Please re-run the command with a narrower search, mention or ID."
        )
        self.part = part
        self.candidates = candidates


class UserSuggestionError(UserError):
    """Raised when a name only partially matches some users."""

    def __init__(self, part: str, candidates: list[str]):
        names = ", ".join(f"`{c}`" for c in candidates)
        super().__init__(
            f"Did you mean one of these? {names}. "
            "Please re-run the command with a narrower search, mention or ID."
        )
        self.part = part
        self.candidates = candidates


class ChannelNotFoundError(UserError):
    """Raised when a channel argument does not resolve to a channel of the guild."""

    def __init__(self, channel_id: int):
        super().__init__(f"Channel {channel_id} not found")
        self.channel_id = channel_id


class NoComboFoundError(UserError):
    """Raised when the input fits none of the accepted argument shapes."""

    def __init__(self):
        super().__init__("No matching combo found")


class NotEnoughArgumentsError(UserError):
    """Raised when fewer arguments were given than required."""

    def __init__(self):
        super().__init__("Not enough arguments passed")


class UnknownReplyTypeError(CommandError):
    """Raised when a handler returns a value the response layer cannot send."""

    def __init__(self, reply: object):
        super().__init__(
            f"Unknown reply type: {type(reply).__name__} (does not implement Response)"
        )
        self.reply = reply


class ResourceUnavailableError(CommandError):
    """Raised when the state needed to handle a message is missing."""

    def __init__(self, kind: str, resource_id: int):
        super().__init__(f"{kind.capitalize()} {resource_id} not available")
        self.kind = kind
        self.resource_id = resource_id


class InvalidRegistrationError(CommandError):
    """Raised when a command is registered with inconsistent declarations."""

    pass


class ContainerSealedError(CommandError):
    """Raised when registering into a container after its hook chains were built."""

    pass


def is_user_error(err: BaseException | None) -> bool:
    """
    Check whether an error, or any error it wraps, is a user error.

    Only explicit wrapping (``raise SomeError(...) from user_err``) keeps
    the user-facing tag. An error raised while a user error was being
    handled is not a user error.
    """
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if getattr(err, "is_user_error", False):
            return True
        seen.add(id(err))
        err = err.__cause__
    return False
