"""Exception hierarchy for tjson."""


class TjsonError(Exception):
    """Base class for every error raised by tjson."""


class MemberAccessError(TjsonError):
    """
    Raised when a record member cannot be read or written.

    Encoding raises it directly; during decoding it reaches the caller
    wrapped in a DeserializationError.
    """

    def __init__(self, owner: type, member: str, reason: str = "") -> None:
        self.owner = owner
        self.member = member
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"Cannot access member {member!r} of "
            f"{owner.__qualname__}{detail}"
        )


class ConstructionError(TjsonError, TypeError):
    """
    Raised when calling a target type with no arguments fails.

    Covers missing parameterless constructors as well as constructors
    that raise; the original exception is kept as __cause__.
    """

    def __init__(self, target: type) -> None:
        self.target = target
        super().__init__(
            f"{target.__qualname__} could not be constructed without "
            "arguments"
        )


class UnsupportedShapeError(TjsonError, ValueError):
    """Raised when JSON text and the requested target type do not fit."""


class DeserializationError(TjsonError, ValueError):
    """
    Single error kind raised by from_json for every decode failure.

    The failure that triggered it, however deep in the recursion it
    happened, is available as cause (and as __cause__).
    """

    def __init__(self, msg: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)
