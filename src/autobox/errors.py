"""Exception types raised by autobox.

Only manifest loading and registry construction raise to the caller.
Failures inside inference are turned into diagnostics by the engine.
"""

from __future__ import annotations


class AutoboxError(Exception):
    """Base class for all autobox errors."""


class ManifestError(AutoboxError):
    """The declarations manifest could not be read or validated."""


class ExpressionSyntaxError(AutoboxError):
    """An expression string is not valid expression syntax."""

    def __init__(self, text: str, position: int, reason: str) -> None:
        self.text = text
        self.position = position
        self.reason = reason
        super().__init__(f"{reason} at position {position} in {text!r}")


class DuplicateFunctionError(AutoboxError):
    """Two specifications were supplied for the same function name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"duplicate specification for function {name!r}")


class DanglingReferenceError(AutoboxError):
    """An expression refers to a name that is not bound at that point."""

    def __init__(self, function: str, names: list[str]) -> None:
        self.function = function
        self.names = names
        super().__init__(
            f"{function}: undefined reference(s) {', '.join(names)}"
        )


class UnsupportedStatementError(AutoboxError):
    """A function body contains a construct the tracer does not model."""

    def __init__(self, function: str, construct: str) -> None:
        self.function = function
        self.construct = construct
        super().__init__(f"{function}: unsupported statement {construct!r}")
