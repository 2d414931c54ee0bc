"""Error taxonomy for bitmask compilation.

Every failure is fatal for the compilation pass that raised it.  Errors carry
an optional :class:`SourceLocation` so the CLI can point at the offending
bitmask / flag in the spec file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SourceLocation:
    """Where in a spec an error was found."""

    file: Path | None = None
    bitmask: str | None = None
    item: str | None = None

    def with_item(self, item: str) -> SourceLocation:
        return SourceLocation(self.file, self.bitmask, item)

    def __str__(self) -> str:
        parts = []
        if self.file is not None:
            parts.append(str(self.file))
        if self.bitmask is not None:
            parts.append(f"bitmasks.{self.bitmask}")
        if self.item is not None:
            parts.append(self.item)
        return ":".join(parts)


class SpecError(Exception):
    """Base class for every error raised while compiling a flag spec."""

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def locate(self, location: SourceLocation) -> SpecError:
        """Attach *location* unless the error already has one."""
        if self.location is None:
            self.location = location
        return self

    def __str__(self) -> str:
        where = str(self.location) if self.location is not None else ""
        return f"{where}: {self.message}" if where else self.message


class InvalidWidth(SpecError):
    """Storage width token is not one of the allowed integer types."""


class UnknownConfigOption(SpecError):
    """Config clause names an option outside the recognized set."""


class UnresolvedReference(SpecError):
    """A value expression references a constant that is not defined yet."""


class InvalidIdentifier(SpecError):
    """Type or flag name is not usable as a Python attribute."""


class DuplicateName(SpecError):
    """Two constants of one bitmask share a name."""


class InvalidExpression(SpecError):
    """A value expression is malformed or uses unsupported syntax."""


class ValueOutOfRange(SpecError):
    """A literal or shift does not fit the storage width."""
