"""Data model shared by the compiler stages.

FlagVariant:   one declared flag, with its explicit value expression if any
Config:        the three code-generation toggles
StorageType:   the fixed-width integer backing a bitmask
Constant:      a named value expression emitted on the generated type
GeneratedType: the compiled description handed to the emitter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# ---------------------------------------------------------------------------
# Storage types
# ---------------------------------------------------------------------------

# name -> (bits, signed); None means "pointer-sized"
_STORAGE_PRESETS: dict[str, tuple[int | None, bool]] = {
    "u8": (8, False),
    "u16": (16, False),
    "u32": (32, False),
    "u64": (64, False),
    "u128": (128, False),
    "usize": (None, False),
    "i8": (8, True),
    "i16": (16, True),
    "i32": (32, True),
    "i64": (64, True),
    "i128": (128, True),
    "isize": (None, True),
}

DEFAULT_STORAGE = "usize"
DEFAULT_POINTER_WIDTH = 64
POINTER_WIDTHS = (16, 32, 64)


@dataclass(frozen=True)
class StorageType:
    """A fixed-width integer type, e.g. ``u8`` or ``isize`` on a 64-bit target."""

    name: str
    bits: int
    signed: bool

    @property
    def mask(self) -> int:
        return (1 << self.bits) - 1

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return self.mask >> 1 if self.signed else self.mask

    def normalize(self, value: int) -> int:
        """Wrap *value* into this type's range (two's complement when signed)."""
        value &= self.mask
        if self.signed and value >> (self.bits - 1):
            value -= 1 << self.bits
        return value

    def pattern(self, value: int) -> int:
        """Return the unsigned bit pattern of *value*."""
        return value & self.mask

    def literal(self, value: int) -> str:
        """Render *value* as a zero-padded hex literal of the full width."""
        digits = max(1, self.bits // 4)
        return f"0x{self.pattern(value):0{digits}x}"


def storage_names() -> tuple[str, ...]:
    return tuple(_STORAGE_PRESETS)


def storage_type(name: str, pointer_width: int = DEFAULT_POINTER_WIDTH) -> StorageType:
    """Look up a storage type by name.  Raises ``KeyError`` for unknown names."""
    bits, signed = _STORAGE_PRESETS[name]
    return StorageType(name=name, bits=pointer_width if bits is None else bits, signed=signed)


# ---------------------------------------------------------------------------
# Spec
# ---------------------------------------------------------------------------

CONFIG_OPTIONS = ("inverted_flags", "vec_debug", "flags_iter")


@dataclass(frozen=True)
class Config:
    inverted_flags: bool = False
    vec_debug: bool = False
    flags_iter: bool = False

    def enabled(self) -> list[str]:
        return [opt for opt in CONFIG_OPTIONS if getattr(self, opt)]


@dataclass(frozen=True)
class FlagVariant:
    """A declared flag.  ``explicit_value`` is recorded verbatim, never evaluated."""

    name: str
    explicit_value: str | None = None
    doc: str | None = None


FlagSpec = tuple[FlagVariant, ...]


@dataclass(frozen=True)
class ParsedSpec:
    name: str
    storage: StorageType
    config: Config
    flags: FlagSpec
    doc: str | None = None


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

ConstantKind = Literal["flag", "inverted"]
DebugStrategy = Literal["raw", "flags"]


@dataclass(frozen=True)
class Constant:
    name: str
    expression: str
    doc: str | None = None
    kind: ConstantKind = "flag"


@dataclass
class GeneratedType:
    """Compiled bitmask: storage, constants and the features to emit."""

    name: str
    storage: StorageType
    config: Config
    constants: list[Constant] = field(default_factory=list)
    # constant name -> evaluated value, normalized to the storage range
    values: dict[str, int] = field(default_factory=dict)
    flag_names: list[str] = field(default_factory=list)
    # introspection table: constant names in emission order
    table: list[str] = field(default_factory=list)
    debug: DebugStrategy = "raw"
    doc: str | None = None

    @property
    def all_flags(self) -> int:
        """OR of every declared flag (inverted companions excluded)."""
        bits = 0
        for name in self.flag_names:
            bits |= self.values[name]
        return self.storage.normalize(bits)

    def value_of(self, name: str) -> int:
        return self.values[name]

    def table_entries(self) -> list[tuple[str, int]]:
        return [(name, self.values[name]) for name in self.table]
