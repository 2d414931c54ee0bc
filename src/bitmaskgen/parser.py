"""parser.py – Turn raw width / config / variant input into a ParsedSpec.

The parser only checks shape: width tokens and config options against their
fixed sets, and names against Python's identifier rules.  Explicit value
expressions are recorded verbatim; evaluating them is the evaluator's job.
"""

from __future__ import annotations

import keyword
from collections.abc import Iterable, Mapping
from typing import Any

from bitmaskgen.errors import InvalidIdentifier, InvalidWidth, SpecError, UnknownConfigOption
from bitmaskgen.model import (
    CONFIG_OPTIONS,
    DEFAULT_POINTER_WIDTH,
    DEFAULT_STORAGE,
    POINTER_WIDTHS,
    Config,
    FlagSpec,
    FlagVariant,
    ParsedSpec,
    StorageType,
    storage_names,
    storage_type,
)


def parse_width(token: Any, pointer_width: int = DEFAULT_POINTER_WIDTH) -> StorageType:
    """Resolve a width token such as ``"u8"``; ``None`` means ``usize``."""
    if pointer_width not in POINTER_WIDTHS:
        raise InvalidWidth(
            f"pointer width must be one of {', '.join(map(str, POINTER_WIDTHS))} "
            f"(got {pointer_width!r})"
        )
    if token is None:
        return storage_type(DEFAULT_STORAGE, pointer_width)
    if isinstance(token, str) and token.strip() in storage_names():
        return storage_type(token.strip(), pointer_width)
    raise InvalidWidth(
        f"type can only be an (un)signed integer ({', '.join(storage_names())}), got {token!r}"
    )


def parse_config(clause: str | Iterable[str] | None) -> Config:
    """Parse ``"inverted_flags, flags_iter"`` (or a list of names) into a Config."""
    if clause is None:
        return Config()
    if isinstance(clause, str):
        idents = clause.split(",")
        # a single trailing comma is allowed, like any punctuated list
        if idents and not idents[-1].strip():
            idents.pop()
    else:
        idents = list(clause)

    enabled: dict[str, bool] = {}
    for ident in idents:
        if not isinstance(ident, str):
            raise UnknownConfigOption(f"unknown config option: {ident!r}")
        name = ident.strip()
        if name not in CONFIG_OPTIONS:
            raise UnknownConfigOption(f"unknown config option: {name!r}")
        enabled[name] = True
    return Config(**enabled)


def check_identifier(name: Any, what: str) -> str:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise InvalidIdentifier(f"{what} name {name!r} is not a valid identifier")
    if name.startswith("_"):
        raise InvalidIdentifier(f"{what} name {name!r} must not start with an underscore")
    return name


def _parse_variant(raw: Any) -> FlagVariant:
    if isinstance(raw, FlagVariant):
        name, value, doc = raw.name, raw.explicit_value, raw.doc
    elif isinstance(raw, str):
        name, sep, value = raw.partition("=")
        name = name.strip()
        value = value if sep else None
        doc = None
    elif isinstance(raw, Mapping):
        unknown = set(raw) - {"name", "value", "doc"}
        if unknown:
            raise SpecError(f"unknown flag keys: {', '.join(sorted(unknown))}")
        name = raw.get("name")
        value = raw.get("value")
        doc = raw.get("doc")
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if value is not None and not isinstance(value, str):
            raise SpecError(f"flag {name!r}: value must be a string expression or an integer")
        if doc is not None and not isinstance(doc, str):
            raise SpecError(f"flag {name!r}: doc must be a string")
    else:
        raise SpecError(f"flag entries must be strings or tables, got {raw!r}")

    check_identifier(name, "flag")
    if value is not None:
        value = value.strip()
        if not value:
            raise SpecError(f"flag {name!r} has an empty value expression")
    return FlagVariant(name=name, explicit_value=value, doc=doc)


def parse_variants(raw: Iterable[Any]) -> FlagSpec:
    """Extract the ordered variant list; expressions are kept verbatim."""
    variants = []
    for index, item in enumerate(raw):
        try:
            variants.append(_parse_variant(item))
        except SpecError as exc:
            exc.message = f"flags[{index}]: {exc.message}"
            raise
    return tuple(variants)


def parse_spec(
    name: str,
    flags: Iterable[Any],
    width: Any = None,
    config: str | Iterable[str] | None = None,
    *,
    doc: str | None = None,
    pointer_width: int = DEFAULT_POINTER_WIDTH,
) -> ParsedSpec:
    """Parse one bitmask declaration into storage, config and variant list."""
    check_identifier(name, "type")
    return ParsedSpec(
        name=name,
        storage=parse_width(width, pointer_width),
        config=parse_config(config),
        flags=parse_variants(flags),
        doc=doc,
    )
