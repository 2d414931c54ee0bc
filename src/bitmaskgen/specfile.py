"""Spec file loader.

Reads ``bitmasks.toml`` (or any given TOML file) and exposes the project
settings plus one entry per ``[bitmasks.<Name>]`` table, in file order.

Example::

    pointer_width = 64
    output = "src/app/flags.py"

    [bitmasks.Permissions]
    type = "u8"
    config = "inverted_flags, flags_iter"
    flags = ["Read", "Write", "ReadWrite = Read | Write"]

Usage::

    from bitmaskgen.specfile import compile_spec_file, load_spec_file

    spec = load_spec_file()              # walks up from cwd
    types = compile_spec_file(spec)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from bitmaskgen.compiler import compile_bitmask
from bitmaskgen.errors import InvalidWidth, SourceLocation, SpecError
from bitmaskgen.model import DEFAULT_POINTER_WIDTH, POINTER_WIDTHS, GeneratedType

SPEC_FILENAME = "bitmasks.toml"

_TOP_LEVEL_KEYS = {"pointer_width", "output", "bitmasks"}
_BITMASK_KEYS = {"type", "config", "flags", "doc"}


@dataclass
class BitmaskEntry:
    """One ``[bitmasks.<Name>]`` table, unvalidated beyond its shape."""

    name: str
    flags: list[Any]
    width: Any = None
    config: Any = None
    doc: str | None = None


@dataclass
class SpecFile:
    path: Path
    pointer_width: int = DEFAULT_POINTER_WIDTH
    # Default output path, resolved against the spec file's directory
    output: Path | None = None
    bitmasks: list[BitmaskEntry] = field(default_factory=list)

    def location(self, bitmask: str | None = None, item: str | None = None) -> SourceLocation:
        return SourceLocation(self.path, bitmask, item)


def _find_spec(start: Path | None = None) -> Path:
    """Walk up from *start* (or cwd) to the nearest bitmasks.toml."""
    candidate = (start or Path.cwd()).resolve()
    while True:
        if (candidate / SPEC_FILENAME).exists():
            return candidate / SPEC_FILENAME
        if candidate == candidate.parent:
            break
        candidate = candidate.parent
    raise FileNotFoundError(
        f"Could not find {SPEC_FILENAME} in any parent of the current directory. "
        "Pass the spec file path explicitly."
    )


def _parse_entry(name: str, raw: Any, loc: SourceLocation) -> BitmaskEntry:
    if not isinstance(raw, dict):
        raise SpecError("bitmask definition must be a table", loc)
    unknown = set(raw) - _BITMASK_KEYS
    if unknown:
        raise SpecError(f"unknown keys: {', '.join(sorted(unknown))}", loc)
    flags = raw.get("flags")
    if not isinstance(flags, list):
        raise SpecError("'flags' must be a list", loc.with_item("flags"))
    doc = raw.get("doc")
    if doc is not None and not isinstance(doc, str):
        raise SpecError("'doc' must be a string", loc.with_item("doc"))
    return BitmaskEntry(
        name=name,
        flags=flags,
        width=raw.get("type"),
        config=raw.get("config"),
        doc=doc,
    )


def parse_spec_document(raw: dict[str, Any], path: Path) -> SpecFile:
    """Validate the shape of a loaded TOML document."""
    spec = SpecFile(path=path)
    unknown = set(raw) - _TOP_LEVEL_KEYS
    if unknown:
        raise SpecError(f"unknown top-level keys: {', '.join(sorted(unknown))}", spec.location())

    pointer_width = raw.get("pointer_width", DEFAULT_POINTER_WIDTH)
    if isinstance(pointer_width, bool) or pointer_width not in POINTER_WIDTHS:
        raise InvalidWidth(
            f"pointer_width must be one of {', '.join(map(str, POINTER_WIDTHS))} "
            f"(got {pointer_width!r})",
            spec.location(item="pointer_width"),
        )
    spec.pointer_width = pointer_width

    output = raw.get("output")
    if output is not None:
        if not isinstance(output, str) or not output:
            raise SpecError("'output' must be a path string", spec.location(item="output"))
        out = Path(output)
        spec.output = out if out.is_absolute() else path.parent / out

    bitmasks = raw.get("bitmasks", {})
    if not isinstance(bitmasks, dict):
        raise SpecError("'bitmasks' must be a table", spec.location(item="bitmasks"))
    for name, body in bitmasks.items():
        spec.bitmasks.append(_parse_entry(name, body, spec.location(name)))
    return spec


def load_spec_file(path: Path | None = None) -> SpecFile:
    """Load and shape-check a spec file.

    Args:
        path: Spec file, or a directory to search upward from.  Auto-detected
              from the current directory if ``None``.
    """
    if path is None or path.is_dir():
        path = _find_spec(path)
    if not path.exists():
        raise FileNotFoundError(f"Spec file not found: {path}")

    with open(path, "rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise SpecError(f"invalid TOML: {exc}", SourceLocation(path)) from exc
    return parse_spec_document(raw, path)


def compile_spec_file(spec: SpecFile, pointer_width: int | None = None) -> list[GeneratedType]:
    """Compile every bitmask in *spec*; the first error aborts the whole file."""
    width = pointer_width if pointer_width is not None else spec.pointer_width
    return [
        compile_bitmask(
            entry.name,
            entry.flags,
            entry.width,
            entry.config,
            doc=entry.doc,
            pointer_width=width,
            location=spec.location(entry.name),
        )
        for entry in spec.bitmasks
    ]
