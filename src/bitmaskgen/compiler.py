"""compiler.py – The full compilation pass, plus in-process type building.

Usage::

    from bitmaskgen import bitmask

    Perms = bitmask("Perms", ["Read", "Write", "Exec"], "u8", "flags_iter")
    rw = Perms.Read | Perms.Write
    assert rw.contains(Perms.Write)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from bitmaskgen.assigner import assign_values
from bitmaskgen.emitter import assemble, render_type
from bitmaskgen.errors import SourceLocation, SpecError
from bitmaskgen.evaluator import evaluate_constants
from bitmaskgen.expander import expand_features
from bitmaskgen.model import DEFAULT_POINTER_WIDTH, GeneratedType
from bitmaskgen.parser import parse_spec


def compile_bitmask(
    name: str,
    flags: Iterable[Any],
    width: Any = None,
    config: str | Iterable[str] | None = None,
    *,
    doc: str | None = None,
    pointer_width: int = DEFAULT_POINTER_WIDTH,
    location: SourceLocation | None = None,
) -> GeneratedType:
    """Compile one flag spec into a :class:`GeneratedType`.

    Args:
        name: Name of the generated type.
        flags: Ordered flag entries (``"Name"``, ``"Name = expr"``, mappings).
        width: Storage type token such as ``"u8"``; ``None`` means ``usize``.
        config: Config clause, e.g. ``"inverted_flags, flags_iter"``.
        doc: Docstring for the generated type.
        pointer_width: Bit width used for ``usize``/``isize``.
        location: Attached to any error raised, for diagnostics.

    Raises:
        SpecError: Any subclass; nothing is produced on failure.
    """
    try:
        parsed = parse_spec(name, flags, width, config, doc=doc, pointer_width=pointer_width)
        expansion = expand_features(assign_values(parsed.flags), parsed.config)
        values = evaluate_constants(parsed.name, expansion.constants, parsed.storage)
        return assemble(parsed, expansion, values)
    except SpecError as exc:
        if location is not None:
            exc.locate(location)
        raise


def build_type(generated: GeneratedType) -> type:
    """Execute the rendered class in a fresh namespace and return it."""
    source = "import functools\nimport operator\n\n\n" + render_type(generated)
    namespace: dict[str, Any] = {"__name__": f"bitmaskgen.generated.{generated.name}"}
    code = compile(source, f"<bitmask {generated.name}>", "exec")
    exec(code, namespace)
    return namespace[generated.name]


def bitmask(
    name: str,
    flags: Iterable[Any],
    width: Any = None,
    config: str | Iterable[str] | None = None,
    **kwargs: Any,
) -> type:
    """Compile a flag spec and return the resulting class."""
    return build_type(compile_bitmask(name, flags, width, config, **kwargs))
