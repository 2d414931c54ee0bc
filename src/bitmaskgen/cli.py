"""Shared CLI utilities for bitmaskgen commands.

Provides the common Typer options, spec-loading helper, and standardised
output / error helpers so that every command reports errors the same way.

Usage in a command::

    import typer
    from bitmaskgen.cli import SpecArgument, error_exit, load_types

    app = typer.Typer()

    @app.callback(invoke_without_command=True)
    def main(spec: Path | None = SpecArgument) -> None:
        spec_file, types = load_types(spec)
        ...
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from bitmaskgen.errors import SpecError
from bitmaskgen.model import GeneratedType
from bitmaskgen.specfile import SpecFile, compile_spec_file, load_spec_file

# Re-usable Typer argument for the spec file
SpecArgument: Path | None = typer.Argument(
    None,
    help="Spec file or directory (default: nearest bitmasks.toml above the cwd).",
)

PointerWidthOption: int | None = typer.Option(
    None,
    "--pointer-width",
    help="Bit width of usize/isize (16, 32 or 64); overrides the spec file.",
)

# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

_err_console = Console(stderr=True)


def error_exit(msg: str, *, json_mode: bool = False, code: int = 1) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``."""
    if json_mode:
        print(json.dumps({"error": msg}, indent=2))
    else:
        _err_console.print(
            f"[red bold]error:[/red bold] {escape(msg)}", highlight=False, soft_wrap=True
        )
    raise typer.Exit(code=code)


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2))


def load_types(
    spec: Path | None,
    *,
    pointer_width: int | None = None,
    json_mode: bool = False,
) -> tuple[SpecFile, list[GeneratedType]]:
    """Load and compile a spec file, exiting with a diagnostic on failure."""
    try:
        spec_file = load_spec_file(spec)
        return spec_file, compile_spec_file(spec_file, pointer_width)
    except FileNotFoundError as exc:
        error_exit(str(exc), json_mode=json_mode)
    except SpecError as exc:
        error_exit(str(exc), json_mode=json_mode)


def type_summary(generated: GeneratedType) -> dict[str, Any]:
    """JSON-friendly description of a compiled bitmask."""
    storage = generated.storage
    return {
        "name": generated.name,
        "type": storage.name,
        "bits": storage.bits,
        "config": generated.config.enabled(),
        "all_flags": storage.literal(generated.all_flags),
        "constants": [
            {
                "name": const.name,
                "kind": const.kind,
                "expression": const.expression,
                "value": storage.literal(generated.values[const.name]),
            }
            for const in generated.constants
        ],
    }
