"""Generate a Python module of bitmask classes from a spec file.

Usage:
    bitmaskgen generate                           # nearest bitmasks.toml
    bitmaskgen generate flags.toml -o app/flags.py
    bitmaskgen generate flags.toml --stdout
"""

from pathlib import Path

import typer
from rich.console import Console

from bitmaskgen.cli import PointerWidthOption, SpecArgument, error_exit, json_print, load_types
from bitmaskgen.emitter import render_module
from bitmaskgen.errors import SpecError
from bitmaskgen.utils import write_if_changed

_EPILOG = """\
[bold]Examples:[/bold]

bitmaskgen generate                          Compile ./bitmasks.toml to its 'output'

bitmaskgen generate flags.toml -o flags.py   Write to an explicit path

bitmaskgen generate flags.toml --stdout      Print the module instead of writing it

bitmaskgen generate --pointer-width 32       Compile usize/isize as 32-bit

[dim]Output is deterministic: re-running on an unchanged spec leaves the
generated file untouched.[/dim]"""

app = typer.Typer(
    help="Compile a bitmask spec file into a Python module.",
    rich_markup_mode="rich",
    epilog=_EPILOG,
)

console = Console(stderr=True)


@app.callback(invoke_without_command=True)
def main(
    spec: Path | None = SpecArgument,
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output .py file (default: 'output' from the spec)."
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Print the module to stdout."),
    pointer_width: int | None = PointerWidthOption,
    json_output: bool = typer.Option(False, "--json", help="Output a JSON summary"),
) -> None:
    """Compile every ``[bitmasks.*]`` table and emit one module.

    Nothing is written if any bitmask fails to compile.
    """
    spec_file, types = load_types(spec, pointer_width=pointer_width, json_mode=json_output)
    try:
        source = render_module(types, source_name=spec_file.path.name)
    except SpecError as exc:
        error_exit(str(exc), json_mode=json_output)

    target = output or spec_file.output
    if stdout or target is None:
        typer.echo(source, nl=False)
        return

    try:
        written = write_if_changed(target, source)
    except OSError as exc:
        error_exit(f"cannot write {target}: {exc}", json_mode=json_output)

    if json_output:
        json_print(
            {
                "spec": str(spec_file.path),
                "output": str(target),
                "written": written,
                "bitmasks": [t.name for t in types],
            }
        )
        return

    state = "Wrote" if written else "Unchanged"
    console.print(f"{state} {target} ({len(types)} bitmask(s))", highlight=False)
    for t in types:
        console.print(
            f"  {t.name}: {t.storage.name}, {len(t.constants)} constant(s)", highlight=False
        )


def main_entry() -> None:
    """Run the Typer CLI application."""
    app()


if __name__ == "__main__":
    main_entry()
