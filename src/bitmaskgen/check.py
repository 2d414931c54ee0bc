"""Validate a spec file and show the constants each bitmask compiles to.

Usage:
    bitmaskgen check
    bitmaskgen check flags.toml --name Permissions
    bitmaskgen check flags.toml --json
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bitmaskgen.cli import (
    PointerWidthOption,
    SpecArgument,
    error_exit,
    json_print,
    load_types,
    type_summary,
)
from bitmaskgen.model import GeneratedType

_EPILOG = """\
[bold]Examples:[/bold]

bitmaskgen check                             Validate ./bitmasks.toml

bitmaskgen check flags.toml --name Perms     Show a single bitmask

bitmaskgen check flags.toml --json           Machine-readable JSON output

[dim]Exits with status 1 and the offending flag / option on the first error.[/dim]"""

app = typer.Typer(
    help="Validate a bitmask spec file and list the generated constants.",
    rich_markup_mode="rich",
    epilog=_EPILOG,
)

_KIND_COLORS = {
    "flag": "green",
    "inverted": "magenta",
}


def _render_type(console: Console, generated: GeneratedType) -> None:
    """Print a Rich panel for a single bitmask."""
    storage = generated.storage
    title = Text(f"  {generated.name}  ", style="bold white on blue")

    tbl = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    tbl.add_column("Constant")
    tbl.add_column("Value", justify="right")
    tbl.add_column("Bits")
    tbl.add_column("Expression", style="dim")

    for const in generated.constants:
        value = generated.values[const.name]
        color = _KIND_COLORS.get(const.kind, "white")
        tbl.add_row(
            f"[{color}]{const.name}[/]",
            storage.literal(value),
            f"{storage.pattern(value):0{storage.bits}b}" if storage.bits <= 32 else "",
            escape(const.expression),
        )

    options = ", ".join(generated.config.enabled()) or "no options"
    subtitle = (
        f"[bold]{storage.name}[/] ({storage.bits} bits)  ·  {options}  ·  "
        f"all_flags [bold]{storage.literal(generated.all_flags)}[/]"
    )
    console.print(Panel(tbl, title=title, subtitle=subtitle, border_style="blue"))


@app.callback(invoke_without_command=True)
def main(
    spec: Path | None = SpecArgument,
    name: str | None = typer.Option(None, "--name", "-n", help="Only show this bitmask."),
    pointer_width: int | None = PointerWidthOption,
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
) -> None:
    """Compile every bitmask without writing anything and report the result."""
    _, types = load_types(spec, pointer_width=pointer_width, json_mode=json_output)

    if name is not None:
        types = [t for t in types if t.name == name]
        if not types:
            error_exit(f"No bitmask named {name!r} in the spec", json_mode=json_output)

    if json_output:
        json_print({"bitmasks": [type_summary(t) for t in types]})
        return

    console = Console(stderr=True)
    for generated in types:
        _render_type(console, generated)
    console.print(f"[green]OK[/] {len(types)} bitmask(s) compiled", highlight=False)


def main_entry() -> None:
    """Run the check CLI app."""
    app()


if __name__ == "__main__":
    main_entry()
