"""main.py – Umbrella CLI entry point for bitmaskgen.

Imports and registers every subcommand's Typer app as a flat command.
"""

import importlib

import typer

app = typer.Typer(
    help="Compile declarative flag specs into fixed-width bitmask classes.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Typical workflow:[/bold]
  bitmaskgen check             Validate bitmasks.toml and list the constants
  bitmaskgen generate          Write the generated module

[dim]Both commands look for bitmasks.toml in the current directory or its parents.
Run 'bitmaskgen <cmd> --help' for details.[/dim]""",
)

# Single-command modules – registered as flat commands via app.command().
_SINGLE_COMMANDS: list[tuple[str, str, str]] = [
    ("generate", "bitmaskgen.generate", "Compile a spec file into a Python module."),
    ("check", "bitmaskgen.check", "Validate a spec file and list the generated constants."),
]

for _name, _module, _help in _SINGLE_COMMANDS:
    _mod = importlib.import_module(_module)
    _epilog = getattr(_mod.app.info, "epilog", None)
    if not isinstance(_epilog, str):
        _epilog = None
    app.command(name=_name, help=_help, epilog=_epilog)(_mod.main)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
