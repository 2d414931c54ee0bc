"""Feature expansion driven by the config toggles.

inverted_flags: add ``Inverted<Name> = ~(<expr>)`` right after each flag
flags_iter:     expose the ordered (name, value) table via ``flags()``
vec_debug:      render repr() as ``Type[A, B]`` by scanning the same table
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bitmaskgen.model import Config, Constant, DebugStrategy

INVERTED_PREFIX = "Inverted"


@dataclass
class Expansion:
    constants: list[Constant] = field(default_factory=list)
    table: list[str] = field(default_factory=list)
    debug: DebugStrategy = "raw"


def inverted_name(name: str) -> str:
    return f"{INVERTED_PREFIX}{name}"


def expand_features(constants: list[Constant], config: Config) -> Expansion:
    expanded: list[Constant] = []
    for const in constants:
        expanded.append(const)
        if config.inverted_flags:
            expanded.append(
                Constant(
                    name=inverted_name(const.name),
                    expression=f"~({const.expression})",
                    doc=const.doc,
                    kind="inverted",
                )
            )

    table: list[str] = []
    if config.flags_iter or config.vec_debug:
        table = [const.name for const in expanded]

    return Expansion(
        constants=expanded,
        table=table,
        debug="flags" if config.vec_debug else "raw",
    )
