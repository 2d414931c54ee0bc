"""Bit value assignment for declared flags."""

from __future__ import annotations

from bitmaskgen.model import Constant, FlagSpec


def assign_values(spec: FlagSpec) -> list[Constant]:
    """Attach a value expression to every variant, in declaration order.

    Defaulted variants get ``1 << k`` where ``k`` counts only the defaulted
    variants seen so far, so explicit values can be interleaved freely
    without consuming bit positions.  Explicit expressions pass through
    unchanged and are not checked for overlap or width here.
    """
    constants: list[Constant] = []
    position = 0
    for variant in spec:
        if variant.explicit_value is not None:
            expression = variant.explicit_value
        else:
            expression = f"1 << {position}"
            position += 1
        constants.append(Constant(name=variant.name, expression=expression, doc=variant.doc))
    return constants
