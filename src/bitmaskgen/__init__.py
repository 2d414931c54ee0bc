"""bitmaskgen - fixed-width bitmask types compiled from declarative flag specs.

Compiles an ordered list of named flags (with optional explicit value
expressions) plus a few configuration toggles into a Python class with
named constants, set algebra, conversions and formatting, either as a
generated module (``bitmaskgen generate``) or in-process (:func:`bitmask`).
"""

from bitmaskgen.compiler import bitmask, build_type, compile_bitmask
from bitmaskgen.errors import SpecError

__version__ = "0.1.0"

__all__ = ["SpecError", "bitmask", "build_type", "compile_bitmask"]
