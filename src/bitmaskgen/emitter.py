"""emitter.py - Assemble a GeneratedType and render it as Python source.

The rendered class keeps its storage value in ``_bits`` and exposes the
fixed operation surface (set algebra, conversions, formatting) plus the
named constants as class attributes in emission order.  Rendering is
deterministic: identical GeneratedType input gives identical text.
"""

from __future__ import annotations

from collections.abc import Iterable

import jinja2

from bitmaskgen.errors import DuplicateName, InvalidIdentifier
from bitmaskgen.expander import Expansion
from bitmaskgen.model import Constant, GeneratedType, ParsedSpec

# Attribute names the generated class defines itself
RESERVED_NAMES = frozenset(
    {
        "bits",
        "from_bits",
        "all_bits",
        "is_all_bits",
        "all_flags",
        "is_all_flags",
        "none",
        "is_none",
        "truncate",
        "intersects",
        "contains",
        "not_",
        "and_",
        "or_",
        "xor",
        "flags",
    }
)

_CLASS_TEMPLATE = jinja2.Template(
    """\
@functools.total_ordering
class {{ t.name }}:
{% if t.doc %}
    {{ doc_literal }}

{% endif %}
    __slots__ = ("_bits",)

    _STORAGE = "{{ t.storage.name }}"
    _WIDTH = {{ t.storage.bits }}
    _SIGNED = {{ t.storage.signed }}
    _MASK = {{ mask }}

    def __init__(self, bits=0):
        bits = operator.index(bits)
        if not -(1 << (self._WIDTH - 1)) <= bits <= self._MASK:
            raise OverflowError(f"{bits} does not fit in {self._STORAGE}")
        bits &= self._MASK
        if self._SIGNED and bits >> (self._WIDTH - 1):
            bits -= 1 << self._WIDTH
        object.__setattr__(self, "_bits", bits)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} values are immutable")

    def _other(self, other):
        if not isinstance(other, type(self)):
            raise TypeError(f"expected {type(self).__name__}, got {type(other).__name__}")
        return other._bits

    @classmethod
    def from_bits(cls, bits):
        return cls(bits)

    def bits(self):
        \"\"\"Return the underlying storage value.\"\"\"
        return self._bits

    @classmethod
    def all_bits(cls):
        \"\"\"Value with every bit of the storage set.\"\"\"
        return cls(-1)

    def is_all_bits(self):
        return self._bits & self._MASK == self._MASK

    @classmethod
    def all_flags(cls):
        \"\"\"Union of every declared flag.\"\"\"
        return cls({{ all_flags }})

    def is_all_flags(self):
        return self._bits == self.all_flags()._bits

    @classmethod
    def none(cls):
        return cls(0)

    def is_none(self):
        return self._bits == 0

    def truncate(self):
        \"\"\"Drop every bit that no declared flag covers.\"\"\"
        return type(self)(self._bits & self.all_flags()._bits)

    def intersects(self, other):
        \"\"\"``(self & other) != 0 or other == 0``\"\"\"
        other = self._other(other)
        return (self._bits & other) != 0 or other == 0

    def contains(self, other):
        \"\"\"``(self & other) == other``\"\"\"
        other = self._other(other)
        return (self._bits & other) == other

    def not_(self):
        return type(self)(~self._bits)

    def and_(self, other):
        return type(self)(self._bits & self._other(other))

    def or_(self, other):
        return type(self)(self._bits | self._other(other))

    def xor(self, other):
        return type(self)(self._bits ^ self._other(other))
{% if t.config.flags_iter %}

    @classmethod
    def flags(cls):
        \"\"\"Iterate over ``(name, value)`` for every constant, in declaration order.\"\"\"
        return iter(cls._TABLE)
{% endif %}

    def __invert__(self):
        return self.not_()

    def __and__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.and_(other)

    def __or__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.or_(other)

    def __xor__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.xor(other)

    # values are immutable: augmented assignment rebinds to a new value
    __iand__ = __and__
    __ior__ = __or__
    __ixor__ = __xor__

    def __int__(self):
        return self._bits

    __index__ = __int__

    def __bool__(self):
        return self._bits != 0

    def __eq__(self, other):
        if isinstance(other, type(self)):
            return self._bits == other._bits
        if isinstance(other, int) and not isinstance(other, bool):
            return self._bits == other
        return NotImplemented

    def __lt__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self._bits < other._bits

    def __hash__(self):
        return hash(self._bits)

    def __format__(self, spec):
        if spec and spec[-1] in "boxX":
            return format(self._bits & self._MASK, spec)
        if spec:
            return format(self._bits, spec)
        return repr(self)

    def __repr__(self):
{% if t.debug == "flags" %}
        names = [name for name, value in self._TABLE if value._bits & self._bits == value._bits]
        return f"{type(self).__name__}[{', '.join(names)}]"
{% else %}
        return f"{type(self).__name__}({self._bits})"
{% endif %}


{% for c in constants %}
{% for line in c.doc_lines %}
#: {{ line }}
{% endfor %}
{{ t.name }}.{{ c.name }} = {{ t.name }}({{ c.literal }})  # {{ c.expression }}
{% endfor %}
{% if t.config.flags_iter or t.config.vec_debug %}

{{ t.name }}._TABLE = (
{% for name in t.table %}
    ("{{ name }}", {{ t.name }}.{{ name }}),
{% endfor %}
)
{% endif %}
""",
    trim_blocks=True,
    keep_trailing_newline=True,
)

_MODULE_TEMPLATE = jinja2.Template(
    """\
# Generated by bitmaskgen{% if source_name %} from {{ source_name }}{% endif %}. Do not edit.
\"\"\"Bitmask types.\"\"\"

import functools
import operator

__all__ = [{% for name in names %}"{{ name }}"{% if not loop.last %}, {% endif %}{% endfor %}]


{{ bodies | join("\\n\\n\\n") }}
""",
    keep_trailing_newline=True,
)


def check_names(type_name: str, constants: Iterable[Constant]) -> None:
    """Reject duplicate constants and names that would shadow the surface."""
    seen: set[str] = set()
    for const in constants:
        if const.name in RESERVED_NAMES:
            raise InvalidIdentifier(
                f"flag name {const.name!r} clashes with a method of {type_name}"
            )
        if const.name in seen:
            raise DuplicateName(f"{const.name!r} is defined more than once in {type_name}")
        seen.add(const.name)


def assemble(parsed: ParsedSpec, expansion: Expansion, values: dict[str, int]) -> GeneratedType:
    """Combine the parsed spec, expansion and evaluated values into a GeneratedType."""
    check_names(parsed.name, expansion.constants)
    return GeneratedType(
        name=parsed.name,
        storage=parsed.storage,
        config=parsed.config,
        constants=list(expansion.constants),
        values={const.name: values[const.name] for const in expansion.constants},
        flag_names=[const.name for const in expansion.constants if const.kind == "flag"],
        table=list(expansion.table),
        debug=expansion.debug,
        doc=parsed.doc,
    )


def render_type(generated: GeneratedType) -> str:
    """Render the class definition and its constants."""
    storage = generated.storage
    constants = [
        {
            "name": const.name,
            "expression": " ".join(const.expression.split()),
            "literal": storage.literal(generated.values[const.name]),
            "doc_lines": const.doc.splitlines() if const.doc else [],
        }
        for const in generated.constants
    ]
    return _CLASS_TEMPLATE.render(
        t=generated,
        doc_literal=repr(generated.doc) if generated.doc else "",
        mask=storage.literal(storage.mask),
        all_flags=storage.literal(generated.all_flags),
        constants=constants,
    )


def render_module(types: Iterable[GeneratedType], source_name: str | None = None) -> str:
    """Render a complete module containing every type in *types*."""
    types = list(types)
    names = [t.name for t in types]
    if len(set(names)) != len(names):
        dup = next(name for name in names if names.count(name) > 1)
        raise DuplicateName(f"bitmask {dup!r} is defined more than once")
    return _MODULE_TEMPLATE.render(
        source_name=source_name,
        names=names,
        bodies=[render_type(t).rstrip("\n") for t in types],
    )
