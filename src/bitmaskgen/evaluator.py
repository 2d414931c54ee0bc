"""evaluator.py – Constant evaluation for bitmask value expressions.

Value expressions are parsed with :mod:`ast` and evaluated over plain Python
integers, one constant at a time in emission order.  A constant may only
refer to constants defined before it, so a single left-to-right pass is
enough and forward references are reported as unresolved.

Supported syntax::

    0b1010  0x0f  12  1_024          integer literals
    Read    Self.Read   Perms.Read   earlier constants
    ~x  -x                           unary (``-`` on signed storage only)
    x & y  x | y  x ^ y  x << n  x >> n
    A.or_(B)  A.and_(B)  A.xor(B)  A.not_()

Every intermediate result is wrapped into the storage range, so ``>>`` sees
the same fixed-width bit pattern the generated type holds.
"""

from __future__ import annotations

import ast
import operator
from collections.abc import Iterable

from bitmaskgen.errors import InvalidExpression, UnresolvedReference, ValueOutOfRange
from bitmaskgen.model import Constant, StorageType

# Names accepted as the qualifier in ``Self.Name`` besides the type's own name
_SELF_NAMES = ("Self", "cls")


class ConstantEvaluator:
    """Evaluates one bitmask's value expressions against its storage type.

    Attributes:
        type_name: Name of the bitmask, accepted as a qualifier.
        storage: Storage type the results are normalized into.
        values: Constants evaluated so far, in emission order.
        pending: Names declared later; referencing one is a forward reference.
    """

    BINARY_OPS = {
        ast.BitAnd: operator.and_,
        ast.BitOr: operator.or_,
        ast.BitXor: operator.xor,
        ast.LShift: operator.lshift,
        ast.RShift: operator.rshift,
    }

    UNARY_OPS = {
        ast.Invert: operator.invert,
        ast.USub: operator.neg,
    }

    # combinator name -> (operation, number of arguments)
    METHOD_OPS = {
        "not_": (operator.invert, 0),
        "and_": (operator.and_, 1),
        "or_": (operator.or_, 1),
        "xor": (operator.xor, 1),
    }

    def __init__(self, type_name: str, storage: StorageType) -> None:
        self.type_name = type_name
        self.storage = storage
        self.values: dict[str, int] = {}
        self.pending: set[str] = set()

    def evaluate(self, expression: str) -> int:
        """Evaluate *expression* and normalize it into the storage range."""
        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except SyntaxError as exc:
            raise InvalidExpression(f"cannot parse {expression!r}: {exc.msg}") from exc
        return self.storage.normalize(self._eval(tree.body))

    def define(self, name: str, value: int) -> None:
        self.values[name] = value
        self.pending.discard(name)

    # -----------------------------------------------------------------------
    # AST walk
    # -----------------------------------------------------------------------

    def _eval(self, node: ast.AST) -> int:
        if isinstance(node, ast.Constant):
            return self._literal(node.value)
        if isinstance(node, ast.Name):
            return self._lookup(node.id)
        if isinstance(node, ast.Attribute):
            qualifier = node.value
            if isinstance(qualifier, ast.Name) and qualifier.id in (*_SELF_NAMES, self.type_name):
                return self._lookup(node.attr)
            raise InvalidExpression(f"unsupported qualified name {ast.unparse(node)!r}")
        if isinstance(node, ast.UnaryOp):
            op = self.UNARY_OPS.get(type(node.op))
            if op is None:
                raise InvalidExpression(f"unsupported unary operator in {ast.unparse(node)!r}")
            if isinstance(node.op, ast.USub) and not self.storage.signed:
                raise InvalidExpression(
                    f"cannot negate unsigned {self.storage.name} in {ast.unparse(node)!r}"
                )
            return self.storage.normalize(op(self._eval(node.operand)))
        if isinstance(node, ast.BinOp):
            op = self.BINARY_OPS.get(type(node.op))
            if op is None:
                raise InvalidExpression(f"unsupported operator in {ast.unparse(node)!r}")
            left = self._eval(node.left)
            right = self._eval(node.right)
            if isinstance(node.op, (ast.LShift, ast.RShift)):
                self._check_shift(right, node)
            return self.storage.normalize(op(left, right))
        if isinstance(node, ast.Call):
            return self._call(node)
        raise InvalidExpression(f"unsupported expression {ast.unparse(node)!r}")

    def _call(self, node: ast.Call) -> int:
        func = node.func
        method = self.METHOD_OPS.get(func.attr) if isinstance(func, ast.Attribute) else None
        if method is None or node.keywords:
            raise InvalidExpression(f"unsupported call {ast.unparse(node)!r}")
        op, arity = method
        if len(node.args) != arity:
            raise InvalidExpression(
                f"{func.attr}() takes {arity} argument(s) in {ast.unparse(node)!r}"
            )
        operands = [self._eval(func.value), *(self._eval(arg) for arg in node.args)]
        return self.storage.normalize(op(*operands))

    def _literal(self, value: object) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidExpression(f"only integer literals are allowed, got {value!r}")
        if value > self.storage.mask:
            raise ValueOutOfRange(f"literal {value:#x} does not fit in {self.storage.name}")
        return value

    def _lookup(self, name: str) -> int:
        if name in self.values:
            return self.values[name]
        if name in self.pending:
            raise UnresolvedReference(f"{name!r} is referenced before it is defined")
        raise UnresolvedReference(f"cannot find value {name!r} in {self.type_name}")

    def _check_shift(self, amount: int, node: ast.AST) -> None:
        if not 0 <= amount < self.storage.bits:
            raise ValueOutOfRange(
                f"shift by {amount} overflows {self.storage.name} in {ast.unparse(node)!r}"
            )


def evaluate_constants(
    type_name: str, constants: Iterable[Constant], storage: StorageType
) -> dict[str, int]:
    """Evaluate every constant in order and return ``name -> value``.

    Errors are re-labelled with the constant being evaluated so the message
    points at the offending flag.
    """
    constants = list(constants)
    evaluator = ConstantEvaluator(type_name, storage)
    evaluator.pending = {const.name for const in constants}
    for const in constants:
        try:
            value = evaluator.evaluate(const.expression)
        except (InvalidExpression, UnresolvedReference, ValueOutOfRange) as exc:
            exc.message = f"{const.name}: {exc.message}"
            raise
        evaluator.define(const.name, value)
    return dict(evaluator.values)
