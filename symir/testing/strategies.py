"""Property-based testing infrastructure using Hypothesis.
Provides strategies for generating types, int64 literals and well-typed
expression trees, and a stateful test of the heap model.
"""

from __future__ import annotations

import z3
from hypothesis import strategies as st
from hypothesis.stateful import Bundle, RuleBasedStateMachine, invariant, rule

from symir.core.expressions import (
    INT64_MAX,
    INT64_MIN,
    BinaryOp,
    BinaryOperator,
    BoolConstant,
    Expression,
    IntConstant,
    LogicalOp,
    LogicalOperator,
    TernaryOp,
    UnaryOp,
    UnaryOperator,
    Variable,
    object_root,
)
from symir.core.memory import Memory, Ref
from symir.core.types import BOOL, INT, OBJECT, array_of
from symir.translation.z3_translator import Z3Translator

ARITHMETIC_OPERATORS = [BinaryOperator.ADD, BinaryOperator.SUB, BinaryOperator.MUL]
COMPARISON_OPERATORS = [
    BinaryOperator.EQ,
    BinaryOperator.NE,
    BinaryOperator.LT,
    BinaryOperator.LE,
    BinaryOperator.GT,
    BinaryOperator.GE,
]


def int64_values(min_value: int = INT64_MIN, max_value: int = INT64_MAX) -> st.SearchStrategy:
    """Strategy for Python ints in the signed 64-bit range."""
    return st.integers(min_value=min_value, max_value=max_value)


def int_constants(min_value: int = -1000, max_value: int = 1000) -> st.SearchStrategy:
    return st.integers(min_value=min_value, max_value=max_value).map(IntConstant)


def bool_constants() -> st.SearchStrategy:
    return st.booleans().map(BoolConstant)


def _nest(type_, depth):
    for _ in range(depth):
        type_ = array_of(type_)
    return type_


def sorted_types(max_depth: int = 2) -> st.SearchStrategy:
    """Strategy for types that have a solver sort: int, bool and nested arrays."""
    return st.tuples(st.sampled_from([INT, BOOL]), st.integers(0, max_depth)).map(
        lambda pair: _nest(*pair)
    )


def types() -> st.SearchStrategy:
    """Strategy for any value type a Variable may carry."""
    return st.one_of(sorted_types(), st.just(OBJECT))


def int_variables(names: list[str] | None = None) -> st.SearchStrategy:
    if names is None:
        names = ["x0", "x1", "x2"]
    return st.sampled_from(names).map(lambda n: Variable(n, INT))


def bool_variables(names: list[str] | None = None) -> st.SearchStrategy:
    if names is None:
        names = ["b0", "b1"]
    return st.sampled_from(names).map(lambda n: Variable(n, BOOL))


@st.composite
def int_exprs(draw, depth: int = 3, variables: bool = True) -> Expression:
    """Strategy for well-typed Int expressions.
    Division and modulo are left out so that trees over constants always have
    a concrete value.
    """
    leaves = [int_constants()]
    if variables:
        leaves.append(int_variables())
    if depth <= 0:
        return draw(st.one_of(leaves))
    op = draw(st.sampled_from(["leaf", "arith", "neg", "ite"]))
    if op == "leaf":
        return draw(st.one_of(leaves))
    elif op == "arith":
        left = draw(int_exprs(depth - 1, variables))
        right = draw(int_exprs(depth - 1, variables))
        return BinaryOp(left, right, draw(st.sampled_from(ARITHMETIC_OPERATORS)))
    elif op == "neg":
        return UnaryOp(UnaryOperator.NEG, draw(int_exprs(depth - 1, variables)))
    else:
        condition = draw(bool_exprs(depth - 1, variables))
        then_expr = draw(int_exprs(depth - 1, variables))
        else_expr = draw(int_exprs(depth - 1, variables))
        return TernaryOp(condition, then_expr, else_expr)


@st.composite
def bool_exprs(draw, depth: int = 3, variables: bool = True) -> Expression:
    """Strategy for well-typed Bool expressions."""
    leaves = [bool_constants()]
    if variables:
        leaves.append(bool_variables())
    if depth <= 0:
        return draw(st.one_of(leaves))
    op = draw(st.sampled_from(["leaf", "and", "or", "not", "implies", "unary_not", "compare"]))
    if op == "leaf":
        return draw(st.one_of(leaves))
    elif op in ("and", "or"):
        operands = draw(st.lists(bool_exprs(depth - 1, variables), min_size=1, max_size=3))
        operator = LogicalOperator.AND if op == "and" else LogicalOperator.OR
        return LogicalOp(tuple(operands), operator)
    elif op == "not":
        return LogicalOp((draw(bool_exprs(depth - 1, variables)),), LogicalOperator.NOT)
    elif op == "implies":
        left = draw(bool_exprs(depth - 1, variables))
        right = draw(bool_exprs(depth - 1, variables))
        return LogicalOp((left, right), LogicalOperator.IMPLIES)
    elif op == "unary_not":
        return UnaryOp(UnaryOperator.NOT, draw(bool_exprs(depth - 1, variables)))
    else:
        left = draw(int_exprs(depth - 1, variables))
        right = draw(int_exprs(depth - 1, variables))
        return BinaryOp(left, right, draw(st.sampled_from(COMPARISON_OPERATORS)))


def well_typed_exprs(depth: int = 3, variables: bool = True) -> st.SearchStrategy:
    return st.one_of(int_exprs(depth, variables), bool_exprs(depth, variables))


class HeapStateMachine(RuleBasedStateMachine):
    """Stateful test of the heap model against the solver.
    Objects of one struct with two Int fields are allocated and written with
    constants; every read must be provably equal to the last value written
    to that field of that object, or to the untouched initial field value.
    """

    def __init__(self):
        super().__init__()
        self.memory = Memory()
        self.translator = Z3Translator()
        self.written: dict[tuple[int, int], int] = {}

    objects = Bundle("objects")

    @rule(target=objects)
    def allocate(self) -> Ref:
        return self.memory.allocate(OBJECT, tag="Point")

    @rule(target=objects, ref=objects)
    def alias(self, ref: Ref) -> Ref:
        return self.memory.alias(ref)

    @rule(ref=objects, field=st.integers(0, 1), value=st.integers(-100, 100))
    def write(self, ref: Ref, field: int, value: int) -> None:
        self.memory.assign_field(ref, field, IntConstant(value))
        self.written[(ref.address, field)] = value

    @rule(ref=objects, field=st.integers(0, 1))
    def read(self, ref: Ref, field: int) -> None:
        term = self.translator.translate(self.memory.get_field(ref, field, INT))
        expected = self.written.get((ref.address, field))
        solver = z3.Solver()
        if expected is None:
            root = object_root(ref.current_expr)
            array = z3.Array(f"Point.{field}", z3.IntSort(), z3.IntSort())
            initial = z3.Select(array, z3.Int(f"{root.name}!id"))
            solver.add(term != initial)
        else:
            solver.add(term != expected)
        assert solver.check() == z3.unsat

    @invariant()
    def addresses_are_dense(self):
        assert self.memory.object_count >= len({address for address, _ in self.written})


__all__ = [
    "int64_values",
    "int_constants",
    "bool_constants",
    "sorted_types",
    "types",
    "int_variables",
    "bool_variables",
    "int_exprs",
    "bool_exprs",
    "well_typed_exprs",
    "HeapStateMachine",
]
