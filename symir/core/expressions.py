"""Expression IR for symir.
Every node is an immutable dataclass whose constructor type-checks its
operands, so an ill-typed tree can never be built. A node's type is a pure
function of its children's types and is recomputed on every access.
Node Hierarchy:
    Expression (abstract base)
    ├── Variable          # unconstrained symbolic input
    ├── IntConstant       # int64 literal
    ├── BoolConstant
    ├── BinaryOp          # arithmetic, comparison, array select
    ├── LogicalOp         # and, or, not, implies
    ├── UnaryOp           # negation, not
    ├── TernaryOp         # if-then-else
    ├── FunctionDecl      # uninterpreted function signature
    ├── FunctionCall
    ├── FieldAssign       # object state with one field updated
    └── FieldAccess       # field read against an object state
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from symir.core.errors import SymbolicTypeError
from symir.core.types import BOOL, INT, OBJECT, Type, TypeKind, function_of

if TYPE_CHECKING:
    from symir.core.visitor import ExpressionVisitor

R = TypeVar("R")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class BinaryOperator(Enum):
    """Binary operators; the value is the rendering symbol."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    SELECT = "@"

    @property
    def is_arithmetic(self) -> bool:
        return self in _ARITHMETIC

    @property
    def is_equality(self) -> bool:
        return self in (BinaryOperator.EQ, BinaryOperator.NE)

    @property
    def is_ordering(self) -> bool:
        return self in _ORDERING


_ARITHMETIC = frozenset(
    {
        BinaryOperator.ADD,
        BinaryOperator.SUB,
        BinaryOperator.MUL,
        BinaryOperator.DIV,
        BinaryOperator.MOD,
    }
)
_ORDERING = frozenset({BinaryOperator.LT, BinaryOperator.LE, BinaryOperator.GT, BinaryOperator.GE})


class LogicalOperator(Enum):
    """Logical connectives."""

    AND = "&&"
    OR = "||"
    NOT = "!"
    IMPLIES = "=>"


class UnaryOperator(Enum):
    """Unary operators."""

    NEG = "-"
    NOT = "!"


class Expression(ABC):
    """Abstract base class for all IR nodes."""

    @property
    @abstractmethod
    def type(self) -> Type:
        """The static type of this node."""

    @abstractmethod
    def children(self) -> tuple[Expression, ...]:
        """Direct sub-expressions, in evaluation order."""

    @abstractmethod
    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        """Dispatch to the visitor method for this variant."""


def type_of(expr: Expression) -> Type:
    """Compute the static type of an expression."""
    return expr.type


def _require(condition: bool, node: str, message: str, *operands: Any) -> None:
    if not condition:
        raise SymbolicTypeError(message, node=node, operands=operands)


def _require_sorted(type_: Type, node: str, what: str) -> None:
    _require(type_.has_sort, node, f"{what} of type {type_} has no solver value", type_)


def _check_field_index(index: Any, node: str) -> None:
    _require(
        isinstance(index, int) and not isinstance(index, bool) and index >= 0,
        node,
        f"field index must be a non-negative int, got {index!r}",
        index,
    )


@dataclass(frozen=True)
class Variable(Expression):
    """An unconstrained symbolic input, identified by name."""

    name: str
    declared_type: Type

    def __post_init__(self) -> None:
        _require(bool(self.name), "Variable", "variable name must not be empty")

    @property
    def type(self) -> Type:
        return self.declared_type

    def children(self) -> tuple[Expression, ...]:
        return ()

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_variable(self)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class IntConstant(Expression):
    """A signed 64-bit integer literal."""

    value: int

    def __post_init__(self) -> None:
        _require(
            isinstance(self.value, int) and not isinstance(self.value, bool),
            "IntConstant",
            f"expected an int, got {type(self.value).__name__}",
            self.value,
        )
        _require(
            INT64_MIN <= self.value <= INT64_MAX,
            "IntConstant",
            f"{self.value} does not fit in 64 bits",
            self.value,
        )

    @property
    def type(self) -> Type:
        return INT

    def children(self) -> tuple[Expression, ...]:
        return ()

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_int_constant(self)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BoolConstant(Expression):
    """A boolean literal."""

    value: bool

    def __post_init__(self) -> None:
        _require(
            isinstance(self.value, bool),
            "BoolConstant",
            f"expected a bool, got {type(self.value).__name__}",
            self.value,
        )

    @property
    def type(self) -> Type:
        return BOOL

    def children(self) -> tuple[Expression, ...]:
        return ()

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_bool_constant(self)

    def __str__(self) -> str:
        return "true" if self.value else "false"


def binary_result_type(left: Type, right: Type, op: BinaryOperator) -> Type:
    """Result type of ``left op right``.
    Raises:
        SymbolicTypeError: If the operand types do not fit the operator.
    """
    node = f"BinaryOp({op.name})"
    if op is BinaryOperator.SELECT:
        _require(left.is_array, node, f"cannot index into {left}", left)
        _require(right.is_int, node, f"array index must be int, got {right}", right)
        return left.inner
    if op.is_arithmetic:
        _require(
            not (left.is_bool or right.is_bool), node, "bool operand in arithmetic", left, right
        )
        _require(
            not (left.is_array or right.is_array), node, "array operand in arithmetic", left, right
        )
        _require(left.is_int and right.is_int, node, f"cannot apply to {left}, {right}", left, right)
        return INT
    if op.is_equality:
        _require(left == right, node, f"operand types differ: {left} vs {right}", left, right)
        _require(
            left.kind not in (TypeKind.FUNCTION, TypeKind.REF),
            node,
            f"{left} values cannot be compared",
            left,
        )
        return BOOL
    if op.is_ordering:
        _require(
            not (left.is_array or right.is_array), node, "array operand in comparison", left, right
        )
        _require(left.is_int and right.is_int, node, f"cannot compare {left}, {right}", left, right)
        return BOOL
    raise SymbolicTypeError(f"unknown binary operator {op!r}", node="BinaryOp")


@dataclass(frozen=True)
class BinaryOp(Expression):
    """``left <operator> right``; SELECT reads ``left[right]``."""

    left: Expression
    right: Expression
    operator: BinaryOperator

    def __post_init__(self) -> None:
        _require(
            isinstance(self.operator, BinaryOperator),
            "BinaryOp",
            f"unknown binary operator {self.operator!r}",
        )
        binary_result_type(self.left.type, self.right.type, self.operator)

    @property
    def type(self) -> Type:
        return binary_result_type(self.left.type, self.right.type, self.operator)

    def children(self) -> tuple[Expression, ...]:
        return (self.left, self.right)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_binary_op(self)

    def __str__(self) -> str:
        if self.operator is BinaryOperator.SELECT:
            return f"{self.left}[{self.right}]"
        return f"({self.left} {self.operator.value} {self.right})"


_LOGICAL_ARITY = {LogicalOperator.NOT: 1, LogicalOperator.IMPLIES: 2}


@dataclass(frozen=True)
class LogicalOp(Expression):
    """A logical connective over one or more boolean operands."""

    operands: tuple[Expression, ...]
    operator: LogicalOperator

    def __post_init__(self) -> None:
        object.__setattr__(self, "operands", tuple(self.operands))
        _require(
            isinstance(self.operator, LogicalOperator),
            "LogicalOp",
            f"unknown logical operator {self.operator!r}",
        )
        node = f"LogicalOp({self.operator.name})"
        expected = _LOGICAL_ARITY.get(self.operator)
        if expected is not None:
            _require(
                len(self.operands) == expected,
                node,
                f"expects {expected} operand(s), got {len(self.operands)}",
            )
        else:
            _require(len(self.operands) >= 1, node, "expects at least one operand")
        for operand in self.operands:
            _require(not operand.type.is_array, node, "array operand in logical expression", operand)
            _require(operand.type.is_bool, node, f"operand {operand} is not bool", operand)

    @property
    def type(self) -> Type:
        return BOOL

    def children(self) -> tuple[Expression, ...]:
        return self.operands

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_logical_op(self)

    def __str__(self) -> str:
        if self.operator is LogicalOperator.NOT:
            return f"!{self.operands[0]}"
        joined = f" {self.operator.value} ".join(str(op) for op in self.operands)
        return f"({joined})"


@dataclass(frozen=True)
class UnaryOp(Expression):
    """Integer negation or boolean not."""

    operator: UnaryOperator
    operand: Expression

    def __post_init__(self) -> None:
        _require(
            isinstance(self.operator, UnaryOperator),
            "UnaryOp",
            f"unknown unary operator {self.operator!r}",
        )
        node = f"UnaryOp({self.operator.name})"
        if self.operator is UnaryOperator.NOT:
            _require(self.operand.type.is_bool, node, f"needs bool, got {self.operand.type}")
        else:
            _require(self.operand.type.is_int, node, f"needs int, got {self.operand.type}")

    @property
    def type(self) -> Type:
        return self.operand.type

    def children(self) -> tuple[Expression, ...]:
        return (self.operand,)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_unary_op(self)

    def __str__(self) -> str:
        return f"({self.operator.value}{self.operand})"


@dataclass(frozen=True)
class TernaryOp(Expression):
    """``condition ? then_expr : else_expr``."""

    condition: Expression
    then_expr: Expression
    else_expr: Expression

    def __post_init__(self) -> None:
        _require(
            self.condition.type.is_bool,
            "TernaryOp",
            f"condition must be bool, got {self.condition.type}",
        )
        _require(
            self.then_expr.type == self.else_expr.type,
            "TernaryOp",
            f"branch types differ: {self.then_expr.type} vs {self.else_expr.type}",
        )

    @property
    def type(self) -> Type:
        return self.then_expr.type

    def children(self) -> tuple[Expression, ...]:
        return (self.condition, self.then_expr, self.else_expr)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_ternary_op(self)

    def __str__(self) -> str:
        return f"(if {self.condition} then {self.then_expr} else {self.else_expr})"


@dataclass(frozen=True)
class FunctionDecl(Expression):
    """An uninterpreted function signature."""

    name: str
    arg_types: tuple[Type, ...]
    ret_type: Type

    def __post_init__(self) -> None:
        object.__setattr__(self, "arg_types", tuple(self.arg_types))
        _require(bool(self.name), "FunctionDecl", "function name must not be empty")
        for i, arg in enumerate(self.arg_types):
            _require_sorted(arg, "FunctionDecl", f"argument {i}")
        _require_sorted(self.ret_type, "FunctionDecl", "return value")

    @property
    def type(self) -> Type:
        return function_of(self.arg_types, self.ret_type)

    def children(self) -> tuple[Expression, ...]:
        return ()

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_function_decl(self)

    def __str__(self) -> str:
        return f"({self.name}: {self.type})"


@dataclass(frozen=True)
class FunctionCall(Expression):
    """Application of an uninterpreted function."""

    decl: FunctionDecl
    args: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        node = f"FunctionCall({self.decl.name})"
        _require(
            len(self.args) == len(self.decl.arg_types),
            node,
            f"expects {len(self.decl.arg_types)} argument(s), got {len(self.args)}",
        )
        for i, (arg, expected) in enumerate(zip(self.args, self.decl.arg_types)):
            _require(
                arg.type == expected,
                node,
                f"argument {i} has type {arg.type}, expected {expected}",
                arg,
            )

    @property
    def type(self) -> Type:
        return self.decl.ret_type

    def children(self) -> tuple[Expression, ...]:
        return self.args

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_function_call(self)

    def __str__(self) -> str:
        return f"{self.decl.name}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class FieldAssign(Expression):
    """The object state ``base`` with field ``field_index`` set to ``value``."""

    base: Expression
    field_index: int
    value: Expression
    struct_tag: str

    def __post_init__(self) -> None:
        _require(
            self.base.type.is_object,
            "FieldAssign",
            f"base must be an object, got {self.base.type}",
        )
        _check_field_index(self.field_index, "FieldAssign")
        _require_sorted(self.value.type, "FieldAssign", "value")

    @property
    def type(self) -> Type:
        return OBJECT

    def children(self) -> tuple[Expression, ...]:
        return (self.base, self.value)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_field_assign(self)

    def __str__(self) -> str:
        return f"{self.base}{{{self.field_index} := {self.value}}}"


@dataclass(frozen=True)
class FieldAccess(Expression):
    """Read of field ``field_index`` from the object state ``base``.
    ``prior_state`` is the state that existed right before the most recent
    write to this field, or None when the field was never written.
    """

    base: Expression
    field_index: int
    prior_state: Expression | None
    struct_tag: str
    field_type: Type

    def __post_init__(self) -> None:
        _require(
            self.base.type.is_object,
            "FieldAccess",
            f"base must be an object, got {self.base.type}",
        )
        if self.prior_state is not None:
            _require(
                self.prior_state.type.is_object,
                "FieldAccess",
                f"prior state must be an object, got {self.prior_state.type}",
            )
        _check_field_index(self.field_index, "FieldAccess")
        _require_sorted(self.field_type, "FieldAccess", "field")

    @property
    def type(self) -> Type:
        return self.field_type

    def children(self) -> tuple[Expression, ...]:
        return (self.base,)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_field_access(self)

    def __str__(self) -> str:
        return f"{self.base}.{self.field_index}"


def object_root(state: Expression) -> Variable:
    """Return the root variable of an object state's store chain."""
    while isinstance(state, FieldAssign):
        state = state.base
    if not isinstance(state, Variable) or not state.type.is_object:
        raise SymbolicTypeError(f"{state} is not an object state", node="object_root")
    return state


def logical_and(*operands: Expression) -> LogicalOp:
    return LogicalOp(operands, LogicalOperator.AND)


def logical_or(*operands: Expression) -> LogicalOp:
    return LogicalOp(operands, LogicalOperator.OR)


def logical_not(operand: Expression) -> LogicalOp:
    return LogicalOp((operand,), LogicalOperator.NOT)


def implies(antecedent: Expression, consequent: Expression) -> LogicalOp:
    return LogicalOp((antecedent, consequent), LogicalOperator.IMPLIES)


def const(value: bool | int) -> Expression:
    """Literal for a Python bool or int."""
    if isinstance(value, bool):
        return BoolConstant(value)
    return IntConstant(value)


def call(decl: FunctionDecl, args: Sequence[Expression]) -> FunctionCall:
    return FunctionCall(decl, tuple(args))


__all__ = [
    "BinaryOperator",
    "LogicalOperator",
    "UnaryOperator",
    "Expression",
    "Variable",
    "IntConstant",
    "BoolConstant",
    "BinaryOp",
    "LogicalOp",
    "UnaryOp",
    "TernaryOp",
    "FunctionDecl",
    "FunctionCall",
    "FieldAssign",
    "FieldAccess",
    "type_of",
    "binary_result_type",
    "object_root",
    "logical_and",
    "logical_or",
    "logical_not",
    "implies",
    "const",
    "call",
    "INT64_MIN",
    "INT64_MAX",
]
