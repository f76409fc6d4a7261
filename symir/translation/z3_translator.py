"""Lowering of symir expressions to Z3 terms.
The translator is a visitor over the closed expression variant set. It owns
the only mutable state of a translation session: the interned variable
terms, function declarations, object identities and initial field arrays.
Heap encoding:
    Every (struct tag, field index, field type) triple owns one Z3 array
    ``tag.index : Array(Int, sort(field type))`` whose initial contents are
    unconstrained. Each object root variable has an Int identity constant
    ``name!id``. A FieldAssign chain lowers to nested stores on the field
    array at the root's identity, and a FieldAccess selects from the store
    chain of the state it reads. An object ternary lowers to ``If`` over
    identities and over field arrays.
    Variables, identities, field arrays and functions share Z3's symbol
    namespace; a name wanted by two of them raises UnsupportedVariantError.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable
from functools import reduce
from types import MappingProxyType
from typing import Any

import z3

from symir.core.errors import SymbolicTypeError, UnsupportedVariantError
from symir.core.expressions import (
    BinaryOp,
    BinaryOperator,
    BoolConstant,
    Expression,
    FieldAccess,
    FieldAssign,
    FunctionCall,
    FunctionDecl,
    IntConstant,
    LogicalOp,
    LogicalOperator,
    TernaryOp,
    UnaryOp,
    UnaryOperator,
    Variable,
    object_root,
)
from symir.core.types import Type, TypeKind, sort_of
from symir.core.visitor import ExpressionVisitor
from symir.logging import LogLevel, get_logger

_BINARY_RULES: dict[tuple[BinaryOperator, TypeKind], Callable[[Any, Any], Any]] = {
    (BinaryOperator.ADD, TypeKind.INT): operator.add,
    (BinaryOperator.SUB, TypeKind.INT): operator.sub,
    (BinaryOperator.MUL, TypeKind.INT): operator.mul,
    (BinaryOperator.DIV, TypeKind.INT): operator.truediv,
    (BinaryOperator.MOD, TypeKind.INT): operator.mod,
    (BinaryOperator.EQ, TypeKind.INT): operator.eq,
    (BinaryOperator.EQ, TypeKind.BOOL): operator.eq,
    (BinaryOperator.EQ, TypeKind.ARRAY): operator.eq,
    (BinaryOperator.EQ, TypeKind.OBJECT): operator.eq,
    (BinaryOperator.NE, TypeKind.INT): operator.ne,
    (BinaryOperator.NE, TypeKind.BOOL): operator.ne,
    (BinaryOperator.NE, TypeKind.ARRAY): operator.ne,
    (BinaryOperator.NE, TypeKind.OBJECT): operator.ne,
    (BinaryOperator.LT, TypeKind.INT): operator.lt,
    (BinaryOperator.LE, TypeKind.INT): operator.le,
    (BinaryOperator.GT, TypeKind.INT): operator.gt,
    (BinaryOperator.GE, TypeKind.INT): operator.ge,
    (BinaryOperator.SELECT, TypeKind.ARRAY): z3.Select,
}


class Z3Translator(ExpressionVisitor[Any]):
    """Translates expression trees into Z3 terms.
    One translator is one translation session: a variable name maps to the
    same Z3 term for the translator's whole lifetime, until ``reset()``.
    Example:
        translator = Z3Translator()
        x = Variable("x", INT)
        term = translator.translate(BinaryOp(x, IntConstant(1), BinaryOperator.ADD))
    """

    def __init__(self, ctx: z3.Context | None = None) -> None:
        """Initialize the translator.
        Args:
            ctx: Z3 context to build terms in (default: the global context).
                Give each thread its own context.
        """
        self.ctx = ctx if ctx is not None else z3.main_ctx()
        self._variables: dict[str, tuple[Type, z3.ExprRef]] = {}
        self._functions: dict[tuple[str, tuple[Type, ...], Type], z3.FuncDeclRef] = {}
        self._field_arrays: dict[tuple[str, int, Type], z3.ArrayRef] = {}
        self._chains: dict[tuple[int, tuple[str, int, Type]], tuple[FieldAssign, z3.ArrayRef]]
        self._chains = {}
        self._names: dict[tuple[str, tuple[str, ...]], tuple] = {}

    def translate(self, expr: Expression) -> Any:
        """Lower an expression to a Z3 term (or declaration, for FunctionDecl)."""
        return expr.accept(self)

    def translate_all(self, *exprs: Expression) -> list[Any]:
        return [expr.accept(self) for expr in exprs]

    def reset(self) -> None:
        """Start a new session: forget every interned term."""
        self._variables.clear()
        self._functions.clear()
        self._field_arrays.clear()
        self._chains.clear()
        self._names.clear()

    @property
    def variables(self) -> MappingProxyType:
        """Read-only view of interned variable terms by name."""
        return MappingProxyType({name: term for name, (_, term) in self._variables.items()})

    def object_identities(self) -> dict[str, z3.ArithRef]:
        """Identity terms of the object roots seen so far."""
        return {
            name: term
            for name, (type_, term) in self._variables.items()
            if type_.kind is TypeKind.OBJECT
        }

    def distinct_objects_axiom(self, roots: Iterable[Variable] | None = None) -> z3.BoolRef:
        """Constraint stating that object roots are pairwise distinct objects.
        Args:
            roots: Root variables to cover (default: every object root seen
                so far). Repeated roots count once.
        """
        if roots is None:
            identities = list(self.object_identities().values())
        else:
            identities = list({root.name: self.visit_variable(root) for root in roots}.values())
        if len(identities) < 2:
            return z3.BoolVal(True, self.ctx)
        return z3.Distinct(*identities)

    def visit_variable(self, expr: Variable) -> z3.ExprRef:
        cached = self._variables.get(expr.name)
        if cached is not None:
            known_type, term = cached
            if known_type != expr.type:
                raise SymbolicTypeError(
                    f"variable {expr.name!r} was declared as {known_type}, not {expr.type}",
                    node="Variable",
                    operands=(known_type, expr.type),
                )
            return term
        if expr.type.is_object:
            name, sort = f"{expr.name}!id", z3.IntSort(self.ctx)
        else:
            name, sort = expr.name, sort_of(expr.type, self.ctx)
        self._claim(name, (sort,), ("variable", expr.name))
        term = z3.Const(name, sort)
        self._variables[expr.name] = (expr.type, term)
        logger = get_logger()
        if logger.is_enabled(LogLevel.TRACE):
            logger.trace(f"intern {expr.name}: {expr.type}", category="translate")
        return term

    def visit_int_constant(self, expr: IntConstant) -> z3.IntNumRef:
        return z3.IntVal(expr.value, self.ctx)

    def visit_bool_constant(self, expr: BoolConstant) -> z3.BoolRef:
        return z3.BoolVal(expr.value, self.ctx)

    def visit_binary_op(self, expr: BinaryOp) -> z3.ExprRef:
        kind = expr.left.type.kind
        rule = _BINARY_RULES.get((expr.operator, kind))
        if rule is None:
            raise UnsupportedVariantError(
                f"no lowering for {expr.operator.name} on {expr.left.type}",
                variant=(expr.operator, kind),
            )
        if kind is TypeKind.OBJECT:
            left, right = self._identity(expr.left), self._identity(expr.right)
        else:
            left, right = expr.left.accept(self), expr.right.accept(self)
        return rule(left, right)

    def visit_logical_op(self, expr: LogicalOp) -> z3.BoolRef:
        terms = [operand.accept(self) for operand in expr.operands]
        if expr.operator is LogicalOperator.AND:
            return reduce(z3.And, terms)
        if expr.operator is LogicalOperator.OR:
            return reduce(z3.Or, terms)
        if expr.operator is LogicalOperator.NOT:
            return z3.Not(terms[0])
        if expr.operator is LogicalOperator.IMPLIES:
            return z3.Implies(terms[0], terms[1])
        raise UnsupportedVariantError(f"no lowering for {expr.operator!r}", variant=expr.operator)

    def visit_unary_op(self, expr: UnaryOp) -> z3.ExprRef:
        term = expr.operand.accept(self)
        if expr.operator is UnaryOperator.NOT:
            return z3.Not(term)
        if expr.operator is UnaryOperator.NEG:
            return -term
        raise UnsupportedVariantError(f"no lowering for {expr.operator!r}", variant=expr.operator)

    def visit_ternary_op(self, expr: TernaryOp) -> z3.ExprRef:
        if expr.type.is_object:
            return self._identity(expr)
        if not expr.type.has_sort:
            raise UnsupportedVariantError(
                f"no lowering for a ternary over {expr.type}", variant=expr.type
            )
        return z3.If(
            expr.condition.accept(self),
            expr.then_expr.accept(self),
            expr.else_expr.accept(self),
        )

    def visit_function_decl(self, expr: FunctionDecl) -> z3.FuncDeclRef:
        key = (expr.name, expr.arg_types, expr.ret_type)
        decl = self._functions.get(key)
        if decl is None:
            signature = [sort_of(t, self.ctx) for t in expr.arg_types]
            signature.append(sort_of(expr.ret_type, self.ctx))
            self._claim(expr.name, tuple(signature), ("function", expr.name))
            decl = z3.Function(expr.name, *signature)
            self._functions[key] = decl
        return decl

    def visit_function_call(self, expr: FunctionCall) -> z3.ExprRef:
        decl = self.visit_function_decl(expr.decl)
        return decl(*[arg.accept(self) for arg in expr.args])

    def visit_field_assign(self, expr: FieldAssign) -> z3.ArrayRef:
        return self._field_array(expr, expr.struct_tag, expr.field_index, expr.value.type)

    def visit_field_access(self, expr: FieldAccess) -> z3.ExprRef:
        self._check_prior_state(expr)
        array = self._field_array(expr.base, expr.struct_tag, expr.field_index, expr.field_type)
        return z3.Select(array, self._identity(expr.base))

    def _identity(self, state: Expression) -> z3.ArithRef:
        while isinstance(state, FieldAssign):
            state = state.base
        if isinstance(state, TernaryOp):
            return z3.If(
                state.condition.accept(self),
                self._identity(state.then_expr),
                self._identity(state.else_expr),
            )
        return self.visit_variable(object_root(state))

    def _writes(self, state: Expression, tag: str, index: int) -> list[FieldAssign]:
        """Writes to one field along a store chain, newest first."""
        writes = []
        while isinstance(state, FieldAssign):
            if state.field_index == index and state.struct_tag == tag:
                writes.append(state)
            state = state.base
        return writes

    def _field_array(self, state: Expression, tag: str, index: int, type_: Type) -> z3.ArrayRef:
        """Contents of one field array as seen by an object state.
        Arrays are cached per FieldAssign node, so every write is lowered once
        however many reads build on it.
        """
        key = (tag, index, type_)
        pending = []
        array = None
        while isinstance(state, FieldAssign):
            cached = self._chains.get((id(state), key))
            if cached is not None:
                array = cached[1]
                break
            pending.append(state)
            state = state.base
        if array is None and isinstance(state, TernaryOp):
            array = z3.If(
                state.condition.accept(self),
                self._field_array(state.then_expr, tag, index, type_),
                self._field_array(state.else_expr, tag, index, type_),
            )
        elif array is None:
            array = self._initial_field_array(tag, index, type_)
        identity = self._identity(state)
        for write in reversed(pending):
            if write.field_index == index and write.struct_tag == tag:
                if write.value.type != type_:
                    raise SymbolicTypeError(
                        f"field {tag}.{index} holds {write.value.type}, not {type_}",
                        node="FieldAccess",
                        operands=(write.value.type, type_),
                    )
                array = z3.Store(array, identity, write.value.accept(self))
            # The node is kept alongside its array so that its id stays unique.
            self._chains[(id(write), key)] = (write, array)
        return array

    def _initial_field_array(self, tag: str, index: int, type_: Type) -> z3.ArrayRef:
        key = (tag, index, type_)
        array = self._field_arrays.get(key)
        if array is None:
            sort = z3.ArraySort(z3.IntSort(self.ctx), sort_of(type_, self.ctx))
            name = f"{tag}.{index}"
            self._claim(name, (sort,), ("field", tag, index))
            array = z3.Const(name, sort)
            self._field_arrays[key] = array
        return array

    def _claim(self, name: str, sorts: tuple[z3.SortRef, ...], owner: tuple) -> None:
        # Z3 identifies a constant by its name and sorts; two owners of one
        # such pair would silently share a term.
        key = (name, tuple(sort.sexpr() for sort in sorts))
        known = self._names.setdefault(key, owner)
        if known != owner:
            raise UnsupportedVariantError(
                f"Z3 symbol {name!r} is wanted by both {known} and {owner}", variant=owner
            )

    def _check_prior_state(self, expr: FieldAccess) -> None:
        # The newest write to the field must sit directly on the recorded
        # pre-write state; no write at all means no pre-write state.
        writes = self._writes(expr.base, expr.struct_tag, expr.field_index)
        prior = expr.prior_state
        if not writes and prior is None:
            return
        if writes and prior is not None and (writes[0].base is prior or writes[0].base == prior):
            return
        raise UnsupportedVariantError(
            f"pre-write state of {expr.struct_tag}.{expr.field_index} "
            "does not match the object's store chain",
            variant=expr,
        )

    def __repr__(self) -> str:
        return (
            f"Z3Translator({len(self._variables)} variables, "
            f"{len(self._functions)} functions, {len(self._field_arrays)} field arrays)"
        )


__all__ = ["Z3Translator"]
