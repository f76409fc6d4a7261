"""Visitor interface over the closed set of expression variants.
A concrete visitor must implement every visit method; ABC instantiation
fails otherwise, so adding a variant forces every visitor to handle it.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar
if TYPE_CHECKING:
    from symir.core.expressions import (
        BinaryOp,
        BoolConstant,
        Expression,
        FieldAccess,
        FieldAssign,
        FunctionCall,
        FunctionDecl,
        IntConstant,
        LogicalOp,
        TernaryOp,
        UnaryOp,
        Variable,
    )
R = TypeVar("R")
class ExpressionVisitor(ABC, Generic[R]):
    """Base class for computations over expression trees."""
    def visit(self, expr: Expression) -> R:
        return expr.accept(self)
    @abstractmethod
    def visit_variable(self, expr: Variable) -> R: ...
    @abstractmethod
    def visit_int_constant(self, expr: IntConstant) -> R: ...
    @abstractmethod
    def visit_bool_constant(self, expr: BoolConstant) -> R: ...
    @abstractmethod
    def visit_binary_op(self, expr: BinaryOp) -> R: ...
    @abstractmethod
    def visit_logical_op(self, expr: LogicalOp) -> R: ...
    @abstractmethod
    def visit_unary_op(self, expr: UnaryOp) -> R: ...
    @abstractmethod
    def visit_ternary_op(self, expr: TernaryOp) -> R: ...
    @abstractmethod
    def visit_function_decl(self, expr: FunctionDecl) -> R: ...
    @abstractmethod
    def visit_function_call(self, expr: FunctionCall) -> R: ...
    @abstractmethod
    def visit_field_assign(self, expr: FieldAssign) -> R: ...
    @abstractmethod
    def visit_field_access(self, expr: FieldAccess) -> R: ...
class VariableCollector(ExpressionVisitor[None]):
    """Collects the variables of a tree, in first-occurrence order.
    Object roots reached through field reads and writes are included.
    """
    def __init__(self) -> None:
        self.variables: dict[str, Variable] = {}
    def _children(self, expr: Expression) -> None:
        for child in expr.children():
            child.accept(self)
    def visit_variable(self, expr: Variable) -> None:
        self.variables.setdefault(expr.name, expr)
    def visit_int_constant(self, expr: IntConstant) -> None:
        pass
    def visit_bool_constant(self, expr: BoolConstant) -> None:
        pass
    def visit_binary_op(self, expr: BinaryOp) -> None:
        self._children(expr)
    def visit_logical_op(self, expr: LogicalOp) -> None:
        self._children(expr)
    def visit_unary_op(self, expr: UnaryOp) -> None:
        self._children(expr)
    def visit_ternary_op(self, expr: TernaryOp) -> None:
        self._children(expr)
    def visit_function_decl(self, expr: FunctionDecl) -> None:
        pass
    def visit_function_call(self, expr: FunctionCall) -> None:
        self._children(expr)
    def visit_field_assign(self, expr: FieldAssign) -> None:
        self._children(expr)
    def visit_field_access(self, expr: FieldAccess) -> None:
        self._children(expr)
def free_variables(*exprs: Expression) -> dict[str, Variable]:
    """Map of variable name to Variable for all given trees."""
    collector = VariableCollector()
    for expr in exprs:
        expr.accept(collector)
    return collector.variables
__all__ = ["ExpressionVisitor", "VariableCollector", "free_variables"]
