"""Core module for symir.
Provides:
- The type model and its mapping to Z3 sorts
- The typed expression IR and its visitor interface
- The functional heap model for object and array state
- The Z3 solver interface
"""

from symir.core.errors import (
    InvalidHandleError,
    SymbolicTypeError,
    SymirError,
    UnknownTypeError,
    UnsupportedVariantError,
)
from symir.core.expressions import (
    INT64_MAX,
    INT64_MIN,
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
    binary_result_type,
    call,
    const,
    implies,
    logical_and,
    logical_not,
    logical_or,
    object_root,
    type_of,
)
from symir.core.memory import Memory, ObjectHistory, Ref, RefKind
from symir.core.solver import (
    SolverResult,
    SymbolicSolver,
    is_satisfiable,
    prove,
    python_value,
)
from symir.core.types import (
    BOOL,
    INT,
    OBJECT,
    REF,
    Type,
    TypeKind,
    array_of,
    function_of,
    sort_of,
)
from symir.core.visitor import ExpressionVisitor, VariableCollector, free_variables

__all__ = [
    "SymirError",
    "SymbolicTypeError",
    "UnsupportedVariantError",
    "UnknownTypeError",
    "InvalidHandleError",
    "TypeKind",
    "Type",
    "INT",
    "BOOL",
    "OBJECT",
    "REF",
    "array_of",
    "function_of",
    "sort_of",
    "Expression",
    "Variable",
    "IntConstant",
    "BoolConstant",
    "BinaryOp",
    "BinaryOperator",
    "LogicalOp",
    "LogicalOperator",
    "UnaryOp",
    "UnaryOperator",
    "TernaryOp",
    "FunctionDecl",
    "FunctionCall",
    "FieldAssign",
    "FieldAccess",
    "INT64_MIN",
    "INT64_MAX",
    "type_of",
    "binary_result_type",
    "object_root",
    "logical_and",
    "logical_or",
    "logical_not",
    "implies",
    "const",
    "call",
    "ExpressionVisitor",
    "VariableCollector",
    "free_variables",
    "RefKind",
    "ObjectHistory",
    "Ref",
    "Memory",
    "SolverResult",
    "SymbolicSolver",
    "python_value",
    "is_satisfiable",
    "prove",
]
