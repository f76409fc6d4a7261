"""symir: typed symbolic values for program analysis.
symir represents program values as a typed expression IR, models mutable
object and array state functionally, and lowers both to Z3 terms:
- Expressions type-check themselves at construction
- Field and array writes produce new states instead of mutating old ones
- One translation session interns each variable exactly once
Example:
    >>> from symir import AnalysisSession, BinaryOp, BinaryOperator, INT, IntConstant, Variable
    >>> x = Variable("x", INT)
    >>> session = AnalysisSession()
    >>> session.is_satisfiable(BinaryOp(x, IntConstant(5), BinaryOperator.GT))
    True
"""

from symir.config import SymirConfig, load_config
from symir.core.errors import (
    InvalidHandleError,
    SymbolicTypeError,
    SymirError,
    UnknownTypeError,
    UnsupportedVariantError,
)
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
    type_of,
)
from symir.core.memory import Memory, Ref
from symir.core.solver import SolverResult, SymbolicSolver
from symir.core.types import BOOL, INT, OBJECT, REF, Type, array_of, function_of, sort_of
from symir.logging import LogLevel, configure_logging, get_logger
from symir.session import AnalysisSession
from symir.translation import Z3Translator

__version__ = "0.1.0"

__all__ = [
    "AnalysisSession",
    "SymirConfig",
    "load_config",
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
    "type_of",
    "Memory",
    "Ref",
    "Z3Translator",
    "SymbolicSolver",
    "SolverResult",
    "SymirError",
    "SymbolicTypeError",
    "UnsupportedVariantError",
    "UnknownTypeError",
    "InvalidHandleError",
    "LogLevel",
    "configure_logging",
    "get_logger",
]
