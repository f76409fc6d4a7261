"""Error taxonomy for symir.
Every error here is a modeling or programming defect: symir performs no I/O,
so nothing is transient and nothing is retried.
"""
from __future__ import annotations
from typing import Any


class SymirError(Exception):
    """Base class for all symir errors."""


class SymbolicTypeError(SymirError, TypeError):
    """Raised when an expression would be ill-typed.
    Attributes:
        node: Name of the node kind being constructed.
        operands: The offending operands (or types).
    """

    def __init__(self, message: str, node: str = "", operands: tuple[Any, ...] = ()):
        self.node = node
        self.operands = operands
        prefix = f"{node}: " if node else ""
        super().__init__(f"{prefix}{message}")


class UnsupportedVariantError(SymirError):
    """Raised when a type or operator reaches a component with no rule for it."""

    def __init__(self, message: str, variant: Any = None):
        self.variant = variant
        super().__init__(message)


class UnknownTypeError(UnsupportedVariantError):
    """Raised when a type has no Z3 sort."""

    def __init__(self, type_: Any):
        super().__init__(f"type {type_} has no solver sort", variant=type_)


class InvalidHandleError(SymirError):
    """Raised when a Ref is unknown to a Memory or used with the wrong kind."""

    def __init__(self, message: str, ref: Any = None):
        self.ref = ref
        super().__init__(message)


__all__ = [
    "SymirError",
    "SymbolicTypeError",
    "UnsupportedVariantError",
    "UnknownTypeError",
    "InvalidHandleError",
]
