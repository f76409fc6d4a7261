"""Type model for symir.
Types are plain value descriptors: two types are equal when they have the
same shape. Only Int, Bool and arrays of those have a Z3 sort; functions,
objects and references exist only at the IR level.
Type Hierarchy:
    Type
    ├── int                      # Z3 Int
    ├── bool                     # Z3 Bool
    ├── []T                      # Z3 Array(Int, sort(T))
    ├── func(T1, ..., Tn) R      # uninterpreted function signature
    ├── object                   # carried by the heap field-array encoding
    └── reference                # heap handle
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto

import z3

from symir.core.errors import SymbolicTypeError, UnknownTypeError


class TypeKind(Enum):
    """Closed set of value categories."""

    INT = auto()
    BOOL = auto()
    ARRAY = auto()
    FUNCTION = auto()
    OBJECT = auto()
    REF = auto()


@dataclass(frozen=True)
class Type:
    """A structural type descriptor.
    Attributes:
        kind: The value category.
        inner: Element type, for arrays only.
        args: Argument types, for functions only.
        ret: Return type, for functions only.
    """

    kind: TypeKind
    inner: Type | None = None
    args: tuple[Type, ...] = ()
    ret: Type | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        if self.kind is TypeKind.ARRAY:
            if self.inner is None:
                raise SymbolicTypeError("array type needs an element type", node="Type")
        elif self.inner is not None:
            raise SymbolicTypeError(f"{self.kind.name} type has no element type", node="Type")
        if self.kind is TypeKind.FUNCTION:
            if self.ret is None:
                raise SymbolicTypeError("function type needs a return type", node="Type")
        elif self.args or self.ret is not None:
            raise SymbolicTypeError(f"{self.kind.name} type has no signature", node="Type")

    @property
    def is_int(self) -> bool:
        return self.kind is TypeKind.INT

    @property
    def is_bool(self) -> bool:
        return self.kind is TypeKind.BOOL

    @property
    def is_array(self) -> bool:
        return self.kind is TypeKind.ARRAY

    @property
    def is_function(self) -> bool:
        return self.kind is TypeKind.FUNCTION

    @property
    def is_object(self) -> bool:
        return self.kind is TypeKind.OBJECT

    @property
    def has_sort(self) -> bool:
        """Whether sort_of() is defined for this type."""
        if self.kind in (TypeKind.INT, TypeKind.BOOL):
            return True
        if self.kind is TypeKind.ARRAY:
            return self.inner.has_sort
        return False

    def __str__(self) -> str:
        if self.kind is TypeKind.ARRAY:
            return f"[]{self.inner}"
        if self.kind is TypeKind.FUNCTION:
            params = ", ".join(str(a) for a in self.args)
            return f"func({params}) {self.ret}"
        if self.kind is TypeKind.REF:
            return "reference"
        return self.kind.name.lower()


INT = Type(TypeKind.INT)
BOOL = Type(TypeKind.BOOL)
OBJECT = Type(TypeKind.OBJECT)
REF = Type(TypeKind.REF)


def array_of(inner: Type) -> Type:
    """Array type with the given element type."""
    return Type(TypeKind.ARRAY, inner=inner)


def function_of(args: Iterable[Type], ret: Type) -> Type:
    """Function type with the given signature."""
    return Type(TypeKind.FUNCTION, args=tuple(args), ret=ret)


def sort_of(type_: Type, ctx: z3.Context | None = None) -> z3.SortRef:
    """Map a type to its Z3 sort.
    Args:
        type_: The type to map.
        ctx: Z3 context (default: the global context).
    Returns:
        IntSort, BoolSort, or ArraySort(IntSort, sort_of(inner)).
    Raises:
        UnknownTypeError: For functions, objects and references.
    """
    if type_.kind is TypeKind.INT:
        return z3.IntSort(ctx)
    if type_.kind is TypeKind.BOOL:
        return z3.BoolSort(ctx)
    if type_.kind is TypeKind.ARRAY:
        return z3.ArraySort(z3.IntSort(ctx), sort_of(type_.inner, ctx))
    raise UnknownTypeError(type_)


__all__ = [
    "TypeKind",
    "Type",
    "INT",
    "BOOL",
    "OBJECT",
    "REF",
    "array_of",
    "function_of",
    "sort_of",
]
