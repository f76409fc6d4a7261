"""Symbolic heap model for symir.
Objects and arrays are never mutated in place. Every field write produces a
new FieldAssign state on top of the previous one, and the sequence of states
of an address is kept in an append-only history. Reads are built against the
newest state together with the state that preceded the last write to the
field, which is what the translator needs to lower reads to array selects.
Architecture:
    ┌─────────────────────────────────────────┐
    │                 Memory                  │
    ├─────────────────────────────────────────┤
    │  address counter (objects and arrays)   │
    │  address → ObjectHistory                │
    │  (address, field) → pre-write state     │
    │  Ref → primitive value                  │
    └─────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

from symir.core.errors import InvalidHandleError, SymbolicTypeError
from symir.core.expressions import Expression, FieldAccess, FieldAssign, Variable
from symir.core.types import OBJECT, Type, TypeKind
from symir.logging import LogLevel, get_logger


class RefKind(Enum):
    """What a heap handle points at."""

    PRIMITIVE = auto()
    OBJECT = auto()
    ARRAY = auto()


class ObjectHistory:
    """Append-only log of the states of one heap address."""

    def __init__(self, root: Variable):
        self._states: list[Expression] = [root]

    @property
    def root(self) -> Variable:
        return self._states[0]

    @property
    def current(self) -> Expression:
        return self._states[-1]

    def append(self, state: Expression) -> None:
        self._states.append(state)

    def states(self) -> tuple[Expression, ...]:
        return tuple(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[Expression]:
        return iter(self._states)


@dataclass(eq=False)
class Ref:
    """A heap handle.
    Refs compare by identity. Object and array refs share their history with
    every alias of the same address, so ``current_expr`` always reflects the
    latest write made through any of them.
    Attributes:
        kind: Primitive, object or array.
        address: Heap address; None for primitives.
        tag: Struct name (objects) or array type name (arrays).
        value_type: Primitive type, or array element type.
    """

    kind: RefKind
    address: int | None = None
    tag: str | None = None
    value_type: Type | None = None
    _history: ObjectHistory | None = field(default=None, repr=False)

    @property
    def current_expr(self) -> Expression:
        """The newest state of the referenced object."""
        if self._history is None:
            raise InvalidHandleError("primitive refs have no object state", ref=self)
        return self._history.current

    @property
    def version(self) -> int:
        """Number of writes made to the referenced address."""
        if self._history is None:
            return 0
        return len(self._history) - 1

    @property
    def is_primitive(self) -> bool:
        return self.kind is RefKind.PRIMITIVE

    @property
    def is_object(self) -> bool:
        return self.kind is RefKind.OBJECT

    @property
    def is_array(self) -> bool:
        return self.kind is RefKind.ARRAY


class Memory:
    """Heap state of one analysis session.
    Provides:
    - Allocation of primitive, object and array handles
    - Aliased handles on one address
    - Functional field and array element writes
    - Reads that observe the most recent write
    """

    def __init__(self) -> None:
        self._next_address = 1
        self._refs: set[Ref] = set()
        self._histories: dict[int, ObjectHistory] = {}
        self._root_names: set[str] = set()
        self._pre_write: dict[tuple[int, int], Expression] = {}
        self._layouts: dict[tuple[str, int], Type] = {}
        self._primitives: dict[Ref, Expression] = {}

    @property
    def _logger(self):
        return get_logger()

    def allocate(self, type_: Type, tag: str | None = None, name: str | None = None) -> Ref:
        """Allocate a handle for a value of the given type.
        Args:
            type_: ``OBJECT`` for a struct, an array type for an array, or
                Int/Bool for a primitive.
            tag: Struct name; arrays default to their type name.
            name: Name of the root variable of the object's state.
        Returns:
            A fresh Ref. Object and array refs get an address that is never
            reused by this memory.
        """
        if type_.kind in (TypeKind.INT, TypeKind.BOOL):
            ref = Ref(RefKind.PRIMITIVE, tag=tag, value_type=type_)
            self._refs.add(ref)
            return ref
        if type_.kind is TypeKind.OBJECT:
            kind, value_type, tag = RefKind.OBJECT, None, tag or "object"
        elif type_.kind is TypeKind.ARRAY:
            kind, value_type, tag = RefKind.ARRAY, type_.inner, tag or str(type_)
        else:
            raise self._fail(InvalidHandleError(f"cannot allocate a value of type {type_}"))
        address = self._next_address
        self._next_address += 1
        root_name = name or f"{tag}#{address}"
        if root_name in self._root_names:
            raise self._fail(InvalidHandleError(f"root name {root_name!r} is already in use"))
        self._root_names.add(root_name)
        history = ObjectHistory(Variable(root_name, OBJECT))
        self._histories[address] = history
        ref = Ref(kind, address=address, tag=tag, value_type=value_type, _history=history)
        self._refs.add(ref)
        if self._logger.is_enabled(LogLevel.TRACE):
            self._logger.trace(f"allocate {tag} at {address}", category="memory", root=root_name)
        return ref

    def alias(self, ref: Ref) -> Ref:
        """Return a second handle on the same object or array."""
        self._check(ref, RefKind.OBJECT, RefKind.ARRAY)
        other = Ref(
            ref.kind,
            address=ref.address,
            tag=ref.tag,
            value_type=ref.value_type,
            _history=ref._history,
        )
        self._refs.add(other)
        return other

    def is_allocated(self, ref: Ref) -> bool:
        return ref in self._refs

    def assign_primitive(self, ref: Ref, value: Expression) -> None:
        self._check(ref, RefKind.PRIMITIVE)
        if value.type != ref.value_type:
            raise self._fail(
                SymbolicTypeError(
                    f"cannot store {value.type} in a {ref.value_type} slot",
                    node="assign_primitive",
                    operands=(value,),
                )
            )
        self._primitives[ref] = value

    def get_primitive(self, ref: Ref) -> Expression:
        self._check(ref, RefKind.PRIMITIVE)
        try:
            return self._primitives[ref]
        except KeyError:
            raise self._fail(InvalidHandleError("primitive read before assignment", ref=ref)) from None

    def assign_field(self, ref: Ref, field_index: int, value: Expression) -> FieldAssign:
        """Write ``value`` into a field and return the new object state.
        The state before the write is recorded as the pre-write state of
        ``(address, field_index)``.
        """
        self._check(ref, RefKind.OBJECT, RefKind.ARRAY)
        prior = ref.current_expr
        state = FieldAssign(prior, field_index, value, ref.tag)
        self._check_layout(ref.tag, field_index, value.type, "assign_field")
        self._pre_write[(ref.address, field_index)] = prior
        ref._history.append(state)
        if self._logger.is_enabled(LogLevel.TRACE):
            self._logger.trace(
                f"write {ref.tag}#{ref.address}.{field_index} := {value}",
                category="memory",
                version=ref.version,
            )
        return state

    def get_field(self, ref: Ref, field_index: int, field_type: Type) -> FieldAccess:
        """Read a field against the newest state of the object."""
        self._check(ref, RefKind.OBJECT, RefKind.ARRAY)
        prior = self._pre_write.get((ref.address, field_index))
        read = FieldAccess(ref.current_expr, field_index, prior, ref.tag, field_type)
        self._check_layout(ref.tag, field_index, field_type, "get_field")
        return read

    def assign_to_array(self, ref: Ref, index: int, value: Expression) -> FieldAssign:
        """Store ``value`` at a constant index of an array."""
        self._check(ref, RefKind.ARRAY)
        if value.type != ref.value_type:
            raise self._fail(
                SymbolicTypeError(
                    f"cannot store {value.type} in {ref.tag}",
                    node="assign_to_array",
                    operands=(value,),
                )
            )
        return self.assign_field(ref, index, value)

    def get_from_array(self, ref: Ref, index: int, element_type: Type | None = None) -> FieldAccess:
        """Read the element at a constant index of an array."""
        self._check(ref, RefKind.ARRAY)
        if element_type is not None and element_type != ref.value_type:
            raise self._fail(
                SymbolicTypeError(
                    f"{ref.tag} has no {element_type} elements", node="get_from_array"
                )
            )
        return self.get_field(ref, index, ref.value_type)

    def pre_write_state(self, ref: Ref, field_index: int) -> Expression | None:
        """State before the most recent write to a field, if any."""
        self._check(ref, RefKind.OBJECT, RefKind.ARRAY)
        return self._pre_write.get((ref.address, field_index))

    def history(self, ref: Ref) -> tuple[Expression, ...]:
        """All states of the referenced address, oldest first."""
        self._check(ref, RefKind.OBJECT, RefKind.ARRAY)
        return ref._history.states()

    @property
    def object_count(self) -> int:
        """Number of allocated addresses."""
        return self._next_address - 1

    @property
    def roots(self) -> tuple[Variable, ...]:
        """Root variables of the allocated addresses, in address order."""
        return tuple(self._histories[address].root for address in sorted(self._histories))

    def _check(self, ref: Ref, *kinds: RefKind) -> None:
        if ref not in self._refs:
            raise self._fail(InvalidHandleError("ref was not allocated by this memory", ref=ref))
        if ref.kind not in kinds:
            expected = " or ".join(k.name.lower() for k in kinds)
            raise self._fail(
                InvalidHandleError(f"expected a {expected} ref, got {ref.kind.name.lower()}", ref=ref)
            )

    def _check_layout(self, tag: str, field_index: int, type_: Type, node: str) -> None:
        known = self._layouts.setdefault((tag, field_index), type_)
        if known != type_:
            raise self._fail(
                SymbolicTypeError(
                    f"field {tag}.{field_index} holds {known}, not {type_}",
                    node=node,
                    operands=(known, type_),
                )
            )

    def _fail(self, error: Exception) -> Exception:
        self._logger.debug(str(error), category="memory")
        return error

    def __repr__(self) -> str:
        return f"Memory({self.object_count} addresses, {len(self._primitives)} primitives)"


__all__ = ["RefKind", "ObjectHistory", "Ref", "Memory"]
