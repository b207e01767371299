"""Language-neutral type descriptors built once by a reader, then compared.

Every descriptor is a frozen dataclass so a unit read from disk cannot be
mutated while it is being compared. Equality on the dataclasses themselves is
plain value equality; the *structural* matching rules used by the differ live
in ``pubdiff.engine.equality``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Visibility(enum.StrEnum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PROTECTED_INTERNAL = "protected_internal"
    INTERNAL = "internal"
    PRIVATE = "private"


class TypeKind(enum.StrEnum):
    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    DELEGATE = "delegate"
    MODULE = "module"


@dataclass(frozen=True)
class TypeRef:
    """Structural type identity: namespace + name + generic arguments.

    Nested types use ``Outer+Inner`` as their name. Arrays and by-ref
    parameters carry a ``[]`` / ``&`` suffix on the name.
    """
    namespace: str
    name: str
    args: tuple[TypeRef, ...] = ()

    @property
    def full_name(self) -> str:
        base = f"{self.namespace}.{self.name}" if self.namespace else self.name
        if not self.args:
            return base
        return f"{base}<{', '.join(a.full_name for a in self.args)}>"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    declaring_type: TypeRef
    return_type: TypeRef
    parameter_types: tuple[TypeRef, ...] = ()
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False
    is_constructor: bool = False
    accessor_of: str | None = None  # owning property/event name


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    declaring_type: TypeRef
    field_type: TypeRef
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    declaring_type: TypeRef
    property_type: TypeRef
    accessors: tuple[MethodDescriptor, ...] = ()


@dataclass(frozen=True)
class EventDescriptor:
    name: str
    declaring_type: TypeRef
    handler_type: TypeRef
    accessors: tuple[MethodDescriptor, ...] = ()


@dataclass(frozen=True)
class TypeDescriptor:
    ref: TypeRef
    kind: TypeKind = TypeKind.CLASS
    visibility: Visibility = Visibility.PUBLIC
    is_nested: bool = False
    bases: tuple[TypeRef, ...] = ()
    members: tuple[Member, ...] = ()

    @property
    def name(self) -> str:
        return self.ref.name

    @property
    def full_name(self) -> str:
        return self.ref.full_name

    @property
    def nested_types(self) -> tuple[TypeDescriptor, ...]:
        return tuple(m for m in self.members if isinstance(m, TypeDescriptor))


Member = MethodDescriptor | FieldDescriptor | PropertyDescriptor | EventDescriptor | TypeDescriptor


@dataclass(frozen=True)
class UnitDescriptor:
    """One version of a compiled/declared unit: its top-level types in declaration order."""
    name: str
    types: tuple[TypeDescriptor, ...] = ()
    origin: str = ""
    reader: str = ""
    metadata: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def iter_types(self):
        """Yield every type in the unit, nested types right after their parent."""
        stack = list(reversed(self.types))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.nested_types))

    def find_type(self, ref: TypeRef) -> TypeDescriptor | None:
        for candidate in self.iter_types():
            if candidate.ref == ref:
                return candidate
        return None


def member_kind(member: object) -> str:
    """Short kind label for output and serialization."""
    if isinstance(member, MethodDescriptor):
        return "constructor" if member.is_constructor else "method"
    if isinstance(member, FieldDescriptor):
        return "field"
    if isinstance(member, PropertyDescriptor):
        return "property"
    if isinstance(member, EventDescriptor):
        return "event"
    if isinstance(member, TypeDescriptor):
        return "type"
    return type(member).__name__


__all__ = [
    "EventDescriptor",
    "FieldDescriptor",
    "Member",
    "MethodDescriptor",
    "PropertyDescriptor",
    "TypeDescriptor",
    "TypeKind",
    "TypeRef",
    "UnitDescriptor",
    "Visibility",
    "member_kind",
]
