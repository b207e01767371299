"""Visibility filter: which members take part in a comparison at all."""

from __future__ import annotations

import logging

from pubdiff.engine.descriptors import (
    EventDescriptor,
    FieldDescriptor,
    Member,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeRef,
    UnitDescriptor,
    Visibility,
)
from pubdiff.engine.errors import UnsupportedMemberError

logger = logging.getLogger(__name__)

_PROTECTED = frozenset({Visibility.PROTECTED, Visibility.PROTECTED_INTERNAL})
_NESTED_VISIBLE = frozenset({Visibility.PUBLIC, *_PROTECTED})


def is_public(member: MethodDescriptor | FieldDescriptor) -> bool:
    return member.visibility == Visibility.PUBLIC


def is_protected(member: MethodDescriptor | FieldDescriptor) -> bool:
    """Protected and protected-internal both count as protected."""
    return member.visibility in _PROTECTED


def is_visible(member: object) -> bool:
    """Return True if *member* takes part in comparison.

    Properties never do: their accessor methods are compared instead.
    Events always do; their accessors are filtered separately as methods.
    """
    if isinstance(member, (MethodDescriptor, FieldDescriptor)):
        return is_public(member) or is_protected(member)
    if isinstance(member, EventDescriptor):
        return True
    if isinstance(member, TypeDescriptor):
        return member.is_nested and member.visibility in _NESTED_VISIBLE
    if isinstance(member, PropertyDescriptor):
        return False
    raise UnsupportedMemberError("member", member)


def visible_types(unit: UnitDescriptor) -> list[TypeDescriptor]:
    """Top-level types of *unit* that are visible outside it.

    Nested types are reached by recursing into their enclosing type.
    """
    return [t for t in unit.types if t.visibility == Visibility.PUBLIC]


def _own_visible_members(type_desc: TypeDescriptor) -> list[Member]:
    result: list[Member] = []
    for member in type_desc.members:
        if isinstance(member, PropertyDescriptor):
            result.extend(a for a in member.accessors if is_visible(a))
            continue
        if not is_visible(member):
            continue
        result.append(member)
        if isinstance(member, EventDescriptor):
            result.extend(a for a in member.accessors if is_visible(a))
    return result


def _signature_key(member: Member) -> tuple | None:
    if isinstance(member, MethodDescriptor):
        return ("method", member.name, member.parameter_types)
    if isinstance(member, FieldDescriptor):
        return ("field", member.name)
    if isinstance(member, EventDescriptor):
        return ("event", member.name)
    return None


def _is_inheritable(member: Member) -> bool:
    if isinstance(member, TypeDescriptor):
        return False
    if isinstance(member, MethodDescriptor):
        return not member.is_static and not member.is_constructor
    if isinstance(member, FieldDescriptor):
        return not member.is_static
    return True


def resolve_type(unit: UnitDescriptor, ref: TypeRef) -> TypeDescriptor | None:
    """Find *ref* in *unit*: exact match, then ignoring generic arguments, then by unique name."""
    found = unit.find_type(ref)
    if found is not None:
        return found
    same_name = [t for t in unit.iter_types() if t.ref.name == ref.name]
    for candidate in same_name:
        if candidate.ref.namespace == ref.namespace:
            return candidate
    if len(same_name) == 1 and not ref.namespace:
        return same_name[0]
    return None


def visible_members(
    type_desc: TypeDescriptor, unit: UnitDescriptor | None = None
) -> list[Member]:
    """Visible members of *type_desc* in declaration order.

    With *unit*, inherited instance members of base types declared in the
    same unit follow the type's own members, unless the type redeclares a
    member with the same signature.
    """
    result = _own_visible_members(type_desc)
    if unit is None or type_desc.kind in (TypeKind.INTERFACE, TypeKind.MODULE):
        return result

    seen_keys = {_signature_key(m) for m in result}
    seen_types = {type_desc.ref}
    pending = list(type_desc.bases)
    while pending:
        base_ref = pending.pop(0)
        base = resolve_type(unit, base_ref)
        if base is None:
            logger.debug("Base %s of %s is outside the unit; not inherited",
                         base_ref, type_desc.full_name)
            continue
        if base.ref in seen_types or base.kind == TypeKind.INTERFACE:
            continue
        seen_types.add(base.ref)
        for member in _own_visible_members(base):
            if not _is_inheritable(member):
                continue
            key = _signature_key(member)
            if key in seen_keys:
                continue
            seen_keys.add(key)
            result.append(member)
        pending.extend(base.bases)
    return result


__all__ = [
    "is_protected",
    "is_public",
    "is_visible",
    "resolve_type",
    "visible_members",
    "visible_types",
]
