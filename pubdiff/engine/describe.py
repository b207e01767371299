"""Render members as report lines: ``<declaring-type-full-name> <member-signature>``."""

from __future__ import annotations

from pubdiff.engine.descriptors import (
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
)
from pubdiff.engine.differ import Difference
from pubdiff.engine.errors import UnsupportedMemberError


def short_name(ref: TypeRef) -> str:
    if not ref.args:
        return ref.name
    return f"{ref.name}<{', '.join(a.full_name for a in ref.args)}>"


def signature(member: object) -> str:
    """Member signature without the owning type."""
    if isinstance(member, MethodDescriptor):
        params = ", ".join(p.full_name for p in member.parameter_types)
        return f"{short_name(member.return_type)} {member.name}({params})"
    if isinstance(member, FieldDescriptor):
        return f"{member.field_type.full_name} {member.name}"
    if isinstance(member, EventDescriptor):
        return f"{member.handler_type.full_name} {member.name}"
    if isinstance(member, PropertyDescriptor):
        return f"{member.property_type.full_name} {member.name}"
    if isinstance(member, TypeDescriptor):
        return member.full_name
    raise UnsupportedMemberError("member", member)


def describe(member: object, owner: TypeRef | None = None) -> str:
    """One report line for *member* as seen on *owner* (its declaring type by default)."""
    if isinstance(member, TypeDescriptor):
        return member.full_name
    sig = signature(member)
    reflected = owner if owner is not None else member.declaring_type
    return f"{reflected.full_name} {sig}"


def describe_difference(diff: Difference) -> str:
    return describe(diff.member, diff.owner)


__all__ = ["describe", "describe_difference", "short_name", "signature"]
