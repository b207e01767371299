"""Structural equality rules used to pair baseline and challenger members."""

from __future__ import annotations

from pubdiff.engine.descriptors import (
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
)
from pubdiff.engine.errors import UnsupportedMemberError
from pubdiff.engine.visibility import is_protected, is_public


def have_same_name(baseline: TypeRef, challenger: TypeRef) -> bool:
    """Namespace, name and generic arguments match, recursively."""
    if baseline.namespace != challenger.namespace or baseline.name != challenger.name:
        return False
    if len(baseline.args) != len(challenger.args):
        return False
    return all(have_same_name(b, c) for b, c in zip(baseline.args, challenger.args))


def methods_equal(baseline: MethodDescriptor, challenger: MethodDescriptor) -> bool:
    """Name, declaring type, public-ness, protected-ness, static-ness and parameter types."""
    if not (
        baseline.name == challenger.name
        and have_same_name(baseline.declaring_type, challenger.declaring_type)
        and is_protected(baseline) == is_protected(challenger)
        and is_public(baseline) == is_public(challenger)
        and baseline.is_static == challenger.is_static
    ):
        return False
    if len(baseline.parameter_types) != len(challenger.parameter_types):
        return False
    return all(
        have_same_name(b, c)
        for b, c in zip(baseline.parameter_types, challenger.parameter_types)
    )


def fields_equal(baseline: FieldDescriptor, challenger: FieldDescriptor) -> bool:
    # Fields cannot be overloaded, so the name is enough.
    return baseline.name == challenger.name


def events_equal(baseline: EventDescriptor, challenger: EventDescriptor) -> bool:
    return baseline.name == challenger.name


def properties_equal(baseline: PropertyDescriptor, challenger: PropertyDescriptor) -> bool:
    """Same name and declaring type, and no differences among the accessor methods."""
    if baseline.name != challenger.name:
        return False
    if not have_same_name(baseline.declaring_type, challenger.declaring_type):
        return False
    from pubdiff.engine.differ import compare_members

    return next(iter(compare_members(baseline.accessors, challenger.accessors)), None) is None


def types_equal(baseline: TypeDescriptor, challenger: TypeDescriptor) -> bool:
    """Two types are equal when comparing their member graphs yields nothing."""
    from pubdiff.engine.differ import compare_types

    return next(iter(compare_types(baseline, challenger)), None) is None


def members_equal(baseline: object, challenger: object) -> bool:
    """Dispatch on the baseline's kind; members of different kinds never match.

    Methods and constructors only match their own kind.
    """
    if isinstance(baseline, MethodDescriptor):
        return (
            isinstance(challenger, MethodDescriptor)
            and baseline.is_constructor == challenger.is_constructor
            and methods_equal(baseline, challenger)
        )
    if isinstance(baseline, FieldDescriptor):
        return isinstance(challenger, FieldDescriptor) and fields_equal(baseline, challenger)
    raise UnsupportedMemberError("baseline", baseline)


__all__ = [
    "events_equal",
    "fields_equal",
    "have_same_name",
    "members_equal",
    "methods_equal",
    "properties_equal",
    "types_equal",
]
