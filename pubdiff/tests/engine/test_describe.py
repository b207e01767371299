"""Tests for pubdiff.engine.describe — report line rendering."""

from __future__ import annotations

import pytest

from pubdiff.engine.describe import describe, describe_difference, short_name, signature
from pubdiff.engine.descriptors import (
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
)
from pubdiff.engine.differ import Change, Difference
from pubdiff.engine.errors import UnsupportedMemberError

OWNER = TypeRef("Acme", "Widget")
STRING = TypeRef("System", "String")
VOID = TypeRef("System", "Void")
LIST_OF_STRING = TypeRef("System.Collections.Generic", "List", (STRING,))


def test_short_name_keeps_generic_arguments():
    assert short_name(LIST_OF_STRING) == "List<System.String>"
    assert short_name(STRING) == "String"


def test_method_signature_uses_full_parameter_names():
    m = MethodDescriptor("Add", OWNER, VOID, (STRING, LIST_OF_STRING))
    assert signature(m) == (
        "Void Add(System.String, System.Collections.Generic.List<System.String>)"
    )


def test_field_event_property_signatures():
    assert signature(FieldDescriptor("Count", OWNER, STRING)) == "System.String Count"
    assert signature(EventDescriptor("Changed", OWNER, STRING)) == "System.String Changed"
    assert signature(PropertyDescriptor("Title", OWNER, STRING)) == "System.String Title"


def test_describe_prefixes_declaring_type():
    m = MethodDescriptor(".ctor", OWNER, VOID)
    assert describe(m) == "Acme.Widget Void .ctor()"


def test_describe_uses_owner_for_inherited_member():
    base = TypeRef("Acme", "Base")
    m = MethodDescriptor("Run", base, VOID)
    assert describe(m, OWNER) == "Acme.Widget Void Run()"


def test_describe_type_is_its_full_name():
    nested = TypeDescriptor(TypeRef("Acme", "Widget+Part"))
    assert describe(nested) == "Acme.Widget+Part"


def test_describe_difference_uses_owner():
    m = MethodDescriptor("Run", TypeRef("Acme", "Base"), VOID)
    assert describe_difference(Difference(Change.ADDED, m, OWNER)) == "Acme.Widget Void Run()"


def test_signature_rejects_non_members():
    with pytest.raises(UnsupportedMemberError):
        signature("Run")
