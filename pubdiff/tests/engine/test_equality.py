"""Tests for pubdiff.engine.equality — structural matching rules."""

from __future__ import annotations

import pytest

from pubdiff.engine.descriptors import (
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
    Visibility,
)
from pubdiff.engine.equality import (
    events_equal,
    fields_equal,
    have_same_name,
    members_equal,
    methods_equal,
    properties_equal,
    types_equal,
)
from pubdiff.engine.errors import UnsupportedMemberError

OWNER = TypeRef("Acme", "Widget")
VOID = TypeRef("System", "Void")
INT = TypeRef("System", "Int32")


def _method(name="Run", *params, **kwargs):
    kwargs.setdefault("declaring_type", OWNER)
    kwargs.setdefault("return_type", VOID)
    return MethodDescriptor(name=name, parameter_types=tuple(params), **kwargs)


# ===========================================================================
# have_same_name
# ===========================================================================


class TestHaveSameName:
    def test_identical(self):
        assert have_same_name(TypeRef("A", "B"), TypeRef("A", "B"))

    def test_namespace_differs(self):
        assert not have_same_name(TypeRef("A", "B"), TypeRef("C", "B"))

    def test_generic_arity_differs(self):
        assert not have_same_name(TypeRef("A", "List", (INT,)), TypeRef("A", "List"))

    def test_nested_generic_arguments_compared_recursively(self):
        inner_a = TypeRef("A", "List", (INT,))
        inner_b = TypeRef("A", "List", (TypeRef("System", "Int64"),))
        assert not have_same_name(TypeRef("A", "Box", (inner_a,)), TypeRef("A", "Box", (inner_b,)))
        assert have_same_name(TypeRef("A", "Box", (inner_a,)), TypeRef("A", "Box", (inner_a,)))


# ===========================================================================
# methods_equal / members_equal
# ===========================================================================


class TestMethodsEqual:
    def test_return_type_is_ignored(self):
        assert methods_equal(_method(), _method(return_type=INT))

    def test_declaring_type_matters(self):
        assert not methods_equal(_method(), _method(declaring_type=TypeRef("Acme", "Other")))

    def test_parameter_count_matters(self):
        assert not methods_equal(_method("Run", INT), _method("Run"))

    def test_parameter_order_matters(self):
        s = TypeRef("System", "String")
        assert not methods_equal(_method("Run", INT, s), _method("Run", s, INT))

    def test_protected_internal_equals_protected(self):
        a = _method(visibility=Visibility.PROTECTED)
        b = _method(visibility=Visibility.PROTECTED_INTERNAL)
        assert methods_equal(a, b)

    def test_public_vs_protected(self):
        assert not methods_equal(_method(), _method(visibility=Visibility.PROTECTED))

    def test_static_vs_instance(self):
        assert not methods_equal(_method(is_static=True), _method())

    def test_accessor_owner_is_ignored(self):
        assert methods_equal(_method("get_X"), _method("get_X", accessor_of="X"))


class TestMembersEqual:
    def test_method_never_equals_field(self):
        field = FieldDescriptor("Run", OWNER, INT)
        assert not members_equal(_method(), field)
        assert not members_equal(field, _method())

    def test_constructor_flag_must_match(self):
        assert not members_equal(_method(".ctor", is_constructor=True), _method(".ctor"))

    def test_fields_by_name(self):
        assert members_equal(FieldDescriptor("x", OWNER, INT), FieldDescriptor("x", OWNER, VOID))

    def test_unsupported_baseline_raises(self):
        event = EventDescriptor("Changed", OWNER, INT)
        with pytest.raises(UnsupportedMemberError) as exc:
            members_equal(event, event)
        assert exc.value.parameter == "baseline"
        assert "EventDescriptor" in str(exc.value)


# ===========================================================================
# fields / events / properties / types
# ===========================================================================


class TestOtherKinds:
    def test_fields_equal(self):
        assert fields_equal(FieldDescriptor("x", OWNER, INT), FieldDescriptor("x", OWNER, INT))
        assert not fields_equal(FieldDescriptor("x", OWNER, INT), FieldDescriptor("y", OWNER, INT))

    def test_events_equal_by_name(self):
        a = EventDescriptor("Changed", OWNER, INT)
        b = EventDescriptor("Changed", OWNER, VOID)
        assert events_equal(a, b)

    def test_properties_equal_with_same_accessors(self):
        getter = _method("get_X", return_type=INT, accessor_of="X")
        a = PropertyDescriptor("X", OWNER, INT, (getter,))
        b = PropertyDescriptor("X", OWNER, INT, (getter,))
        assert properties_equal(a, b)

    def test_properties_differ_when_accessor_removed(self):
        getter = _method("get_X", return_type=INT, accessor_of="X")
        setter = _method("set_X", INT, accessor_of="X")
        a = PropertyDescriptor("X", OWNER, INT, (getter, setter))
        b = PropertyDescriptor("X", OWNER, INT, (getter,))
        assert not properties_equal(a, b)

    def test_types_equal_compares_member_graphs(self):
        a = TypeDescriptor(OWNER, members=(_method(),))
        b = TypeDescriptor(OWNER, members=(_method(),))
        c = TypeDescriptor(OWNER)
        assert types_equal(a, b)
        assert not types_equal(a, c)

    def test_types_with_different_names_compare_equal(self):
        # Nothing to compare, so no differences.
        a = TypeDescriptor(OWNER, members=(_method(),))
        b = TypeDescriptor(TypeRef("Acme", "Other"))
        assert types_equal(a, b)
