"""Tests for pubdiff.engine.serialize — snapshot payloads."""

from __future__ import annotations

import json

import pytest

from pubdiff.engine.descriptors import (
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeRef,
    UnitDescriptor,
    Visibility,
)
from pubdiff.engine.differ import compare
from pubdiff.engine.serialize import (
    SNAPSHOT_FORMAT,
    SNAPSHOT_VERSION,
    member_from_dict,
    member_to_dict,
    ref_to_dict,
    unit_from_dict,
    unit_to_dict,
)

OWNER = TypeRef("Acme", "Widget")
VOID = TypeRef("System", "Void")
STRING = TypeRef("System", "String")
HANDLER = TypeRef("System", "EventHandler")


def _sample_unit() -> UnitDescriptor:
    getter = MethodDescriptor("get_Title", OWNER, STRING, accessor_of="Title")
    add = MethodDescriptor("add_Changed", OWNER, VOID, (HANDLER,), accessor_of="Changed")
    nested = TypeDescriptor(
        TypeRef("Acme", "Widget+Part"), kind=TypeKind.STRUCT,
        visibility=Visibility.PROTECTED, is_nested=True,
    )
    widget = TypeDescriptor(
        ref=OWNER,
        bases=(TypeRef("Acme", "Base", (STRING,)),),
        members=(
            MethodDescriptor(".ctor", OWNER, VOID, (STRING,), is_constructor=True),
            MethodDescriptor("Make", OWNER, OWNER, is_static=True),
            FieldDescriptor("Count", OWNER, TypeRef("System", "Int32"), Visibility.PROTECTED),
            PropertyDescriptor("Title", OWNER, STRING, (getter,)),
            EventDescriptor("Changed", OWNER, HANDLER, (add,)),
            nested,
        ),
    )
    return UnitDescriptor("Acme", (widget,), origin="src/Acme", reader="csharp",
                          metadata={"files": "3"})


class TestEncoding:
    def test_payload_header(self):
        data = unit_to_dict(_sample_unit())
        assert data["format"] == SNAPSHOT_FORMAT
        assert data["version"] == SNAPSHOT_VERSION
        assert data["reader"] == "csharp"
        assert data["metadata"] == {"files": "3"}

    def test_ref_without_args_omits_key(self):
        assert ref_to_dict(STRING) == {"namespace": "System", "name": "String"}

    def test_constructor_kind(self):
        ctor = MethodDescriptor(".ctor", OWNER, VOID, is_constructor=True)
        assert member_to_dict(ctor)["kind"] == "constructor"

    def test_payload_is_json_serializable(self):
        json.dumps(unit_to_dict(_sample_unit()))


class TestDecoding:
    def test_restored_unit_compares_equal(self):
        original = _sample_unit()
        restored = unit_from_dict(json.loads(json.dumps(unit_to_dict(original))))
        assert restored == original
        assert list(compare(original, restored)) == []

    def test_accessor_owner_survives(self):
        data = member_to_dict(MethodDescriptor("get_X", OWNER, STRING, accessor_of="X"))
        assert member_from_dict(data).accessor_of == "X"

    def test_missing_format_marker(self):
        with pytest.raises(ValueError, match="Not a pubdiff snapshot"):
            unit_from_dict({"types": []})

    def test_unsupported_version(self):
        with pytest.raises(ValueError, match="Unsupported snapshot version"):
            unit_from_dict({"format": SNAPSHOT_FORMAT, "version": 99})

    def test_unknown_member_kind(self):
        with pytest.raises(ValueError, match="Unknown member kind"):
            member_from_dict({"kind": "widget"})

    def test_missing_required_key(self):
        with pytest.raises(KeyError):
            member_from_dict({"kind": "field", "name": "x"})

    def test_bad_visibility(self):
        data = member_to_dict(FieldDescriptor("x", OWNER, STRING))
        data["visibility"] = "sometimes"
        with pytest.raises(ValueError):
            member_from_dict(data)
