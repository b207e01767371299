"""JSON-friendly (de)serialization of unit descriptors (snapshot format v1)."""

from __future__ import annotations

from typing import Any

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
    member_kind,
)
from pubdiff.engine.errors import UnsupportedMemberError

SNAPSHOT_FORMAT = "pubdiff-snapshot"
SNAPSHOT_VERSION = 1


# ── Encoding ───────────────────────────────────────────────


def ref_to_dict(ref: TypeRef) -> dict[str, Any]:
    data: dict[str, Any] = {"namespace": ref.namespace, "name": ref.name}
    if ref.args:
        data["args"] = [ref_to_dict(a) for a in ref.args]
    return data


def _method_to_dict(method: MethodDescriptor) -> dict[str, Any]:
    data: dict[str, Any] = {
        "kind": member_kind(method),
        "name": method.name,
        "declaring_type": ref_to_dict(method.declaring_type),
        "return_type": ref_to_dict(method.return_type),
        "parameters": [ref_to_dict(p) for p in method.parameter_types],
        "visibility": method.visibility.value,
        "static": method.is_static,
    }
    if method.accessor_of:
        data["accessor_of"] = method.accessor_of
    return data


def member_to_dict(member: Member) -> dict[str, Any]:
    if isinstance(member, MethodDescriptor):
        return _method_to_dict(member)
    if isinstance(member, FieldDescriptor):
        return {
            "kind": "field",
            "name": member.name,
            "declaring_type": ref_to_dict(member.declaring_type),
            "field_type": ref_to_dict(member.field_type),
            "visibility": member.visibility.value,
            "static": member.is_static,
        }
    if isinstance(member, PropertyDescriptor):
        return {
            "kind": "property",
            "name": member.name,
            "declaring_type": ref_to_dict(member.declaring_type),
            "property_type": ref_to_dict(member.property_type),
            "accessors": [_method_to_dict(a) for a in member.accessors],
        }
    if isinstance(member, EventDescriptor):
        return {
            "kind": "event",
            "name": member.name,
            "declaring_type": ref_to_dict(member.declaring_type),
            "handler_type": ref_to_dict(member.handler_type),
            "accessors": [_method_to_dict(a) for a in member.accessors],
        }
    if isinstance(member, TypeDescriptor):
        return type_to_dict(member)
    raise UnsupportedMemberError("member", member)


def type_to_dict(type_desc: TypeDescriptor) -> dict[str, Any]:
    return {
        "kind": "type",
        "ref": ref_to_dict(type_desc.ref),
        "type_kind": type_desc.kind.value,
        "visibility": type_desc.visibility.value,
        "nested": type_desc.is_nested,
        "bases": [ref_to_dict(b) for b in type_desc.bases],
        "members": [member_to_dict(m) for m in type_desc.members],
    }


def unit_to_dict(unit: UnitDescriptor) -> dict[str, Any]:
    return {
        "format": SNAPSHOT_FORMAT,
        "version": SNAPSHOT_VERSION,
        "name": unit.name,
        "origin": unit.origin,
        "reader": unit.reader,
        "metadata": dict(unit.metadata),
        "types": [type_to_dict(t) for t in unit.types],
    }


# ── Decoding ───────────────────────────────────────────────
# Malformed payloads surface as KeyError / TypeError / ValueError.


def ref_from_dict(data: dict[str, Any]) -> TypeRef:
    return TypeRef(
        namespace=str(data.get("namespace", "")),
        name=str(data["name"]),
        args=tuple(ref_from_dict(a) for a in data.get("args", ())),
    )


def _method_from_dict(data: dict[str, Any]) -> MethodDescriptor:
    return MethodDescriptor(
        name=data["name"],
        declaring_type=ref_from_dict(data["declaring_type"]),
        return_type=ref_from_dict(data["return_type"]),
        parameter_types=tuple(ref_from_dict(p) for p in data.get("parameters", ())),
        visibility=Visibility(data.get("visibility", Visibility.PUBLIC)),
        is_static=bool(data.get("static", False)),
        is_constructor=data["kind"] == "constructor",
        accessor_of=data.get("accessor_of"),
    )


def member_from_dict(data: dict[str, Any]) -> Member:
    kind = data["kind"]
    if kind in ("method", "constructor"):
        return _method_from_dict(data)
    if kind == "field":
        return FieldDescriptor(
            name=data["name"],
            declaring_type=ref_from_dict(data["declaring_type"]),
            field_type=ref_from_dict(data["field_type"]),
            visibility=Visibility(data.get("visibility", Visibility.PUBLIC)),
            is_static=bool(data.get("static", False)),
        )
    if kind == "property":
        return PropertyDescriptor(
            name=data["name"],
            declaring_type=ref_from_dict(data["declaring_type"]),
            property_type=ref_from_dict(data["property_type"]),
            accessors=tuple(_method_from_dict(a) for a in data.get("accessors", ())),
        )
    if kind == "event":
        return EventDescriptor(
            name=data["name"],
            declaring_type=ref_from_dict(data["declaring_type"]),
            handler_type=ref_from_dict(data["handler_type"]),
            accessors=tuple(_method_from_dict(a) for a in data.get("accessors", ())),
        )
    if kind == "type":
        return type_from_dict(data)
    raise ValueError(f"Unknown member kind in snapshot: {kind!r}")


def type_from_dict(data: dict[str, Any]) -> TypeDescriptor:
    return TypeDescriptor(
        ref=ref_from_dict(data["ref"]),
        kind=TypeKind(data.get("type_kind", TypeKind.CLASS)),
        visibility=Visibility(data.get("visibility", Visibility.PUBLIC)),
        is_nested=bool(data.get("nested", False)),
        bases=tuple(ref_from_dict(b) for b in data.get("bases", ())),
        members=tuple(member_from_dict(m) for m in data.get("members", ())),
    )


def unit_from_dict(data: dict[str, Any]) -> UnitDescriptor:
    if not isinstance(data, dict) or data.get("format") != SNAPSHOT_FORMAT:
        raise ValueError("Not a pubdiff snapshot (missing 'format' marker)")
    version = data.get("version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(
            f"Unsupported snapshot version {version!r} (expected {SNAPSHOT_VERSION})"
        )
    return UnitDescriptor(
        name=str(data.get("name", "")),
        types=tuple(type_from_dict(t) for t in data.get("types", ())),
        origin=str(data.get("origin", "")),
        reader=str(data.get("reader", "")),
        metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
    )


__all__ = [
    "SNAPSHOT_FORMAT",
    "SNAPSHOT_VERSION",
    "member_from_dict",
    "member_to_dict",
    "ref_from_dict",
    "ref_to_dict",
    "type_from_dict",
    "type_to_dict",
    "unit_from_dict",
    "unit_to_dict",
]
