"""Walk a tree-sitter C# syntax tree and build type descriptors.

Node and field names differ a little between tree-sitter-c-sharp releases,
so lookups try the field name first and fall back to the child node type.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from pubdiff.engine.descriptors import (
    EventDescriptor,
    FieldDescriptor,
    Member,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeRef,
    Visibility,
)
from pubdiff.readers.csharp.types import VOID, by_ref, parse_type_lenient
from pubdiff.readers.treesitter import field, node_text

logger = logging.getLogger(__name__)

TYPE_NODES: dict[str, TypeKind] = {
    "class_declaration": TypeKind.CLASS,
    "struct_declaration": TypeKind.STRUCT,
    "interface_declaration": TypeKind.INTERFACE,
    "enum_declaration": TypeKind.ENUM,
    "record_declaration": TypeKind.RECORD,
    "record_struct_declaration": TypeKind.RECORD,
    "delegate_declaration": TypeKind.DELEGATE,
}

_MODIFIER_KEYWORDS = frozenset({
    "public", "protected", "internal", "private", "static", "const", "abstract",
    "sealed", "virtual", "override", "readonly", "partial", "extern", "new",
    "unsafe", "volatile", "async", "required", "file",
})
TYPE_SYNTAX_NODES = (
    "predefined_type", "identifier", "generic_name", "qualified_name",
    "nullable_type", "array_type", "pointer_type", "tuple_type",
)
_ACCESSOR_KEYWORDS = frozenset({"get", "set", "init", "add", "remove"})
_BY_REF_KEYWORDS = frozenset({"ref", "out", "in"})

_VISIBILITY_RANK = {
    Visibility.PRIVATE: 0,
    Visibility.INTERNAL: 1,
    Visibility.PROTECTED: 2,
    Visibility.PROTECTED_INTERNAL: 3,
    Visibility.PUBLIC: 4,
}

_BINARY_OPERATORS = {
    "+": "op_Addition", "-": "op_Subtraction", "*": "op_Multiply", "/": "op_Division",
    "%": "op_Modulus", "&": "op_BitwiseAnd", "|": "op_BitwiseOr", "^": "op_ExclusiveOr",
    "<<": "op_LeftShift", ">>": "op_RightShift", "==": "op_Equality", "!=": "op_Inequality",
    "<": "op_LessThan", ">": "op_GreaterThan", "<=": "op_LessThanOrEqual",
    ">=": "op_GreaterThanOrEqual",
}
_UNARY_OPERATORS = {
    "+": "op_UnaryPlus", "-": "op_UnaryNegation", "!": "op_LogicalNot",
    "~": "op_OnesComplement", "++": "op_Increment", "--": "op_Decrement",
    "true": "op_True", "false": "op_False",
}


def modifiers(node) -> set[str]:
    result: set[str] = set()
    for child in node.children:
        if child.type == "modifier":
            result.update(node_text(child).split())
        elif not child.is_named and child.type in _MODIFIER_KEYWORDS:
            result.add(child.type)
    return result


def visibility_from(mods: set[str], default: Visibility) -> Visibility:
    if "protected" in mods and "internal" in mods:
        return Visibility.PROTECTED_INTERNAL
    if "private" in mods and "protected" in mods:
        # private protected: derived types in the same assembly only
        return Visibility.INTERNAL
    if "public" in mods:
        return Visibility.PUBLIC
    if "protected" in mods:
        return Visibility.PROTECTED
    if "internal" in mods:
        return Visibility.INTERNAL
    if "private" in mods:
        return Visibility.PRIVATE
    return default


def more_visible(a: Visibility, b: Visibility) -> Visibility:
    return a if _VISIBILITY_RANK[a] >= _VISIBILITY_RANK[b] else b


def _join(namespace: str, name: str) -> str:
    return f"{namespace}.{name}" if namespace else name


def _first_child(node, *types: str):
    for child in node.named_children:
        if child.type in types:
            return child
    return None


def _part(node, field_name: str, *types: str):
    """The *field_name* child, or else the first named child of one of *types*."""
    found = field(node, field_name)
    return found if found is not None else _first_child(node, *types)


class FileExtractor:
    """Extract the types declared in one parsed C# file.

    ``type_modifiers`` collects each type's declared modifiers so the caller
    can merge partial declarations before synthesizing implicit constructors.
    """

    def __init__(self, rel_file: str) -> None:
        self.rel_file = rel_file
        self.type_modifiers: dict[TypeRef, set[str]] = {}

    def extract(self, root) -> list[TypeDescriptor]:
        types: list[TypeDescriptor] = []
        self._walk_scope(root, "", types)
        return types

    def _walk_scope(self, node, namespace: str, out: list[TypeDescriptor]) -> None:
        current = namespace
        for child in node.named_children:
            if child.type == "namespace_declaration":
                body = _part(child, "body", "declaration_list")
                if body is not None:
                    self._walk_scope(body, _join(namespace, node_text(field(child, "name"))), out)
            elif child.type == "file_scoped_namespace_declaration":
                current = _join(namespace, node_text(field(child, "name")))
                # Newer grammars nest the namespace's members under this node.
                self._walk_scope(child, current, out)
            elif child.type in TYPE_NODES:
                out.append(self._type(child, current, parent=None))

    # ── Types ──────────────────────────────────────────────

    def _type(
        self, node, namespace: str, parent: TypeRef | None, container: TypeKind | None = None
    ) -> TypeDescriptor:
        kind = TYPE_NODES[node.type]
        name = node_text(field(node, "name"))
        ref = TypeRef(
            namespace,
            f"{parent.name}+{name}" if parent else name,
            self._type_parameters(node),
        )
        mods = modifiers(node)
        self.type_modifiers.setdefault(ref, set()).update(mods)
        if parent is None:
            default = Visibility.INTERNAL
        elif container == TypeKind.INTERFACE:
            default = Visibility.PUBLIC
        else:
            default = Visibility.PRIVATE
        visibility = visibility_from(mods, default)
        if kind == TypeKind.DELEGATE:
            members = self._delegate_members(node, ref)
        elif kind == TypeKind.ENUM:
            members = self._enum_members(node, ref)
        else:
            members = self._members(node, ref, kind)
        return TypeDescriptor(
            ref=ref,
            kind=kind,
            visibility=visibility,
            is_nested=parent is not None,
            bases=self._bases(node),
            members=tuple(members),
        )

    def _type_parameters(self, node) -> tuple[TypeRef, ...]:
        params = _part(node, "type_parameters", "type_parameter_list")
        if params is None:
            return ()
        result = []
        for tp in params.named_children:
            if tp.type != "type_parameter":
                continue
            name_node = _part(tp, "name", "identifier")
            result.append(TypeRef("", node_text(tp if name_node is None else name_node).split()[-1]))
        return tuple(result)

    def _bases(self, node) -> tuple[TypeRef, ...]:
        base_list = _part(node, "bases", "base_list")
        if base_list is None:
            return ()
        bases = []
        for child in base_list.named_children:
            if child.type == "argument_list":
                continue
            if child.type == "primary_constructor_base_type":
                child = _part(child, "type", *TYPE_SYNTAX_NODES)
            bases.append(parse_type_lenient(node_text(child)))
        return tuple(bases)

    def _enum_members(self, node, ref: TypeRef) -> list[Member]:
        body = _part(node, "body", "enum_member_declaration_list")
        if body is None:
            return []
        members: list[Member] = []
        for child in body.named_children:
            if child.type != "enum_member_declaration":
                continue
            name_node = _part(child, "name", "identifier")
            members.append(FieldDescriptor(
                name=node_text(name_node),
                declaring_type=ref,
                field_type=ref,
                visibility=Visibility.PUBLIC,
                is_static=True,
            ))
        return members

    def _delegate_members(self, node, ref: TypeRef) -> list[Member]:
        return [MethodDescriptor(
            name="Invoke",
            declaring_type=ref,
            return_type=parse_type_lenient(node_text(field(node, "returns", "type"))),
            parameter_types=self._parameters(_part(node, "parameters", "parameter_list")),
            visibility=Visibility.PUBLIC,
        )]

    def _members(self, node, ref: TypeRef, kind: TypeKind) -> list[Member]:
        default = Visibility.PUBLIC if kind == TypeKind.INTERFACE else Visibility.PRIVATE
        members: list[Member] = []
        if kind == TypeKind.RECORD:
            members.extend(self._record_primary(node, ref))
        body = _part(node, "body", "declaration_list")
        if body is None:
            return members
        for child in body.named_children:
            kind_name = child.type
            if kind_name in TYPE_NODES:
                members.append(self._type(child, ref.namespace, parent=ref, container=kind))
            elif kind_name == "method_declaration":
                members.append(self._method(child, ref, default))
            elif kind_name == "constructor_declaration":
                members.append(self._constructor(child, ref))
            elif kind_name == "field_declaration":
                members.extend(self._fields(child, ref, default))
            elif kind_name == "property_declaration":
                members.append(self._property(child, ref, default))
            elif kind_name == "indexer_declaration":
                members.append(self._indexer(child, ref, default))
            elif kind_name == "event_field_declaration":
                members.extend(self._event_fields(child, ref, default))
            elif kind_name == "event_declaration":
                members.append(self._event(child, ref, default))
            elif kind_name in ("operator_declaration", "conversion_operator_declaration"):
                members.append(self._operator(child, ref))
        return members

    # ── Members ────────────────────────────────────────────

    def _member_visibility(self, node, mods: set[str], default: Visibility) -> Visibility:
        if _first_child(node, "explicit_interface_specifier") is not None:
            return Visibility.PRIVATE
        return visibility_from(mods, default)

    def _parameters(self, param_list) -> tuple[TypeRef, ...]:
        if param_list is None:
            return ()
        types = []
        after_params = False
        for param in param_list.children:
            # Newer grammars leave `params T[] name` unwrapped under the list.
            if not param.is_named and node_text(param) == "params":
                after_params = True
                continue
            if after_params and param.type in TYPE_SYNTAX_NODES:
                types.append(parse_type_lenient(node_text(param)))
                after_params = False
                continue
            if param.type not in ("parameter", "parameter_array"):
                continue
            type_node = _part(param, "type", *TYPE_SYNTAX_NODES)
            ref = parse_type_lenient(node_text(type_node))
            words = {
                node_text(c).strip()
                for c in param.children
                if c.type in ("parameter_modifier", "modifier") or not c.is_named
            }
            if words & _BY_REF_KEYWORDS:
                ref = by_ref(ref)
            types.append(ref)
        return tuple(types)

    def _method(self, node, ref: TypeRef, default: Visibility) -> MethodDescriptor:
        mods = modifiers(node)
        return MethodDescriptor(
            name=node_text(field(node, "name")),
            declaring_type=ref,
            return_type=parse_type_lenient(node_text(field(node, "returns", "type"))),
            parameter_types=self._parameters(_part(node, "parameters", "parameter_list")),
            visibility=self._member_visibility(node, mods, default),
            is_static="static" in mods,
        )

    def _constructor(self, node, ref: TypeRef) -> MethodDescriptor:
        mods = modifiers(node)
        is_static = "static" in mods
        return MethodDescriptor(
            name=".cctor" if is_static else ".ctor",
            declaring_type=ref,
            return_type=VOID,
            parameter_types=self._parameters(_part(node, "parameters", "parameter_list")),
            visibility=Visibility.PRIVATE if is_static else visibility_from(mods, Visibility.PRIVATE),
            is_static=is_static,
            is_constructor=True,
        )

    def _fields(self, node, ref: TypeRef, default: Visibility) -> list[FieldDescriptor]:
        mods = modifiers(node)
        declaration = _first_child(node, "variable_declaration")
        if declaration is None:
            return []
        field_type = parse_type_lenient(node_text(field(declaration, "type")))
        visibility = visibility_from(mods, default)
        result = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = _part(declarator, "name", "identifier")
            result.append(FieldDescriptor(
                name=node_text(name_node),
                declaring_type=ref,
                field_type=field_type,
                visibility=visibility,
                is_static=bool(mods & {"static", "const"}),
            ))
        return result

    def _accessors(self, node):
        """Yield (keyword, modifiers) for each accessor of a property/indexer/event."""
        accessor_list = _part(node, "accessors", "accessor_list")
        if accessor_list is None:
            arrow = _part(node, "value", "arrow_expression_clause")
            if arrow is not None:
                yield "get", set()
            return
        for accessor in accessor_list.named_children:
            if accessor.type != "accessor_declaration":
                continue
            keyword = node_text(field(accessor, "name"))
            if keyword not in _ACCESSOR_KEYWORDS:
                keyword = next(
                    (c.type for c in accessor.children if c.type in _ACCESSOR_KEYWORDS), ""
                )
            yield keyword, modifiers(accessor)

    def _property_like(
        self,
        node,
        ref: TypeRef,
        default: Visibility,
        *,
        name: str,
        index_types: tuple[TypeRef, ...] = (),
    ) -> PropertyDescriptor:
        mods = modifiers(node)
        visibility = self._member_visibility(node, mods, default)
        prop_type = parse_type_lenient(node_text(field(node, "type")))
        is_static = "static" in mods
        accessors = []
        for keyword, accessor_mods in self._accessors(node):
            accessor_visibility = visibility_from(accessor_mods, visibility)
            if keyword == "get":
                accessors.append(MethodDescriptor(
                    name=f"get_{name}", declaring_type=ref, return_type=prop_type,
                    parameter_types=index_types, visibility=accessor_visibility,
                    is_static=is_static, accessor_of=name,
                ))
            elif keyword in ("set", "init"):
                accessors.append(MethodDescriptor(
                    name=f"set_{name}", declaring_type=ref, return_type=VOID,
                    parameter_types=index_types + (prop_type,), visibility=accessor_visibility,
                    is_static=is_static, accessor_of=name,
                ))
        return PropertyDescriptor(
            name=name, declaring_type=ref, property_type=prop_type, accessors=tuple(accessors),
        )

    def _property(self, node, ref: TypeRef, default: Visibility) -> PropertyDescriptor:
        return self._property_like(node, ref, default, name=node_text(field(node, "name")))

    def _indexer(self, node, ref: TypeRef, default: Visibility) -> PropertyDescriptor:
        params = _part(node, "parameters", "bracketed_parameter_list")
        return self._property_like(
            node, ref, default, name="Item", index_types=self._parameters(params),
        )

    def _event_accessors(self, name, ref, handler, visibility, is_static):
        return tuple(
            MethodDescriptor(
                name=f"{prefix}_{name}", declaring_type=ref, return_type=VOID,
                parameter_types=(handler,), visibility=visibility,
                is_static=is_static, accessor_of=name,
            )
            for prefix in ("add", "remove")
        )

    def _event_fields(self, node, ref: TypeRef, default: Visibility) -> list[EventDescriptor]:
        mods = modifiers(node)
        declaration = _first_child(node, "variable_declaration")
        if declaration is None:
            return []
        handler = parse_type_lenient(node_text(field(declaration, "type")))
        visibility = visibility_from(mods, default)
        is_static = "static" in mods
        events = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = node_text(_part(declarator, "name", "identifier"))
            events.append(EventDescriptor(
                name=name, declaring_type=ref, handler_type=handler,
                accessors=self._event_accessors(name, ref, handler, visibility, is_static),
            ))
        return events

    def _event(self, node, ref: TypeRef, default: Visibility) -> EventDescriptor:
        mods = modifiers(node)
        name = node_text(field(node, "name"))
        handler = parse_type_lenient(node_text(field(node, "type")))
        visibility = self._member_visibility(node, mods, default)
        return EventDescriptor(
            name=name, declaring_type=ref, handler_type=handler,
            accessors=self._event_accessors(name, ref, handler, visibility, "static" in mods),
        )

    def _operator(self, node, ref: TypeRef) -> MethodDescriptor:
        params = self._parameters(_part(node, "parameters", "parameter_list"))
        return_type = parse_type_lenient(node_text(field(node, "type", "returns")))
        if node.type == "conversion_operator_declaration":
            explicit = any(c.type == "explicit" for c in node.children)
            name = "op_Explicit" if explicit else "op_Implicit"
        else:
            symbol = node_text(field(node, "operator")).strip()
            table = _UNARY_OPERATORS if len(params) == 1 else _BINARY_OPERATORS
            name = table.get(symbol, f"op_{symbol}")
        return MethodDescriptor(
            name=name, declaring_type=ref, return_type=return_type,
            parameter_types=params, visibility=Visibility.PUBLIC, is_static=True,
        )

    def _record_primary(self, node, ref: TypeRef) -> list[Member]:
        """Positional records: a public constructor and a get/init property per parameter."""
        param_list = _part(node, "parameters", "parameter_list")
        if param_list is None:
            return []
        members: list[Member] = [MethodDescriptor(
            name=".ctor", declaring_type=ref, return_type=VOID,
            parameter_types=self._parameters(param_list),
            visibility=Visibility.PUBLIC, is_constructor=True,
        )]
        for param in param_list.named_children:
            if param.type != "parameter":
                continue
            name = node_text(field(param, "name"))
            prop_type = parse_type_lenient(node_text(field(param, "type")))
            members.append(PropertyDescriptor(
                name=name, declaring_type=ref, property_type=prop_type,
                accessors=(
                    MethodDescriptor(
                        name=f"get_{name}", declaring_type=ref, return_type=prop_type,
                        accessor_of=name,
                    ),
                    MethodDescriptor(
                        name=f"set_{name}", declaring_type=ref, return_type=VOID,
                        parameter_types=(prop_type,), accessor_of=name,
                    ),
                ),
            ))
        return members


# ── Post-processing across files ───────────────────────────


def merge_partial(existing: TypeDescriptor, addition: TypeDescriptor) -> TypeDescriptor:
    """Combine two declarations of the same partial type."""
    bases = existing.bases + tuple(b for b in addition.bases if b not in existing.bases)
    members = list(existing.members)
    nested_at = {m.ref: i for i, m in enumerate(members) if isinstance(m, TypeDescriptor)}
    for member in addition.members:
        if isinstance(member, TypeDescriptor) and member.ref in nested_at:
            i = nested_at[member.ref]
            members[i] = merge_partial(members[i], member)
        else:
            members.append(member)
    return replace(
        existing,
        visibility=more_visible(existing.visibility, addition.visibility),
        bases=bases,
        members=tuple(members),
    )


def with_implicit_constructors(
    type_desc: TypeDescriptor, type_modifiers: dict[TypeRef, set[str]]
) -> TypeDescriptor:
    """Add the parameterless constructor the compiler emits when none is declared."""
    members = tuple(
        with_implicit_constructors(m, type_modifiers) if isinstance(m, TypeDescriptor) else m
        for m in type_desc.members
    )
    mods = type_modifiers.get(type_desc.ref, set())
    needs_ctor = (
        type_desc.kind in (TypeKind.CLASS, TypeKind.RECORD)
        and "static" not in mods
        and not any(
            isinstance(m, MethodDescriptor) and m.is_constructor and not m.is_static
            for m in members
        )
    )
    if needs_ctor:
        logger.debug("Implicit constructor for %s", type_desc.full_name)
        members = (MethodDescriptor(
            name=".ctor",
            declaring_type=type_desc.ref,
            return_type=VOID,
            visibility=Visibility.PROTECTED if "abstract" in mods else Visibility.PUBLIC,
            is_constructor=True,
        ),) + members
    return replace(type_desc, members=members)


__all__ = [
    "FileExtractor",
    "TYPE_NODES",
    "merge_partial",
    "modifiers",
    "more_visible",
    "visibility_from",
    "with_implicit_constructors",
]
