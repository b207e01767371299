"""Python reader: public surface of a source tree, read with ``ast`` (never imported).

Python has no access modifiers, so visibility follows naming convention:

- dunder names and names without a leading underscore are public
- ``_name`` is protected on class members and internal at module level
- ``__name`` (name-mangled) is private
- with ``__all__`` present, unlisted top-level names are internal

Each module is a namespace. Its classes are top-level types. Its functions
and variables become static members of a synthetic ``module`` type that is
named after the module.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pubdiff.engine.descriptors import (
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
from pubdiff.readers import register_reader
from pubdiff.readers.base import ReaderError, ReaderOptions, UnitReader
from pubdiff.utils import find_source_files

logger = logging.getLogger(__name__)

OBJECT = TypeRef("", "object")
NONE = TypeRef("", "None")
STR = TypeRef("", "str")

_ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})
_INTERFACE_BASES = frozenset({"Protocol", "ABC"})
_STATIC_DECORATORS = frozenset({"staticmethod", "classmethod"})
_PROPERTY_DECORATORS = frozenset({"property", "cached_property"})


def name_visibility(name: str, *, class_member: bool) -> Visibility:
    if name.startswith("__") and name.endswith("__"):
        return Visibility.PUBLIC
    if name.startswith("__"):
        return Visibility.PRIVATE
    if name.startswith("_"):
        return Visibility.PROTECTED if class_member else Visibility.INTERNAL
    return Visibility.PUBLIC


def module_name_for(rel_file: str, package_prefix: str = "") -> str:
    """``pkg/sub/mod.py`` -> ``pkg.sub.mod``; ``pkg/__init__.py`` -> ``pkg``."""
    parts = list(Path(rel_file).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if package_prefix:
        parts.insert(0, package_prefix)
    return ".".join(parts)


def _decorator_name(node: ast.expr) -> str:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return ""


def _walk_block(statements: list[ast.stmt]):
    """Yield statements of a block, descending into if/try bodies."""
    for stmt in statements:
        if isinstance(stmt, ast.If):
            yield from _walk_block(stmt.body)
            yield from _walk_block(stmt.orelse)
        elif isinstance(stmt, ast.Try):
            yield from _walk_block(stmt.body)
            for handler in stmt.handlers:
                yield from _walk_block(handler.body)
            yield from _walk_block(stmt.orelse)
            yield from _walk_block(stmt.finalbody)
        else:
            yield stmt


@dataclass
class _ModuleContext:
    module: str
    is_package: bool
    imports: dict[str, tuple[str, str]] = field(default_factory=dict)
    local_classes: set[str] = field(default_factory=set)
    exported: set[str] | None = None

    @property
    def package(self) -> str:
        if self.is_package:
            return self.module
        return self.module.rpartition(".")[0]

    def resolve_relative(self, level: int, module: str | None) -> str:
        if level == 0:
            return module or ""
        base = self.package.split(".") if self.package else []
        if level > 1:
            base = base[: len(base) - (level - 1)]
        parts = [p for p in base if p]
        if module:
            parts.append(module)
        return ".".join(parts)

    def collect_imports(self, tree: ast.Module) -> None:
        for stmt in _walk_block(tree.body):
            if isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    if alias.asname:
                        self.imports[alias.asname] = (alias.name, "")
                    else:
                        top = alias.name.split(".")[0]
                        self.imports[top] = (top, "")
            elif isinstance(stmt, ast.ImportFrom):
                source = self.resolve_relative(stmt.level, stmt.module)
                for alias in stmt.names:
                    self.imports[alias.asname or alias.name] = (source, alias.name)

    @property
    def is_private_module(self) -> bool:
        """Any dotted part with a leading underscore (dunder parts excepted)."""
        return any(
            part.startswith("_") and not part.endswith("__")
            for part in self.module.split(".")
        )

    def top_level_visibility(self, name: str) -> Visibility:
        if self.is_private_module:
            return Visibility.INTERNAL
        if self.exported is not None:
            if name in self.exported:
                return Visibility.PUBLIC
            if not (name.startswith("__") and name.endswith("__")):
                return Visibility.INTERNAL
        return name_visibility(name, class_member=False)

    # ── Annotation -> TypeRef ──────────────────────────────

    def resolve_name(self, name: str) -> TypeRef:
        if name in self.imports:
            source, imported = self.imports[name]
            if imported:
                return TypeRef(source, imported)
            namespace, _, last = source.rpartition(".")
            return TypeRef(namespace, last)
        if name in self.local_classes:
            return TypeRef(self.module, name)
        return TypeRef("", name)

    def _dotted(self, node: ast.expr) -> str | None:
        if isinstance(node, ast.Name):
            return node.id
        if isinstance(node, ast.Attribute):
            head = self._dotted(node.value)
            return f"{head}.{node.attr}" if head else None
        return None

    def type_ref(self, node: ast.expr | None, default: TypeRef = OBJECT) -> TypeRef:
        if node is None:
            return default
        if isinstance(node, ast.Constant):
            if node.value is None:
                return NONE
            if node.value is Ellipsis:
                return TypeRef("", "...")
            if isinstance(node.value, str):
                try:
                    parsed = ast.parse(node.value, mode="eval")
                except SyntaxError:
                    return TypeRef("", node.value)
                return self.type_ref(parsed.body, default)
            return TypeRef("", repr(node.value))
        if isinstance(node, ast.Name):
            return self.resolve_name(node.id)
        if isinstance(node, ast.Attribute):
            dotted = self._dotted(node)
            if dotted is None:
                return TypeRef("", ast.unparse(node))
            head, _, rest = dotted.partition(".")
            resolved = self.resolve_name(head)
            full = ".".join(p for p in (resolved.namespace, resolved.name, rest) if p)
            namespace, _, last = full.rpartition(".")
            return TypeRef(namespace, last)
        if isinstance(node, ast.Subscript):
            base = self.type_ref(node.value)
            elements = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
            args = tuple(self.type_ref(e) for e in elements)
            if base.name == "Optional" and base.namespace == "typing" and len(args) == 1:
                return _union(args + (NONE,))
            if base.name == "Union" and base.namespace == "typing":
                return _union(args)
            return TypeRef(base.namespace, base.name, args)
        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            return _union((self.type_ref(node.left), self.type_ref(node.right)))
        if isinstance(node, ast.List):
            return TypeRef("", "[...]", tuple(self.type_ref(e) for e in node.elts))
        return TypeRef("", ast.unparse(node))


def _union(members: tuple[TypeRef, ...]) -> TypeRef:
    flat: list[TypeRef] = []
    for member in members:
        if member.namespace == "typing" and member.name == "Union":
            flat.extend(member.args)
        else:
            flat.append(member)
    return TypeRef("typing", "Union", tuple(flat))


class _ModuleReader:
    """Builds the types of one module."""

    def __init__(self, ctx: _ModuleContext, tree: ast.Module, *, honor_all: bool = True) -> None:
        self.ctx = ctx
        self.tree = tree
        self.honor_all = honor_all

    def read(self) -> list[TypeDescriptor]:
        ctx = self.ctx
        for stmt in _walk_block(self.tree.body):
            if isinstance(stmt, ast.ClassDef):
                ctx.local_classes.add(stmt.name)
        ctx.exported = _dunder_all(self.tree) if self.honor_all else None

        module_ref = _module_ref(ctx.module)
        module_members: list[Member] = []
        types: list[TypeDescriptor] = []
        for stmt in _walk_block(self.tree.body):
            if isinstance(stmt, ast.ClassDef):
                types.append(self._class(stmt, parent=None))
            elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
                module_members.append(self._function(
                    stmt, module_ref, ctx.top_level_visibility(stmt.name), force_static=True,
                ))
            elif isinstance(stmt, (ast.Assign, ast.AnnAssign)):
                for name, annotation in _assigned_names(stmt):
                    if name == "__all__":
                        continue
                    module_members.append(FieldDescriptor(
                        name=name,
                        declaring_type=module_ref,
                        field_type=ctx.type_ref(annotation),
                        visibility=ctx.top_level_visibility(name),
                        is_static=True,
                    ))

        if module_members:
            module_type = TypeDescriptor(
                ref=module_ref,
                kind=TypeKind.MODULE,
                visibility=Visibility.INTERNAL if ctx.is_private_module else Visibility.PUBLIC,
                members=tuple(module_members),
            )
            types.insert(0, module_type)
        return types

    # ── Classes ────────────────────────────────────────────

    def _class(self, node: ast.ClassDef, parent: TypeRef | None) -> TypeDescriptor:
        ctx = self.ctx
        name = f"{parent.name}+{node.name}" if parent else node.name
        ref = TypeRef(ctx.module, name)
        if parent is None:
            visibility = ctx.top_level_visibility(node.name)
        else:
            visibility = name_visibility(node.name, class_member=True)
        bases = tuple(ctx.type_ref(b) for b in node.bases)
        members = self._class_members(node, ref)
        return TypeDescriptor(
            ref=ref,
            kind=_class_kind(bases),
            visibility=visibility,
            is_nested=parent is not None,
            bases=tuple(b for b in bases if b.name not in ("object", "Generic")),
            members=tuple(members),
        )

    def _class_members(self, node: ast.ClassDef, ref: TypeRef) -> list[Member]:
        ctx = self.ctx
        kind = _class_kind(tuple(ctx.type_ref(b) for b in node.bases))
        members: list[Member] = []
        properties: dict[str, int] = {}
        field_names: set[str] = set()
        init_node: ast.FunctionDef | ast.AsyncFunctionDef | None = None

        for stmt in _walk_block(node.body):
            if isinstance(stmt, ast.ClassDef):
                members.append(self._class(stmt, parent=ref))
            elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
                prop = _property_role(stmt)
                if prop is not None:
                    prop_name, role = prop
                    self._add_accessor(members, properties, stmt, ref, prop_name, role)
                    continue
                visibility = name_visibility(stmt.name, class_member=True)
                members.append(self._function(stmt, ref, visibility))
                if stmt.name == "__init__":
                    init_node = stmt
            elif isinstance(stmt, (ast.Assign, ast.AnnAssign)):
                for name, annotation in _assigned_names(stmt):
                    if name in field_names:
                        continue
                    field_names.add(name)
                    members.append(self._class_field(stmt, ref, name, annotation, kind))

        if init_node is not None:
            for name, annotation in _self_assignments(init_node):
                if name in field_names or name in properties:
                    continue
                field_names.add(name)
                members.append(FieldDescriptor(
                    name=name,
                    declaring_type=ref,
                    field_type=ctx.type_ref(annotation),
                    visibility=name_visibility(name, class_member=True),
                ))
        elif _is_dataclass(node):
            ctor = self._dataclass_constructor(node, ref)
            if ctor is not None:
                members.insert(0, ctor)
        return members

    def _class_field(self, stmt, ref: TypeRef, name: str, annotation, kind: TypeKind) -> FieldDescriptor:
        ctx = self.ctx
        field_type = ctx.type_ref(annotation)
        if kind == TypeKind.ENUM:
            is_static, field_type = True, ref
        elif isinstance(stmt, ast.AnnAssign):
            is_static = field_type.name == "ClassVar"
        else:
            is_static = True
        return FieldDescriptor(
            name=name,
            declaring_type=ref,
            field_type=field_type,
            visibility=name_visibility(name, class_member=True),
            is_static=is_static,
        )

    def _add_accessor(self, members, properties, node, ref, prop_name, role) -> None:
        ctx = self.ctx
        prefix = {"getter": "get_", "setter": "set_", "deleter": "del_"}[role]
        params = self._parameters(node, drop_first=True)
        return_type = ctx.type_ref(node.returns) if role == "getter" else NONE
        accessor = MethodDescriptor(
            name=prefix + prop_name,
            declaring_type=ref,
            return_type=return_type,
            parameter_types=params,
            visibility=name_visibility(prop_name, class_member=True),
            accessor_of=prop_name,
        )
        if prop_name in properties:
            index = properties[prop_name]
            existing = members[index]
            members[index] = PropertyDescriptor(
                name=existing.name,
                declaring_type=existing.declaring_type,
                property_type=existing.property_type,
                accessors=existing.accessors + (accessor,),
            )
            return
        properties[prop_name] = len(members)
        members.append(PropertyDescriptor(
            name=prop_name,
            declaring_type=ref,
            property_type=return_type,
            accessors=(accessor,),
        ))

    def _dataclass_constructor(self, node: ast.ClassDef, ref: TypeRef) -> MethodDescriptor | None:
        for decorator in node.decorator_list:
            if isinstance(decorator, ast.Call) and _decorator_name(decorator) == "dataclass":
                for kw in decorator.keywords:
                    if kw.arg == "init" and isinstance(kw.value, ast.Constant) and kw.value.value is False:
                        return None
        params: list[TypeRef] = []
        for stmt in node.body:
            if not isinstance(stmt, ast.AnnAssign) or not isinstance(stmt.target, ast.Name):
                continue
            annotation = self.ctx.type_ref(stmt.annotation)
            if annotation.name == "ClassVar":
                continue
            if _field_init_disabled(stmt.value):
                continue
            params.append(annotation)
        return MethodDescriptor(
            name="__init__",
            declaring_type=ref,
            return_type=NONE,
            parameter_types=tuple(params),
            is_constructor=True,
        )

    # ── Functions ──────────────────────────────────────────

    def _function(
        self,
        node: ast.FunctionDef | ast.AsyncFunctionDef,
        owner: TypeRef,
        visibility: Visibility,
        *,
        force_static: bool = False,
    ) -> MethodDescriptor:
        decorators = {_decorator_name(d) for d in node.decorator_list}
        is_static = force_static or bool(decorators & _STATIC_DECORATORS)
        drop_first = not force_static and "staticmethod" not in decorators
        is_constructor = node.name == "__init__" and not force_static
        default_return = NONE if is_constructor else OBJECT
        return MethodDescriptor(
            name=node.name,
            declaring_type=owner,
            return_type=self.ctx.type_ref(node.returns, default_return),
            parameter_types=self._parameters(node, drop_first=drop_first),
            visibility=visibility,
            is_static=is_static,
            is_constructor=is_constructor,
        )

    def _parameters(self, node, *, drop_first: bool) -> tuple[TypeRef, ...]:
        ctx = self.ctx
        args = node.args
        positional = list(args.posonlyargs) + list(args.args)
        if drop_first and positional:
            positional = positional[1:]
        types = [ctx.type_ref(a.annotation) for a in positional]
        if args.vararg is not None:
            types.append(TypeRef("", "tuple", (ctx.type_ref(args.vararg.annotation),)))
        types.extend(ctx.type_ref(a.annotation) for a in args.kwonlyargs)
        if args.kwarg is not None:
            types.append(TypeRef("", "dict", (STR, ctx.type_ref(args.kwarg.annotation))))
        return tuple(types)


def _module_ref(module: str) -> TypeRef:
    namespace, _, last = module.rpartition(".")
    return TypeRef(namespace, last)


def _class_kind(bases: tuple[TypeRef, ...]) -> TypeKind:
    names = {b.name for b in bases}
    if names & _ENUM_BASES:
        return TypeKind.ENUM
    if names & _INTERFACE_BASES:
        return TypeKind.INTERFACE
    if "NamedTuple" in names or "TypedDict" in names:
        return TypeKind.RECORD
    return TypeKind.CLASS


def _is_dataclass(node: ast.ClassDef) -> bool:
    return any(_decorator_name(d) == "dataclass" for d in node.decorator_list)


def _field_init_disabled(value: ast.expr | None) -> bool:
    if not isinstance(value, ast.Call) or _decorator_name(value) != "field":
        return False
    return any(
        kw.arg == "init" and isinstance(kw.value, ast.Constant) and kw.value.value is False
        for kw in value.keywords
    )


def _property_role(node) -> tuple[str, str] | None:
    """(property name, getter|setter|deleter) for property-related defs, else None."""
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Name) and decorator.id in _PROPERTY_DECORATORS:
            return node.name, "getter"
        if isinstance(decorator, ast.Attribute):
            if decorator.attr in _PROPERTY_DECORATORS:
                return node.name, "getter"
            if decorator.attr in ("setter", "deleter") and isinstance(decorator.value, ast.Name):
                return decorator.value.id, decorator.attr
    return None


def _assigned_names(stmt: ast.Assign | ast.AnnAssign):
    """Yield (name, annotation) for simple-name assignment targets."""
    if isinstance(stmt, ast.AnnAssign):
        if isinstance(stmt.target, ast.Name):
            yield stmt.target.id, stmt.annotation
        return
    for target in stmt.targets:
        elements = target.elts if isinstance(target, ast.Tuple) else [target]
        for element in elements:
            if isinstance(element, ast.Name):
                yield element.id, None


def _self_assignments(init_node):
    """Yield (attr, annotation) for ``self.attr = ...`` statements in ``__init__``."""
    if not init_node.args.args:
        return
    self_name = init_node.args.args[0].arg
    for stmt in ast.walk(init_node):
        if isinstance(stmt, ast.AnnAssign):
            targets, annotation = [stmt.target], stmt.annotation
        elif isinstance(stmt, ast.Assign):
            targets, annotation = stmt.targets, None
        else:
            continue
        for target in targets:
            if (
                isinstance(target, ast.Attribute)
                and isinstance(target.value, ast.Name)
                and target.value.id == self_name
            ):
                yield target.attr, annotation


def _literal_names(node) -> list[str] | None:
    """Strings of a literal list/tuple, or None when *node* is anything else."""
    try:
        value = ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        return None
    if not isinstance(value, (list, tuple)) or not all(isinstance(n, str) for n in value):
        return None
    return list(value)


def _is_dunder_all(node) -> bool:
    return isinstance(node, ast.Name) and node.id == "__all__"


def _dunder_all_call(stmt) -> ast.Call | None:
    """The ``__all__.extend(...)`` / ``__all__.append(...)`` call in *stmt*, if any."""
    if not isinstance(stmt, ast.Expr) or not isinstance(stmt.value, ast.Call):
        return None
    func = stmt.value.func
    if (
        isinstance(func, ast.Attribute)
        and func.attr in ("extend", "append")
        and _is_dunder_all(func.value)
    ):
        return stmt.value
    return None


def _dunder_all(tree: ast.Module) -> set[str] | None:
    """Names listed in the module's ``__all__``; None when absent or not static.

    Plain and annotated assignments replace the list; ``+=``, ``.extend`` and
    ``.append`` add to it.
    """
    names: list[str] | None = None
    for stmt in tree.body:
        if isinstance(stmt, ast.Assign) and any(_is_dunder_all(t) for t in stmt.targets):
            contribution, replace = _literal_names(stmt.value), True
        elif isinstance(stmt, ast.AnnAssign) and _is_dunder_all(stmt.target):
            if stmt.value is None:
                continue
            contribution, replace = _literal_names(stmt.value), True
        elif (
            isinstance(stmt, ast.AugAssign)
            and isinstance(stmt.op, ast.Add)
            and _is_dunder_all(stmt.target)
        ):
            contribution, replace = _literal_names(stmt.value), False
        elif (call := _dunder_all_call(stmt)) is not None:
            if len(call.args) != 1 or call.keywords:
                contribution = None
            elif call.func.attr == "append":
                arg = call.args[0]
                is_str = isinstance(arg, ast.Constant) and isinstance(arg.value, str)
                contribution = [arg.value] if is_str else None
            else:
                contribution = _literal_names(call.args[0])
            replace = False
        else:
            continue
        if contribution is None:
            logger.debug("__all__ is not built from string literals; ignoring it")
            return None
        names = contribution if replace or names is None else names + contribution
    return set(names) if names is not None else None


@register_reader("python")
class PythonReader(UnitReader):
    extensions = (".py",)
    description = "Python source tree, parsed with ast"

    def read(self, path: Path, options: ReaderOptions) -> UnitDescriptor:
        root = path if path.is_dir() else path.parent
        files = find_source_files(path, self.extensions, options.exclude)
        prefix = root.name if (root / "__init__.py").is_file() and path.is_dir() else ""
        types: list[TypeDescriptor] = []
        for rel_file in files:
            full = root / rel_file
            try:
                source = full.read_text(encoding="utf-8")
                tree = ast.parse(source, filename=str(full))
            except (OSError, UnicodeDecodeError, SyntaxError) as exc:
                raise ReaderError(f"Could not parse {full}: {exc}") from exc
            ctx = _ModuleContext(
                module=module_name_for(rel_file, prefix),
                is_package=Path(rel_file).name == "__init__.py",
            )
            ctx.collect_imports(tree)
            module_types = _ModuleReader(ctx, tree, honor_all=options.honor_dunder_all).read()
            logger.debug("%s: %d types", rel_file, len(module_types))
            types.extend(module_types)
        return UnitDescriptor(
            name=path.stem if path.is_file() else path.name,
            types=tuple(types),
            origin=str(path),
            reader=self.name,
            metadata={"files": str(len(files))},
        )
