"""Tests for the Python reader (pubdiff.readers.python_ast)."""

from __future__ import annotations

import textwrap

import pytest

from pubdiff.engine.descriptors import (
    FieldDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeKind,
    TypeRef,
    Visibility,
)
from pubdiff.engine.differ import Change, compare
from pubdiff.readers import ReaderError, ReaderOptions, load_unit
from pubdiff.readers.python_ast import PythonReader, module_name_for, name_visibility

INT = TypeRef("", "int")
STR = TypeRef("", "str")
NONE = TypeRef("", "None")


def _write(path, source: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source))
    return path


def _read(path, **options):
    return PythonReader().read(path, ReaderOptions(**options))


def _members(type_desc):
    return {m.name: m for m in type_desc.members}


def _type(unit, name):
    return next(t for t in unit.iter_types() if t.ref.name == name)


# ===========================================================================
# Naming helpers
# ===========================================================================


class TestNaming:
    @pytest.mark.parametrize("name,class_member,expected", [
        ("run", True, Visibility.PUBLIC),
        ("__init__", True, Visibility.PUBLIC),
        ("_helper", True, Visibility.PROTECTED),
        ("_helper", False, Visibility.INTERNAL),
        ("__mangled", True, Visibility.PRIVATE),
    ])
    def test_name_visibility(self, name, class_member, expected):
        assert name_visibility(name, class_member=class_member) == expected

    def test_module_name_for(self):
        assert module_name_for("core/engine.py") == "core.engine"
        assert module_name_for("core/__init__.py", "pkg") == "pkg.core"
        assert module_name_for("__init__.py", "pkg") == "pkg"


# ===========================================================================
# Module-level members
# ===========================================================================


class TestModuleType:
    def test_functions_and_variables_form_module_type(self, tmp_path):
        path = _write(tmp_path / "mod.py", """
            VERSION = "1.0"

            def greet(name: str) -> str:
                return name

            def _helper():
                pass
        """)
        unit = _read(path)
        module = unit.types[0]
        assert module.ref == TypeRef("", "mod")
        assert module.kind == TypeKind.MODULE
        members = _members(module)
        assert members["greet"].is_static
        assert members["greet"].parameter_types == (STR,)
        assert members["greet"].return_type == STR
        assert members["_helper"].visibility == Visibility.INTERNAL
        assert isinstance(members["VERSION"], FieldDescriptor)
        assert members["VERSION"].is_static

    def test_no_module_type_without_module_members(self, tmp_path):
        path = _write(tmp_path / "mod.py", "class Widget:\n    pass\n")
        unit = _read(path)
        assert [t.kind for t in unit.types] == [TypeKind.CLASS]

    def test_dunder_all_limits_public_names(self, tmp_path):
        path = _write(tmp_path / "mod.py", """
            __all__ = ["Public"]

            class Public: ...
            class Other: ...
            def helper(): ...
        """)
        unit = _read(path)
        assert _type(unit, "Public").visibility == Visibility.PUBLIC
        assert _type(unit, "Other").visibility == Visibility.INTERNAL
        assert _members(_type(unit, "mod"))["helper"].visibility == Visibility.INTERNAL

    def test_dunder_all_can_be_ignored(self, tmp_path):
        path = _write(tmp_path / "mod.py", '__all__ = ["Public"]\nclass Public: ...\nclass Other: ...\n')
        unit = _read(path, honor_dunder_all=False)
        assert _type(unit, "Other").visibility == Visibility.PUBLIC

    def test_dunder_all_built_incrementally(self, tmp_path):
        path = _write(tmp_path / "mod.py", """
            __all__ = []
            __all__ += ["first"]
            __all__.extend(("second",))
            __all__.append("Third")

            def first(): ...
            def second(): ...
            def hidden(): ...
            class Third: ...
        """)
        unit = _read(path)
        members = _members(_type(unit, "mod"))
        assert members["first"].visibility == Visibility.PUBLIC
        assert members["second"].visibility == Visibility.PUBLIC
        assert members["hidden"].visibility == Visibility.INTERNAL
        assert _type(unit, "Third").visibility == Visibility.PUBLIC

    def test_dunder_all_reassignment_replaces_names(self, tmp_path):
        path = _write(tmp_path / "mod.py", """
            __all__ = ["old"]
            __all__ = ["new"]

            def old(): ...
            def new(): ...
        """)
        members = _members(_type(_read(path), "mod"))
        assert members["old"].visibility == Visibility.INTERNAL
        assert members["new"].visibility == Visibility.PUBLIC

    @pytest.mark.parametrize("declaration", [
        "__all__ = 5",
        "__all__ = [1, 2]",
        "__all__ = ['f'] + OTHER",
        "__all__ = ['f']\n__all__ += OTHER",
        "__all__ = []\n__all__.append(NAME)",
    ])
    def test_non_literal_dunder_all_falls_back_to_naming(self, tmp_path, declaration):
        path = _write(tmp_path / "mod.py", f"{declaration}\n\ndef f(): ...\ndef g(): ...\n")
        members = _members(_type(_read(path), "mod"))
        assert members["f"].visibility == Visibility.PUBLIC
        assert members["g"].visibility == Visibility.PUBLIC

    def test_private_module_is_internal(self, tmp_path):
        path = _write(tmp_path / "_impl.py", "class Engine: ...\ndef run(): ...\n")
        unit = _read(path)
        assert all(t.visibility == Visibility.INTERNAL for t in unit.types)

    def test_package_prefix_and_namespaces(self, tmp_path):
        _write(tmp_path / "mypkg" / "__init__.py", "")
        _write(tmp_path / "mypkg" / "core.py", "class Engine: ...\n")
        unit = _read(tmp_path / "mypkg")
        assert unit.name == "mypkg"
        assert _type(unit, "Engine").ref == TypeRef("mypkg.core", "Engine")
        assert unit.metadata["files"] == "2"

    def test_syntax_error_raises_reader_error(self, tmp_path):
        path = _write(tmp_path / "broken.py", "def oops(:\n")
        with pytest.raises(ReaderError, match="Could not parse"):
            _read(path)


# ===========================================================================
# Classes
# ===========================================================================


WIDGET_SOURCE = """
class Widget:
    size: int = 0

    def __init__(self, name: str, *args: int, **kw: str):
        self.name = name
        self._secret = 1
        self.__hidden = 2

    def run(self, n: int) -> None: ...

    @staticmethod
    def make() -> "Widget": ...

    @classmethod
    def build(cls, x): ...

    def _internal(self): ...

    def __private(self): ...

    @property
    def title(self) -> str: ...

    @title.setter
    def title(self, value: str) -> None: ...
"""


class TestClassMembers:
    @pytest.fixture()
    def widget(self, tmp_path):
        unit = _read(_write(tmp_path / "shapes.py", WIDGET_SOURCE))
        return _type(unit, "Widget")

    def test_constructor(self, widget):
        init = _members(widget)["__init__"]
        assert init.is_constructor
        assert init.parameter_types == (
            STR,
            TypeRef("", "tuple", (INT,)),
            TypeRef("", "dict", (STR, STR)),
        )

    def test_instance_method_drops_self(self, widget):
        run = _members(widget)["run"]
        assert run.parameter_types == (INT,)
        assert run.return_type == NONE
        assert not run.is_static

    def test_static_and_class_methods(self, widget):
        members = _members(widget)
        assert members["make"].is_static
        assert members["make"].parameter_types == ()
        assert members["make"].return_type == TypeRef("shapes", "Widget")
        assert members["build"].is_static
        assert members["build"].parameter_types == (TypeRef("", "object"),)

    def test_underscore_visibility(self, widget):
        members = _members(widget)
        assert members["_internal"].visibility == Visibility.PROTECTED
        assert members["__private"].visibility == Visibility.PRIVATE

    def test_property_accessors(self, widget):
        title = _members(widget)["title"]
        assert isinstance(title, PropertyDescriptor)
        assert [a.name for a in title.accessors] == ["get_title", "set_title"]
        assert title.accessors[0].return_type == STR
        assert title.accessors[1].parameter_types == (STR,)

    def test_fields_from_class_body_and_init(self, widget):
        members = _members(widget)
        assert isinstance(members["size"], FieldDescriptor)
        assert not members["size"].is_static
        assert members["name"].visibility == Visibility.PUBLIC
        assert members["_secret"].visibility == Visibility.PROTECTED
        assert members["__hidden"].visibility == Visibility.PRIVATE

    def test_nested_class(self, tmp_path):
        unit = _read(_write(tmp_path / "m.py", "class Outer:\n    class Inner:\n        pass\n"))
        inner = _type(unit, "Outer+Inner")
        assert inner.is_nested
        assert inner.ref.namespace == "m"

    def test_enum_members_are_static_fields(self, tmp_path):
        unit = _read(_write(tmp_path / "m.py", """
            from enum import Enum

            class Color(Enum):
                RED = 1
                GREEN = 2
        """))
        color = _type(unit, "Color")
        assert color.kind == TypeKind.ENUM
        red = _members(color)["RED"]
        assert red.is_static
        assert red.field_type == color.ref

    def test_dataclass_constructor(self, tmp_path):
        unit = _read(_write(tmp_path / "m.py", """
            from dataclasses import dataclass, field
            from typing import ClassVar

            @dataclass
            class Point:
                x: int
                y: int = 0
                tags: list = field(default_factory=list)
                cache: dict = field(init=False, default_factory=dict)
                registry: ClassVar[dict] = {}
        """))
        init = _members(_type(unit, "Point"))["__init__"]
        assert init.is_constructor
        assert init.parameter_types == (INT, INT, TypeRef("", "list"))

    def test_bases_resolved_within_module(self, tmp_path):
        unit = _read(_write(tmp_path / "m.py", "class Base: ...\nclass Child(Base): ...\n"))
        assert _type(unit, "Child").bases == (TypeRef("m", "Base"),)


# ===========================================================================
# Annotations
# ===========================================================================


class TestAnnotations:
    def test_optional_and_pep604_union_are_the_same(self, tmp_path):
        unit = _read(_write(tmp_path / "m.py", """
            from typing import List, Optional

            def a(x: Optional[int]) -> None: ...
            def b(x: int | None) -> None: ...
            def c(x: List[str]) -> None: ...
        """))
        members = _members(_type(unit, "m"))
        union = TypeRef("typing", "Union", (INT, NONE))
        assert members["a"].parameter_types == (union,)
        assert members["b"].parameter_types == (union,)
        assert members["c"].parameter_types == (TypeRef("typing", "List", (STR,)),)

    def test_module_alias_import(self, tmp_path):
        unit = _read(_write(tmp_path / "m.py", """
            import collections.abc as cabc

            def f(x: cabc.Mapping) -> None: ...
        """))
        f = _members(_type(unit, "m"))["f"]
        assert f.parameter_types == (TypeRef("collections.abc", "Mapping"),)


# ===========================================================================
# End-to-end comparisons
# ===========================================================================


class TestComparePythonVersions:
    def test_removed_method_and_added_function(self, tmp_path):
        _write(tmp_path / "v1" / "api.py", """
            class Client:
                def get(self, url: str) -> str: ...
                def post(self, url: str) -> str: ...
        """)
        _write(tmp_path / "v2" / "api.py", """
            class Client:
                def get(self, url: str) -> str: ...

            def connect() -> Client: ...
        """)
        v1 = load_unit(tmp_path / "v1", "python")
        v2 = load_unit(tmp_path / "v2", "python")
        diffs = list(compare(v1, v2))
        assert [(d.change, getattr(d.member, "name", None)) for d in diffs] == [
            (Change.REMOVED, "post"),
            (Change.ADDED, "api"),
        ]

    def test_changed_parameter_annotation(self, tmp_path):
        _write(tmp_path / "v1" / "api.py", "def fetch(n: int) -> None: ...\n")
        _write(tmp_path / "v2" / "api.py", "def fetch(n: str) -> None: ...\n")
        diffs = list(compare(load_unit(tmp_path / "v1"), load_unit(tmp_path / "v2")))
        assert [d.change for d in diffs] == [Change.REMOVED, Change.ADDED]
        assert all(isinstance(d.member, MethodDescriptor) for d in diffs)
