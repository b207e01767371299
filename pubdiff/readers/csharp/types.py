"""C# type syntax -> TypeRef, without a semantic model.

Names are taken as written: ``List<string>`` and
``System.Collections.Generic.List<string>`` are different identities. Both
versions of a unit are read the same way, so this only matters when the
qualification itself changed between versions.
"""

from __future__ import annotations

import re

from pubdiff.engine.descriptors import TypeRef

SYSTEM = "System"

KEYWORD_TYPES: dict[str, str] = {
    "bool": "Boolean",
    "byte": "Byte",
    "sbyte": "SByte",
    "char": "Char",
    "decimal": "Decimal",
    "double": "Double",
    "float": "Single",
    "int": "Int32",
    "uint": "UInt32",
    "nint": "IntPtr",
    "nuint": "UIntPtr",
    "long": "Int64",
    "ulong": "UInt64",
    "short": "Int16",
    "ushort": "UInt16",
    "object": "Object",
    "string": "String",
    "void": "Void",
    "dynamic": "Object",
}

# Value-type keywords: ``int?`` is Nullable<Int32>; ``string?`` is only an annotation.
_VALUE_KEYWORDS = frozenset(KEYWORD_TYPES) - {"object", "string", "void", "dynamic"}

VOID = TypeRef(SYSTEM, "Void")

_TOKEN_RE = re.compile(r"\s*(::|[A-Za-z_@][\w@]*|[<>,.()\[\]?*])")


class TypeSyntaxError(ValueError):
    """Raised when a type string cannot be parsed."""


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    text = text.strip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise TypeSyntaxError(f"Unexpected character in type {text!r} at {pos}")
        tokens.append(m.group(1))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self, expected: str | None = None) -> str:
        token = self.peek()
        if token is None or (expected is not None and token != expected):
            raise TypeSyntaxError(f"Expected {expected or 'token'} in type {self.text!r}")
        self.pos += 1
        return token

    def parse(self) -> TypeRef:
        ref = self.type()
        if self.peek() is not None:
            raise TypeSyntaxError(f"Trailing tokens in type {self.text!r}")
        return ref

    def type(self) -> TypeRef:
        if self.peek() == "(":
            ref = self.tuple_type()
            keyword = None
        else:
            ref, keyword = self.named_type()
        return self.suffixes(ref, keyword)

    def tuple_type(self) -> TypeRef:
        self.take("(")
        elements = [self.tuple_element()]
        while self.peek() == ",":
            self.take(",")
            elements.append(self.tuple_element())
        self.take(")")
        return TypeRef(SYSTEM, "ValueTuple", tuple(elements))

    def tuple_element(self) -> TypeRef:
        ref = self.type()
        # Element names do not change the tuple's type identity.
        token = self.peek()
        if token is not None and token not in (",", ")"):
            self.take()
        return ref

    def named_type(self) -> tuple[TypeRef, str | None]:
        parts: list[str] = []
        args: tuple[TypeRef, ...] = ()
        while True:
            name = self.take()
            if self.peek() == "::":  # alias-qualified (global::)
                self.take("::")
                continue
            parts.append(name.lstrip("@"))
            args = self.type_arguments() if self.peek() == "<" else ()
            if self.peek() != ".":
                break
            self.take(".")
        if len(parts) == 1 and parts[0] in KEYWORD_TYPES and not args:
            return TypeRef(SYSTEM, KEYWORD_TYPES[parts[0]]), parts[0]
        return TypeRef(".".join(parts[:-1]), parts[-1], args), None

    def type_arguments(self) -> tuple[TypeRef, ...]:
        self.take("<")
        args = [self.type()]
        while self.peek() == ",":
            self.take(",")
            args.append(self.type())
        self.take(">")
        return tuple(args)

    def suffixes(self, ref: TypeRef, keyword: str | None) -> TypeRef:
        while True:
            token = self.peek()
            if token == "?":
                self.take("?")
                if keyword in _VALUE_KEYWORDS:
                    ref = TypeRef(SYSTEM, "Nullable", (ref,))
                    keyword = None
            elif token == "[":
                self.take("[")
                commas = ""
                while self.peek() == ",":
                    commas += self.take(",")
                self.take("]")
                ref = TypeRef(ref.namespace, f"{ref.name}[{commas}]", ref.args)
                keyword = None
            elif token == "*":
                self.take("*")
                ref = TypeRef(ref.namespace, f"{ref.name}*", ref.args)
                keyword = None
            else:
                return ref


def parse_type(text: str) -> TypeRef:
    """Parse C# type syntax into a TypeRef (keywords map to System types)."""
    cleaned = " ".join(text.split())
    if not cleaned:
        raise TypeSyntaxError("Empty type")
    return _Parser(cleaned).parse()


def parse_type_lenient(text: str) -> TypeRef:
    """Like parse_type, but falls back to the raw text as a bare name."""
    try:
        return parse_type(text)
    except TypeSyntaxError:
        return TypeRef("", " ".join(text.split()))


def by_ref(ref: TypeRef) -> TypeRef:
    """``ref``/``out``/``in`` parameters are ``T&``."""
    return TypeRef(ref.namespace, f"{ref.name}&", ref.args)


__all__ = [
    "KEYWORD_TYPES",
    "SYSTEM",
    "TypeSyntaxError",
    "VOID",
    "by_ref",
    "parse_type",
    "parse_type_lenient",
]
