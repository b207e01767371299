"""C# reader: public surface of a source tree, parsed with tree-sitter.

Requires the optional ``tree-sitter-language-pack`` dependency; without it
the reader is listed as unavailable.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pubdiff.engine.descriptors import TypeDescriptor, TypeRef, UnitDescriptor
from pubdiff.readers import register_reader
from pubdiff.readers.base import ReaderError, ReaderOptions, UnitReader
from pubdiff.readers.csharp.extract import (
    FileExtractor,
    merge_partial,
    with_implicit_constructors,
)
from pubdiff.readers.treesitter import PARSE_INIT_ERRORS, get_parser, is_available
from pubdiff.utils import find_source_files

logger = logging.getLogger(__name__)


@register_reader("csharp")
class CSharpReader(UnitReader):
    extensions = (".cs",)
    description = "C# source tree, parsed with tree-sitter"

    def is_available(self) -> bool:
        return is_available()

    def unavailable_reason(self) -> str:
        return "tree-sitter-language-pack is not installed (pip install tree-sitter-language-pack)"

    def read(self, path: Path, options: ReaderOptions) -> UnitDescriptor:
        try:
            parser = get_parser("csharp")
        except PARSE_INIT_ERRORS as exc:
            raise ReaderError(f"C# grammar unavailable: {exc}") from exc

        root = path if path.is_dir() else path.parent
        files = find_source_files(path, self.extensions, options.exclude)
        merged: dict[TypeRef, TypeDescriptor] = {}
        type_modifiers: dict[TypeRef, set[str]] = {}
        for rel_file in files:
            full = root / rel_file
            try:
                source = full.read_bytes()
            except OSError as exc:
                raise ReaderError(f"Could not read {full}: {exc}") from exc
            tree = parser.parse(source)
            if tree.root_node.has_error:
                logger.debug("%s has syntax errors; reading the parts that parsed", rel_file)
            extractor = FileExtractor(rel_file)
            for type_desc in extractor.extract(tree.root_node):
                if type_desc.ref in merged:
                    merged[type_desc.ref] = merge_partial(merged[type_desc.ref], type_desc)
                else:
                    merged[type_desc.ref] = type_desc
            for ref, mods in extractor.type_modifiers.items():
                type_modifiers.setdefault(ref, set()).update(mods)

        types = tuple(with_implicit_constructors(t, type_modifiers) for t in merged.values())
        logger.debug("Read %d C# types from %d files", len(types), len(files))
        return UnitDescriptor(
            name=path.stem if path.is_file() else path.name,
            types=types,
            origin=str(path),
            reader=self.name,
            metadata={"files": str(len(files))},
        )


__all__ = ["CSharpReader"]
