"""Snapshot reader: load a unit previously written by ``pubdiff snapshot``."""

from __future__ import annotations

import json
from pathlib import Path

from pubdiff.engine.descriptors import UnitDescriptor
from pubdiff.engine.serialize import unit_from_dict
from pubdiff.readers import register_reader
from pubdiff.readers.base import ReaderError, ReaderOptions, UnitReader


@register_reader("snapshot")
class SnapshotReader(UnitReader):
    extensions = (".json",)
    description = "JSON descriptor snapshot written by `pubdiff snapshot`"

    def claims(self, path: Path, source_files: list[str]) -> bool:
        return path.is_file() and path.suffix == ".json"

    def read(self, path: Path, options: ReaderOptions) -> UnitDescriptor:
        if not path.is_file():
            raise ReaderError(f"Snapshot must be a file: {path}")
        try:
            data = json.loads(path.read_text())
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ReaderError(f"Could not read snapshot {path}: {exc}") from exc
        try:
            return unit_from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise ReaderError(f"Malformed snapshot {path}: {exc}") from exc
