"""Reader contract: build a UnitDescriptor from files on disk."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from pubdiff.engine.descriptors import UnitDescriptor


class ReaderError(Exception):
    """Input could not be turned into a unit descriptor (user-facing)."""


@dataclass(frozen=True)
class ReaderOptions:
    exclude: tuple[str, ...] = ()
    honor_dunder_all: bool = True


class UnitReader(ABC):
    """A metadata provider for one kind of input.

    Subclasses set ``name``, ``extensions`` and ``description`` and are
    registered with ``@register_reader``.
    """

    name: str = ""
    extensions: tuple[str, ...] = ()
    description: str = ""

    def is_available(self) -> bool:
        """False when an optional dependency this reader needs is missing."""
        return True

    def unavailable_reason(self) -> str:
        return ""

    def claims(self, path: Path, source_files: list[str]) -> bool:
        """True if *path* looks like input for this reader."""
        return bool(source_files)

    @abstractmethod
    def read(self, path: Path, options: ReaderOptions) -> UnitDescriptor:
        """Read *path* (a file or a directory tree) into a unit descriptor."""


__all__ = ["ReaderError", "ReaderOptions", "UnitReader"]
