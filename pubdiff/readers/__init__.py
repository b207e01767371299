"""Reader registry: registration, lookup, auto-detection, and loading."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from pubdiff.engine.descriptors import UnitDescriptor
from pubdiff.readers.base import ReaderError, ReaderOptions, UnitReader
from pubdiff.utils import find_source_files

logger = logging.getLogger(__name__)

T = TypeVar("T")

_registry: dict[str, UnitReader] = {}
_BUILTIN_MODULES = (
    "pubdiff.readers.snapshot",
    "pubdiff.readers.csharp",
    "pubdiff.readers.python_ast",
)
_builtins_loaded = False


def register_reader(name: str) -> Callable[[T], T]:
    """Decorator to register a reader class; the registry stores an instance."""

    def decorator(cls: T) -> T:
        instance = cls() if isinstance(cls, type) else cls
        if not isinstance(instance, UnitReader):
            raise TypeError(f"Reader '{name}' must subclass UnitReader")
        instance.name = name
        _registry[name] = instance
        return cls

    return decorator


def _load_builtin_readers() -> None:
    global _builtins_loaded
    if _builtins_loaded:
        return
    _builtins_loaded = True
    for module_name in _BUILTIN_MODULES:
        importlib.import_module(module_name)


def available_readers() -> list[str]:
    """Names of all registered readers, in registration order."""
    _load_builtin_readers()
    return list(_registry)


def get_reader(name: str) -> UnitReader:
    _load_builtin_readers()
    if name not in _registry:
        available = ", ".join(_registry)
        raise ReaderError(f"Unknown reader: {name!r}. Available: {available}")
    return _registry[name]


def auto_detect_reader(path: Path, exclude: tuple[str, ...] = ()) -> str | None:
    """Pick the reader whose sources dominate *path*; None when nothing matches."""
    _load_builtin_readers()
    best, best_count = None, 0
    for name, reader in _registry.items():
        files = find_source_files(path, reader.extensions, exclude)
        if not reader.claims(path, files):
            continue
        if len(files) > best_count:
            best, best_count = name, len(files)
    logger.debug("Auto-detected reader for %s: %s (%d files)", path, best, best_count)
    return best


def load_unit(
    path: str | Path,
    reader: str | None = None,
    *,
    options: ReaderOptions | None = None,
) -> UnitDescriptor:
    """Read *path* with the named reader, or an auto-detected one."""
    options = options or ReaderOptions()
    p = Path(path)
    if not p.exists():
        raise ReaderError(f"Path does not exist: {p}")
    name = reader or auto_detect_reader(p, options.exclude)
    if name is None:
        raise ReaderError(f"No reader recognizes {p}; pass --reader explicitly")
    impl = get_reader(name)
    if not impl.is_available():
        raise ReaderError(f"Reader '{name}' is unavailable: {impl.unavailable_reason()}")
    logger.debug("Loading %s with reader %s", p, name)
    return impl.read(p, options)


__all__ = [
    "ReaderError",
    "ReaderOptions",
    "UnitReader",
    "auto_detect_reader",
    "available_readers",
    "get_reader",
    "load_unit",
    "register_reader",
]
