"""Runtime context helpers for command handlers."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pubdiff.core.config import load_config
from pubdiff.core.fallbacks import print_error
from pubdiff.engine.descriptors import UnitDescriptor
from pubdiff.readers import ReaderError, ReaderOptions, load_unit


@dataclass(frozen=True)
class CommandRuntime:
    """Explicit runtime dependencies shared by command handlers."""

    config: dict[str, Any]


def command_runtime(args) -> CommandRuntime:
    """Return runtime context from explicit args.runtime or construct one."""
    runtime = getattr(args, "runtime", None)
    if isinstance(runtime, CommandRuntime):
        return runtime
    return CommandRuntime(config=load_config())


def reader_options(args, config: dict[str, Any]) -> ReaderOptions:
    """--exclude patterns on top of the configured ones."""
    exclude = list(config.get("exclude") or [])
    for pattern in getattr(args, "exclude", None) or []:
        if pattern not in exclude:
            exclude.append(pattern)
    return ReaderOptions(
        exclude=tuple(exclude),
        honor_dunder_all=bool(config.get("honor_dunder_all", True)),
    )


def reader_for(path: str, args, config: dict[str, Any]) -> str | None:
    """--reader wins; snapshots are always auto-detected; then the configured default."""
    explicit = getattr(args, "reader", None)
    if explicit:
        return explicit
    p = Path(path)
    if p.is_file() and p.suffix == ".json":
        return None
    return config.get("default_reader") or None


def load_unit_or_exit(path: str, args, runtime: CommandRuntime) -> UnitDescriptor:
    """Load *path*, or print the reader error and exit 1."""
    try:
        return load_unit(
            path,
            reader_for(path, args, runtime.config),
            options=reader_options(args, runtime.config),
        )
    except ReaderError as exc:
        print_error(str(exc))
        sys.exit(1)


__all__ = [
    "CommandRuntime",
    "command_runtime",
    "load_unit_or_exit",
    "reader_for",
    "reader_options",
]
