"""Central command registry for CLI command handler resolution."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pubdiff.app.commands.compare import cmd_compare
from pubdiff.app.commands.config_cmd import cmd_config
from pubdiff.app.commands.readers_cmd import cmd_readers
from pubdiff.app.commands.snapshot import cmd_snapshot
from pubdiff.app.commands.surface import cmd_surface

CommandHandler = Callable[[Any], None]

COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "compare": cmd_compare,
    "surface": cmd_surface,
    "snapshot": cmd_snapshot,
    "readers": cmd_readers,
    "config": cmd_config,
}

__all__ = ["COMMAND_HANDLERS", "CommandHandler"]
