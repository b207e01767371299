"""snapshot command: save a unit's descriptors as JSON for later comparison."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pubdiff.app.commands.helpers.runtime import command_runtime, load_unit_or_exit
from pubdiff.core.fallbacks import print_error
from pubdiff.engine.serialize import unit_to_dict
from pubdiff.utils import colorize, rel, safe_write_text


def cmd_snapshot(args: argparse.Namespace) -> None:
    runtime = command_runtime(args)
    unit = load_unit_or_exit(args.path, args, runtime)
    output = Path(args.output)
    try:
        safe_write_text(output, json.dumps(unit_to_dict(unit), indent=2) + "\n")
    except OSError as exc:
        print_error(f"could not write snapshot: {exc}")
        sys.exit(1)
    print(colorize(
        f"  Snapshot written: {rel(output)} ({len(unit.types)} types, reader {unit.reader})",
        "green",
    ))


__all__ = ["cmd_snapshot"]
