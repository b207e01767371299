"""surface command: list what one unit exposes, as compare sees it."""

from __future__ import annotations

import argparse
import json

from pubdiff.app.commands.helpers.runtime import command_runtime, load_unit_or_exit
from pubdiff.engine.describe import describe
from pubdiff.engine.descriptors import TypeDescriptor, UnitDescriptor, member_kind
from pubdiff.engine.visibility import visible_members, visible_types
from pubdiff.utils import colorize


def surface_entries(unit: UnitDescriptor) -> list[tuple[str, str]]:
    """(kind, described line) for every visible type and member, depth first."""
    entries: list[tuple[str, str]] = []

    def walk(type_desc: TypeDescriptor) -> None:
        entries.append(("type", describe(type_desc)))
        for member in visible_members(type_desc, unit):
            if isinstance(member, TypeDescriptor):
                walk(member)
            else:
                entries.append((member_kind(member), describe(member, type_desc.ref)))

    for type_desc in visible_types(unit):
        walk(type_desc)
    return entries


def cmd_surface(args: argparse.Namespace) -> None:
    runtime = command_runtime(args)
    unit = load_unit_or_exit(args.path, args, runtime)
    entries = surface_entries(unit)

    if args.json:
        payload = {
            "unit": unit.name,
            "reader": unit.reader,
            "members": [{"kind": kind, "line": line} for kind, line in entries],
        }
        print(json.dumps(payload, indent=2))
        return

    print(colorize(f"\n  {unit.name} ({unit.reader})\n", "bold"))
    for kind, line in entries:
        if kind == "type":
            print(colorize(f"  {line}", "cyan"))
        else:
            print(f"    {line}")
    type_count = sum(1 for kind, _ in entries if kind == "type")
    print(colorize(
        f"\n  {type_count} type(s), {len(entries) - type_count} member(s)", "dim"
    ))


__all__ = ["cmd_surface", "surface_entries"]
