"""readers command: list registered readers and whether each can run."""

from __future__ import annotations

import argparse

from pubdiff.readers import available_readers, get_reader
from pubdiff.utils import colorize


def cmd_readers(args: argparse.Namespace) -> None:
    names = available_readers()
    width = max([len(n) for n in names] + [8]) + 2

    print()
    print(colorize(f"{'Reader':<{width}}{'Status':<14}Inputs", "bold"))
    print("─" * 60)
    for name in names:
        reader = get_reader(name)
        if reader.is_available():
            status = colorize(f"{'available':<14}", "green")
        else:
            status = colorize(f"{'unavailable':<14}", "yellow")
        extensions = ", ".join(reader.extensions)
        print(f"{name:<{width}}{status}{extensions}  {reader.description}")
        if not reader.is_available():
            print(colorize(f"{'':<{width}}{reader.unavailable_reason()}", "dim"))
    print()


__all__ = ["cmd_readers"]
