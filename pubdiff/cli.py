"""CLI entry point: argparse, logging setup, subcommand routing."""

from __future__ import annotations

import logging
import sys

from pubdiff.app.cli_support.parser import create_parser as _create_parser
from pubdiff.readers import available_readers

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def create_parser():
    """Build the CLI parser with the currently registered readers."""
    return _create_parser(readers=available_readers())


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    parser = create_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    from pubdiff.app.commands.registry import COMMAND_HANDLERS

    try:
        COMMAND_HANDLERS[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(1)


if __name__ == "__main__":
    main()
