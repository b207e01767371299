"""CLI parser construction helpers."""

from __future__ import annotations

import argparse

from pubdiff.app.cli_support.parser_groups import (
    _add_compare_parser,
    _add_config_parser,
    _add_readers_parser,
    _add_snapshot_parser,
    _add_surface_parser,
)

USAGE_EXAMPLES = """
workflow:
  compare BASELINE CHALLENGER   Removed (-) and added (+) public members
  surface PATH                  Visible surface of one unit
  snapshot PATH -o FILE         Save a unit's surface as a future baseline
  readers                       Registered readers and availability
  config                        Show/set/unset project configuration

examples:
  pubdiff compare v1/src v2/src
  pubdiff compare baseline.json src --report api-changes.txt --fail-on-differences
  pubdiff compare old/ new/ --property API_CHANGES --property-file build.env
  pubdiff --exclude tests surface src/mypkg
  pubdiff snapshot src/MyLib -o MyLib-1.0.json
  pubdiff config set fail_on_differences true
"""


class _NoAbbrevArgumentParser(argparse.ArgumentParser):
    """Argparse parser variant that disables long-option abbreviation."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("allow_abbrev", False)
        super().__init__(*args, **kwargs)


def create_parser(*, readers: list[str] | None = None) -> argparse.ArgumentParser:
    """Build top-level CLI parser with all subcommands."""
    readers = readers or []
    parser = _NoAbbrevArgumentParser(
        prog="pubdiff",
        description="pubdiff: compare the public interface of two versions of a code unit",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Path pattern to exclude (component/prefix match; repeatable)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(
        dest="command",
        required=True,
        parser_class=_NoAbbrevArgumentParser,
    )
    _add_compare_parser(sub, readers)
    _add_surface_parser(sub, readers)
    _add_snapshot_parser(sub, readers)
    _add_readers_parser(sub)
    _add_config_parser(sub)
    return parser


__all__ = ["USAGE_EXAMPLES", "create_parser"]
