"""CLI parser subcommand group builders."""

from __future__ import annotations


def _add_reader_option(parser, readers: list[str]) -> None:
    reader_help = ", ".join(readers) if readers else "registered readers"
    parser.add_argument(
        "--reader",
        type=str,
        default=None,
        help=f"Reader to use ({reader_help}). Auto-detected if omitted.",
    )


def _add_compare_parser(sub, readers: list[str]) -> None:
    p_compare = sub.add_parser(
        "compare", help="Report public members removed or added between two versions"
    )
    p_compare.add_argument("baseline", type=str, help="Baseline unit (sources or snapshot)")
    p_compare.add_argument("challenger", type=str, help="Challenger unit (sources or snapshot)")
    _add_reader_option(p_compare, readers)
    p_compare.add_argument(
        "--report",
        type=str,
        default=None,
        metavar="FILE",
        help="Write one '<type> <signature>' line per difference to FILE",
    )
    p_compare.add_argument(
        "--property",
        type=str,
        default=None,
        metavar="NAME",
        help="Emit NAME=<difference count> (to stdout or --property-file)",
    )
    p_compare.add_argument(
        "--property-file",
        type=str,
        default=None,
        metavar="FILE",
        help="Append the --property assignment to FILE instead of stdout",
    )
    p_compare.add_argument("--json", action="store_true", help="Print differences as JSON")
    p_compare.add_argument(
        "--fail-on-differences",
        action="store_true",
        help="Exit with status 1 when any difference is found",
    )


def _add_surface_parser(sub, readers: list[str]) -> None:
    p_surface = sub.add_parser("surface", help="List the visible surface of one unit")
    p_surface.add_argument("path", type=str, help="Unit to read (sources or snapshot)")
    _add_reader_option(p_surface, readers)
    p_surface.add_argument("--json", action="store_true", help="Print the surface as JSON")


def _add_snapshot_parser(sub, readers: list[str]) -> None:
    p_snapshot = sub.add_parser(
        "snapshot", help="Write a JSON descriptor snapshot to use as a future baseline"
    )
    p_snapshot.add_argument("path", type=str, help="Unit to read")
    p_snapshot.add_argument(
        "--output", "-o", type=str, required=True, metavar="FILE", help="Snapshot file to write"
    )
    _add_reader_option(p_snapshot, readers)


def _add_readers_parser(sub) -> None:
    sub.add_parser("readers", help="List registered readers and their availability")


def _add_config_parser(sub) -> None:
    p_config = sub.add_parser("config", help="Show/set/unset project configuration")
    config_sub = p_config.add_subparsers(dest="config_action")
    config_sub.add_parser("show", help="Show all config values")
    c_set = config_sub.add_parser("set", help="Set a config value")
    c_set.add_argument("config_key", type=str, help="Config key name")
    c_set.add_argument("config_value", type=str, help="Value to set")
    c_unset = config_sub.add_parser("unset", help="Reset a config key to default")
    c_unset.add_argument("config_key", type=str, help="Config key name")


__all__ = [
    "_add_compare_parser",
    "_add_config_parser",
    "_add_readers_parser",
    "_add_snapshot_parser",
    "_add_surface_parser",
]
