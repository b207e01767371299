"""compare command: report public members removed or added between two units."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pubdiff.app.commands.helpers.runtime import command_runtime, load_unit_or_exit
from pubdiff.core.fallbacks import print_error
from pubdiff.engine.describe import describe_difference
from pubdiff.engine.descriptors import member_kind
from pubdiff.engine.differ import Change, Difference, compare, summarize
from pubdiff.utils import PROJECT_ROOT, colorize, log, rel, safe_write_text

logger = logging.getLogger(__name__)

_CHANGE_COLORS = {Change.REMOVED: "red", Change.ADDED: "green"}


def cmd_compare(args: argparse.Namespace) -> None:
    """Compare baseline and challenger and report their differences."""
    runtime = command_runtime(args)
    config = runtime.config
    baseline = load_unit_or_exit(args.baseline, args, runtime)
    challenger = load_unit_or_exit(args.challenger, args, runtime)

    logger.info("Comparing %s to %s", baseline.origin, challenger.origin)
    differences = list(compare(baseline, challenger))
    lines = [describe_difference(d) for d in differences]

    report_path = _report_path(args.report, config.get("report_path"))
    if report_path is not None:
        _write_report(report_path, lines)

    # With --json, stdout carries one document; the property rides inside it.
    property_in_payload = bool(args.json and args.property and not args.property_file)
    if args.json:
        payload = _json_payload(differences, lines)
        if property_in_payload:
            payload["property"] = {"name": args.property, "value": len(differences)}
        print(json.dumps(payload, indent=2))
    else:
        _print_differences(differences, lines)

    if args.property and not property_in_payload:
        _emit_property(args.property, len(differences), args.property_file)

    fail = args.fail_on_differences or bool(config.get("fail_on_differences"))
    if fail and differences:
        sys.exit(1)


def _report_path(explicit: str | None, configured: str | None) -> Path | None:
    """--report is taken as given; a relative configured path is under PROJECT_ROOT."""
    if explicit:
        return Path(explicit)
    if not configured:
        return None
    path = Path(configured)
    return path if path.is_absolute() else PROJECT_ROOT / path


def _write_report(path: Path, lines: list[str]) -> None:
    try:
        safe_write_text(path, "".join(f"{line}\n" for line in lines))
    except OSError as exc:
        print_error(f"could not write report: {exc}")
        sys.exit(1)
    log(f"  Report written: {rel(path)}")


def _json_payload(differences: list[Difference], lines: list[str]) -> dict:
    counts = summarize(differences)
    return {
        "count": counts["total"],
        "removed": counts[Change.REMOVED.value],
        "added": counts[Change.ADDED.value],
        "differences": [
            {
                "change": diff.change.value,
                "kind": member_kind(diff.member),
                "owner": diff.owner.full_name if diff.owner is not None else None,
                "line": line,
            }
            for diff, line in zip(differences, lines)
        ],
    }


def _print_differences(differences: list[Difference], lines: list[str]) -> None:
    if not differences:
        print(colorize("  No public interface differences.", "green"))
        return
    for diff, line in zip(differences, lines):
        print(colorize(f"  {diff.symbol} {line}", _CHANGE_COLORS[diff.change]))
    counts = summarize(differences)
    print()
    print(colorize(
        f"  {counts['total']} difference(s): "
        f"{counts[Change.REMOVED.value]} removed, {counts[Change.ADDED.value]} added",
        "bold",
    ))


def _emit_property(name: str, count: int, property_file: str | None) -> None:
    """Publish the difference count as a NAME=count build variable."""
    assignment = f"{name}={count}"
    if not property_file:
        print(assignment)
        return
    try:
        with open(property_file, "a") as f:
            f.write(assignment + "\n")
    except OSError as exc:
        print_error(f"could not write property file: {exc}")
        sys.exit(1)


__all__ = ["cmd_compare"]
