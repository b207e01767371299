"""Shared utilities: paths, colors, atomic writes, source discovery."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(os.environ.get("PUBDIFF_ROOT", Path.cwd())).resolve()

# Directories that never hold a unit's public surface; always pruned during traversal.
DEFAULT_EXCLUSIONS = frozenset({
    "node_modules", ".git", "__pycache__", ".venv", "venv", ".env",
    "dist", "build", "bin", "obj", ".vs",
    ".tox", ".mypy_cache", ".pytest_cache", ".ruff_cache",
    ".eggs", ".svn", ".hg",
})


# ── Atomic file writes ─────────────────────────────────────


def safe_write_text(filepath: str | Path, content: str) -> None:
    """Atomically write text to a file using temp+rename."""
    p = Path(filepath)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=p.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.replace(tmp, str(p))
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


# ── Terminal colors ────────────────────────────────────────

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
}

NO_COLOR = os.environ.get("NO_COLOR") is not None


def colorize(text: str, color: str) -> str:
    if NO_COLOR or not sys.stdout.isatty():
        return str(text)
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


def log(msg: str):
    """Print a dim status message to stderr."""
    print(colorize(msg, "dim"), file=sys.stderr)


def rel(path: str | Path) -> str:
    try:
        return str(Path(path).resolve().relative_to(PROJECT_ROOT)).replace("\\", "/")
    except ValueError:
        return os.path.relpath(str(Path(path).resolve()), str(PROJECT_ROOT)).replace("\\", "/")


# ── Source discovery ───────────────────────────────────────


def matches_exclusion(rel_path: str, exclusion: str) -> bool:
    """Check if a relative path matches an exclusion pattern (path-component aware).

    Matches if exclusion is a path component (e.g. "tests" matches "tests/foo.py"
    or "src/tests/bar.py") or a directory prefix (e.g. "src/gen" matches
    "src/gen/bar.cs"). Does NOT do substring matching: "test" will NOT match
    "testimony.py".
    """
    parts = Path(rel_path).parts
    if exclusion in parts:
        return True
    if "/" in exclusion or os.sep in exclusion:
        normalized = exclusion.rstrip("/").rstrip(os.sep)
        return rel_path.startswith(normalized + "/") or rel_path.startswith(normalized + os.sep)
    return False


def _is_excluded_dir(name: str, rel_path: str, extra: tuple[str, ...]) -> bool:
    if name in DEFAULT_EXCLUSIONS or name.endswith(".egg-info"):
        return True
    return any(matches_exclusion(rel_path, ex) or ex == name for ex in extra)


def find_source_files(
    path: str | Path,
    extensions: list[str] | tuple[str, ...],
    exclusions: list[str] | tuple[str, ...] | None = None,
) -> list[str]:
    """Find files with given extensions under *path*, relative to *path*.

    A single file is returned as its own name when its extension matches.
    """
    root = Path(path)
    if root.is_file():
        return [root.name] if root.name.endswith(tuple(extensions)) else []
    extra = tuple(exclusions or ())
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root).replace("\\", "/")
        prefix = "" if rel_dir == "." else rel_dir + "/"
        # Prune excluded directories in-place (prevents descending into them)
        dirnames[:] = sorted(
            d for d in dirnames if not _is_excluded_dir(d, prefix + d, extra)
        )
        for fname in filenames:
            if not fname.endswith(tuple(extensions)):
                continue
            rel_file = prefix + fname
            if extra and any(matches_exclusion(rel_file, ex) for ex in extra):
                continue
            files.append(rel_file)
    return sorted(files)


__all__ = [
    "COLORS",
    "DEFAULT_EXCLUSIONS",
    "PROJECT_ROOT",
    "colorize",
    "find_source_files",
    "log",
    "matches_exclusion",
    "rel",
    "safe_write_text",
]
