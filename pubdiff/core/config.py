"""Project config (.pubdiff/config.json)."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pubdiff.core.fallbacks import log_best_effort_failure
from pubdiff.utils import PROJECT_ROOT, safe_write_text

CONFIG_FILE = PROJECT_ROOT / ".pubdiff" / "config.json"
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigKey:
    type: type
    default: object
    description: str


CONFIG_SCHEMA: dict[str, ConfigKey] = {
    "exclude": ConfigKey(list, [], "Path patterns skipped by source readers"),
    "fail_on_differences": ConfigKey(
        bool, False, "Exit with status 1 when compare finds differences"
    ),
    "honor_dunder_all": ConfigKey(
        bool, True, "Python reader treats names missing from __all__ as internal"
    ),
    "report_path": ConfigKey(
        str, "", "Default report file written by compare (empty = none)"
    ),
    "default_reader": ConfigKey(
        str, "", "Reader used when --reader is omitted (empty = auto-detect)"
    ),
}


def default_config() -> dict[str, Any]:
    """Return a config dict with all keys set to their defaults."""
    return {k: copy.deepcopy(v.default) for k, v in CONFIG_SCHEMA.items()}


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load config from disk, filling missing keys with defaults.

    An unreadable or corrupt file yields the defaults; it is never rewritten
    here, so a hand-edited file is not clobbered by a typo.
    """
    p = path or CONFIG_FILE
    config: dict[str, Any] = {}
    if p.exists():
        try:
            loaded = json.loads(p.read_text())
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            log_best_effort_failure(logger, f"read config from {p}", exc)
            loaded = {}
        if isinstance(loaded, dict):
            config = loaded

    for key, schema in CONFIG_SCHEMA.items():
        if key not in config or not isinstance(config[key], schema.type):
            config[key] = copy.deepcopy(schema.default)
    return config


def save_config(config: dict, path: Path | None = None) -> None:
    """Save config to disk atomically."""
    p = path or CONFIG_FILE
    safe_write_text(p, json.dumps(config, indent=2) + "\n")


def set_config_value(config: dict, key: str, raw: str) -> None:
    """Parse and set a config value from a raw string.

    Handles "true"/"false" for bools and appends to list keys.
    """
    if key not in CONFIG_SCHEMA:
        raise KeyError(f"Unknown config key: {key}")

    schema = CONFIG_SCHEMA[key]

    if schema.type is bool:
        if raw.lower() in ("true", "1", "yes"):
            config[key] = True
        elif raw.lower() in ("false", "0", "no"):
            config[key] = False
        else:
            raise ValueError(f"Expected true/false for {key}, got: {raw}")
    elif schema.type is list:
        config.setdefault(key, [])
        if raw not in config[key]:
            config[key].append(raw)
    elif key == "default_reader" and raw:
        from pubdiff.readers import available_readers

        if raw not in available_readers():
            raise ValueError(
                f"Unknown reader for {key}: {raw} "
                f"(available: {', '.join(available_readers())})"
            )
        config[key] = raw
    else:
        config[key] = raw


def unset_config_value(config: dict, key: str) -> None:
    """Reset a config key to its default value."""
    if key not in CONFIG_SCHEMA:
        raise KeyError(f"Unknown config key: {key}")
    config[key] = copy.deepcopy(CONFIG_SCHEMA[key].default)


__all__ = [
    "CONFIG_FILE",
    "CONFIG_SCHEMA",
    "ConfigKey",
    "default_config",
    "load_config",
    "save_config",
    "set_config_value",
    "unset_config_value",
]
