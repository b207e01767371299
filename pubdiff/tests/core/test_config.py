"""Tests for pubdiff.core.config — project configuration management."""

import json

import pytest

from pubdiff.core.config import (
    CONFIG_SCHEMA,
    default_config,
    load_config,
    save_config,
    set_config_value,
    unset_config_value,
)

# ===========================================================================
# default_config
# ===========================================================================


class TestDefaultConfig:
    def test_returns_all_keys(self):
        cfg = default_config()
        for key in CONFIG_SCHEMA:
            assert key in cfg

    def test_default_values(self):
        cfg = default_config()
        assert cfg["exclude"] == []
        assert cfg["fail_on_differences"] is False
        assert cfg["honor_dunder_all"] is True
        assert cfg["report_path"] == ""
        assert cfg["default_reader"] == ""

    def test_defaults_are_independent_copies(self):
        a = default_config()
        a["exclude"].append("tests")
        assert default_config()["exclude"] == []


# ===========================================================================
# load_config / save_config
# ===========================================================================


class TestLoadSaveConfig:
    def test_no_file_returns_defaults(self, tmp_path):
        assert load_config(tmp_path / "config.json") == default_config()

    def test_round_trip(self, tmp_path):
        p = tmp_path / ".pubdiff" / "config.json"
        cfg = default_config()
        cfg["exclude"] = ["generated"]
        cfg["fail_on_differences"] = True
        save_config(cfg, p)
        loaded = load_config(p)
        assert loaded["exclude"] == ["generated"]
        assert loaded["fail_on_differences"] is True

    def test_fills_missing_keys(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text(json.dumps({"report_path": "api.txt"}))
        cfg = load_config(p)
        assert cfg["report_path"] == "api.txt"
        assert cfg["exclude"] == []

    def test_wrong_type_replaced_by_default(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text(json.dumps({"exclude": "tests", "fail_on_differences": "yes"}))
        cfg = load_config(p)
        assert cfg["exclude"] == []
        assert cfg["fail_on_differences"] is False

    def test_corrupt_file_yields_defaults_and_is_not_rewritten(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text("{broken")
        assert load_config(p) == default_config()
        assert p.read_text() == "{broken"


# ===========================================================================
# set_config_value / unset_config_value
# ===========================================================================


class TestSetUnset:
    def test_bool_parsing(self):
        cfg = default_config()
        set_config_value(cfg, "fail_on_differences", "true")
        assert cfg["fail_on_differences"] is True
        set_config_value(cfg, "fail_on_differences", "No")
        assert cfg["fail_on_differences"] is False

    def test_bool_rejects_garbage(self):
        with pytest.raises(ValueError, match="Expected true/false"):
            set_config_value(default_config(), "honor_dunder_all", "maybe")

    def test_list_appends_without_duplicates(self):
        cfg = default_config()
        set_config_value(cfg, "exclude", "tests")
        set_config_value(cfg, "exclude", "gen")
        set_config_value(cfg, "exclude", "tests")
        assert cfg["exclude"] == ["tests", "gen"]

    def test_string_value(self):
        cfg = default_config()
        set_config_value(cfg, "report_path", "out/api.txt")
        assert cfg["report_path"] == "out/api.txt"

    def test_default_reader_validated(self):
        cfg = default_config()
        set_config_value(cfg, "default_reader", "python")
        assert cfg["default_reader"] == "python"
        with pytest.raises(ValueError, match="Unknown reader"):
            set_config_value(cfg, "default_reader", "cobol")

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            set_config_value(default_config(), "colour", "blue")
        with pytest.raises(KeyError):
            unset_config_value(default_config(), "colour")

    def test_unset_restores_default(self):
        cfg = default_config()
        cfg["exclude"] = ["a"]
        unset_config_value(cfg, "exclude")
        assert cfg["exclude"] == []
