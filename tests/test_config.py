"""Tests for config.py — config file, env overrides, and key validation."""

import json
import os

import pytest

from ado_cli import config
from ado_cli.exceptions import CliError, ValidationError


class TestPaths:
    def test_config_dir_override(self, tmp_path):
        assert config.config_dir() == str(tmp_path / "ado")
        assert config.config_path() == str(tmp_path / "ado" / "config.json")

    def test_default_dir(self, monkeypatch):
        monkeypatch.delenv("ADO_CONFIG_DIR")
        assert config.config_dir().endswith(os.path.join(".config", "ado"))


class TestEnvHelpers:
    @pytest.mark.parametrize("raw,expected", [("1", True), ("yes", True), ("off", False)])
    def test_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("ADO_TEST_FLAG", raw)
        assert config._env_bool("ADO_TEST_FLAG") is expected

    def test_env_int_fallback(self, monkeypatch):
        monkeypatch.setenv("ADO_TEST_INT", "abc")
        assert config._env_int("ADO_TEST_INT", 7) == 7


class TestLoadSave:
    def test_missing_file_defaults(self):
        cfg = config.load_config()
        assert cfg == config.Config()
        assert cfg.output_format == "table"

    def test_round_trip(self):
        cfg = config.Config(organization="contoso", project="Fabrikam", output_format="json")
        path = config.save_config(cfg)
        assert os.path.exists(path)
        assert config.load_config() == cfg

    def test_saved_file_is_json_object(self):
        path = config.save_config(config.Config(organization="contoso"))
        with open(path, encoding="utf-8") as f:
            assert json.load(f)["organization"] == "contoso"

    def test_no_temp_files_left(self):
        path = config.save_config(config.Config())
        assert os.listdir(os.path.dirname(path)) == ["config.json"]

    def test_invalid_json(self):
        os.makedirs(config.config_dir())
        with open(config.config_path(), "w", encoding="utf-8") as f:
            f.write("{not json")
        with pytest.raises(CliError) as exc_info:
            config.load_config()
        assert "Invalid JSON in config file" in str(exc_info.value)

    def test_non_object(self):
        os.makedirs(config.config_dir())
        with open(config.config_path(), "w", encoding="utf-8") as f:
            f.write("[1, 2]")
        with pytest.raises(CliError):
            config.load_config()

    def test_env_overrides_file(self, monkeypatch):
        config.save_config(config.Config(organization="file-org", project="file-proj"))
        monkeypatch.setenv("ADO_PROJECT", "env-proj")
        cfg = config.load_config()
        assert cfg.organization == "file-org"
        assert cfg.project == "env-proj"

    def test_env_ignored_when_disabled(self, monkeypatch):
        monkeypatch.setenv("ADO_ORGANIZATION", "env-org")
        assert config.load_config(apply_env=False).organization == ""


class TestValues:
    def test_set_and_get(self):
        cfg = config.set_value(config.Config(), "project", "Fabrikam")
        assert config.get_value(cfg, "project") == "Fabrikam"

    def test_unknown_key(self):
        with pytest.raises(ValidationError) as exc_info:
            config.get_value(config.Config(), "colour")
        assert "unknown config key 'colour'" in str(exc_info.value)

    def test_invalid_output_format(self):
        with pytest.raises(ValidationError):
            config.set_value(config.Config(), "output_format", "yaml")
