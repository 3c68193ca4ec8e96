"""Tests for core/config.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from nichescope.core.config import (
    DEFAULT_CONFIG,
    deep_merge,
    env_overrides,
    get_effective_config,
    get_persona_dir,
    load_config_file,
)


class TestDeepMerge:
    def test_simple_merge(self):
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        base = {"ai": {"provider": "openai", "timeout_seconds": 30}}
        result = deep_merge(base, {"ai": {"provider": "dry-run"}})
        assert result["ai"]["provider"] == "dry-run"
        assert result["ai"]["timeout_seconds"] == 30

    def test_lists_replaced(self):
        result = deep_merge({"keys": ["a", "b"]}, {"keys": ["c"]})
        assert result["keys"] == ["c"]

    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base["a"]["b"] == 1


class TestLoadConfigFile:
    def test_loads_yaml(self, tmp_config: Path):
        config = load_config_file(tmp_config)
        assert config["ai"]["provider"] == "dry-run"

    def test_missing_default_returns_empty(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config_file() == {}

    def test_default_file_in_cwd(self, tmp_config: Path, monkeypatch):
        monkeypatch.chdir(tmp_config.parent)
        assert load_config_file()["ai"]["retry_attempts"] == 2

    def test_missing_explicit_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "nope.yaml")

    def test_empty_file_returns_empty(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_non_mapping_raises(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config_file(path)


class TestGetEffectiveConfig:
    def test_defaults_applied(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("OPENAI_MODEL", raising=False)
        config = get_effective_config()
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_file_overrides_defaults(self, tmp_config: Path, monkeypatch):
        monkeypatch.delenv("OPENAI_MODEL", raising=False)
        config = get_effective_config(tmp_config)
        assert config["ai"]["provider"] == "dry-run"
        assert config["ai"]["openai"]["model"] == "gpt-4o"
        assert config["ai"]["openai"]["api_key_env"] == "OPENAI_API_KEY"
        assert config["ai"]["timeout_seconds"] == 60

    def test_env_overrides_file(self, tmp_config: Path, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
        config = get_effective_config(tmp_config)
        assert config["ai"]["openai"]["model"] == "gpt-4.1"

    def test_cli_overrides_everything(self, tmp_config: Path, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
        config = get_effective_config(
            tmp_config, {"ai": {"provider": "openai", "openai": {"model": "o3"}}}
        )
        assert config["ai"]["provider"] == "openai"
        assert config["ai"]["openai"]["model"] == "o3"


class TestEnvOverrides:
    def test_blank_model_ignored(self, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "  ")
        assert env_overrides() == {}


class TestGetPersonaDir:
    def test_unset(self):
        assert get_persona_dir(DEFAULT_CONFIG) is None

    def test_set(self, tmp_path: Path):
        config = {"personas": {"directory": str(tmp_path)}}
        assert get_persona_dir(config) == tmp_path
