"""Tests for kubedash.app.config."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from kubedash.app.config import (
    Config,
    ConfigError,
    config_from_dict,
    config_to_dict,
    get_config_dir,
    get_config_path,
    load_config,
    save_config,
)


class TestPaths:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("KUBEDASH_CONFIG_DIR", str(tmp_path))
        assert get_config_dir() == tmp_path
        assert get_config_path() == tmp_path / "config.json"

    def test_default_dir(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KUBEDASH_CONFIG_DIR", raising=False)
        assert get_config_dir() == Path.home() / ".kubedash"


class TestLoad:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "nope.json") == Config()

    def test_values_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tick_rate": 0.5, "namespaces": ["a", "b"], "carry_style": False}))
        config = load_config(path)
        assert config.tick_rate == 0.5
        assert config.namespaces == ["a", "b"]
        assert config.carry_style is False
        assert config.poll_interval == 1.0

    def test_uses_env_dir(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("KUBEDASH_CONFIG_DIR", str(tmp_path))
        (tmp_path / "config.json").write_text(json.dumps({"kubectl": "/opt/kubectl"}))
        assert load_config().kubectl == "/opt/kubectl"

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"colour": "red"}))
        with pytest.raises(ConfigError, match="colour"):
            load_config(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError):
            load_config(path)


class TestValidate:
    @pytest.mark.parametrize(
        "data",
        [
            {"tick_rate": 0},
            {"poll_interval": -1},
            {"split_direction": "diagonal"},
            {"log_tail": -5},
            {"namespaces": "default"},
        ],
    )
    def test_rejected(self, data: dict) -> None:
        with pytest.raises(ConfigError):
            config_from_dict(data)

    def test_horizontal_split_accepted(self) -> None:
        assert config_from_dict({"split_direction": "horizontal"}).split_direction == "horizontal"


class TestSave:
    def test_save_then_load(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.json"
        config = Config(namespaces=["kube-system"], keybindings={"quit": "ctrl+q"})
        save_config(config, path)
        assert load_config(path) == config

    def test_to_dict(self) -> None:
        assert config_to_dict(Config())["split_direction"] == "vertical"
