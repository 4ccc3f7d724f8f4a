"""Configuration for kubedash. Stored as JSON at ~/.kubedash/config.json."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

SPLIT_DIRECTIONS = ("vertical", "horizontal")


class ConfigError(ValueError):
    """The configuration file cannot be read or holds invalid values."""


@dataclass
class Config:
    tick_rate: float = 0.2
    poll_interval: float = 1.0
    split_direction: str = "vertical"
    carry_style: bool = True
    kubectl: str = "kubectl"
    log_tail: int = 1000
    context: str | None = None
    namespaces: list[str] = field(default_factory=list)
    keybindings: dict[str, Any] = field(default_factory=dict)


def get_config_dir() -> Path:
    return Path(os.environ.get("KUBEDASH_CONFIG_DIR", Path.home() / ".kubedash"))


def get_config_path() -> Path:
    return get_config_dir() / "config.json"


def config_from_dict(data: dict[str, Any]) -> Config:
    """Build a :class:`Config`, rejecting unknown keys and bad values."""
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object")
    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
    config = Config(**data)
    validate_config(config)
    return config


def config_to_dict(config: Config) -> dict[str, Any]:
    return asdict(config)


def validate_config(config: Config) -> None:
    if config.tick_rate <= 0:
        raise ConfigError("tick_rate must be positive")
    if config.poll_interval <= 0:
        raise ConfigError("poll_interval must be positive")
    if config.split_direction not in SPLIT_DIRECTIONS:
        raise ConfigError(f"split_direction must be one of {', '.join(SPLIT_DIRECTIONS)}")
    if config.log_tail < 0:
        raise ConfigError("log_tail must not be negative")
    if not isinstance(config.namespaces, list):
        raise ConfigError("namespaces must be a list")


def load_config(path: Path | None = None) -> Config:
    """Load the config file; a missing file yields the defaults."""
    config_path = path or get_config_path()
    if not config_path.exists():
        return Config()
    try:
        data = json.loads(config_path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read {config_path}: {e}") from e
    try:
        return config_from_dict(data)
    except TypeError as e:
        raise ConfigError(f"invalid config {config_path}: {e}") from e


def save_config(config: Config, path: Path | None = None) -> None:
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config_to_dict(config), indent=2))
