"""
CLI Configuration

Configuration management for the fixmerkle CLI.
Supports environment variables and JSON configuration files.

Tree settings (height, backend, log_level) are held in a TreeConfig, so the
CLI and the library validate them the same way and read the same
FIXMERKLE_* variables.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fixmerkle.config import TreeConfig
from fixmerkle.crypto.hashing import DEFAULT_BACKEND_NAME
from fixmerkle.merkle.merkle_tree import DEFAULT_TREE_HEIGHT
from fixmerkle.schemas.errors import ConfigurationException


# Environment variable prefix
ENV_PREFIX = "FIXMERKLE_"

DEFAULT_CONFIG_NAME = "fixmerkle.json"

OUTPUT_FORMATS = ("human", "json")

_TREE_KEYS = {"height", "backend", "log_level"}
_CLI_KEYS = {"log_file", "default_output_format"}


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Tree settings and log level
    tree: TreeConfig = field(default_factory=TreeConfig)

    # Logging
    log_file: str | None = None

    # Output
    default_output_format: str = "human"  # "human" or "json"

    def __post_init__(self) -> None:
        if self.log_file is not None and not isinstance(self.log_file, str):
            raise ConfigurationException(
                f"log_file must be a string, got {self.log_file!r}",
                field_path="log_file",
            )
        if self.default_output_format not in OUTPUT_FORMATS:
            raise ConfigurationException(
                f"Unknown output format: {self.default_output_format!r}",
                field_path="default_output_format",
                details={"allowed": list(OUTPUT_FORMATS)},
            )

    @property
    def height(self) -> int:
        return self.tree.height

    @property
    def backend(self) -> str:
        return self.tree.backend

    @property
    def log_level(self) -> str:
        return self.tree.log_level

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.tree.to_dict(),
            "capacity": self.tree.capacity,
            "log_file": self.log_file,
            "default_output_format": self.default_output_format,
        }


def config_from_dict(data: dict[str, Any]) -> CLIConfig:
    """
    Build a CLIConfig from a flat mapping.

    Raises:
        ConfigurationException: On unknown keys or invalid values
    """
    unknown = set(data) - _TREE_KEYS - _CLI_KEYS
    if unknown:
        raise ConfigurationException(
            f"Unknown configuration keys: {sorted(unknown)}",
            details={"unknown": sorted(unknown)},
        )

    tree = TreeConfig.from_dict({k: v for k, v in data.items() if k in _TREE_KEYS})
    return CLIConfig(tree=tree, **{k: v for k, v in data.items() if k in _CLI_KEYS})


def load_config_from_env(config: CLIConfig | None = None) -> CLIConfig:
    """Apply environment variables on top of config (defaults if None)."""
    config = config if config is not None else CLIConfig()

    values: dict[str, Any] = {
        "log_file": config.log_file,
        "default_output_format": config.default_output_format,
    }
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        values["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")
    if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
        values["default_output_format"] = os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT")

    return CLIConfig(tree=config.tree.with_env_overrides(), **values)


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ConfigurationException(
            f"Config file must contain a JSON object: {path}",
            details={"path": str(path)},
        )

    return config_from_dict(data)


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration

    Raises:
        FileNotFoundError: If config_path is given and does not exist
        ConfigurationException: If any value is invalid
    """
    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        default_paths = [
            Path.cwd() / DEFAULT_CONFIG_NAME,
            Path.cwd() / f".{DEFAULT_CONFIG_NAME}",
            Path.home() / ".config" / "fixmerkle" / "config.json",
        ]
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    return load_config_from_env(config)


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return f"""{{
  "height": {DEFAULT_TREE_HEIGHT},
  "backend": "{DEFAULT_BACKEND_NAME}",
  "log_level": "WARNING",
  "log_file": null,
  "default_output_format": "human"
}}
"""
