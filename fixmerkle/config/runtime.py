"""
Runtime Configuration

Tree shape and hash backend selection, loadable from environment
variables, a YAML file, or a plain dict.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from fixmerkle.crypto.hashing import DEFAULT_BACKEND_NAME, HashBackend, get_backend
from fixmerkle.merkle.merkle_tree import DEFAULT_TREE_HEIGHT, MerkleTree, validate_height
from fixmerkle.schemas.errors import ConfigurationException

load_dotenv()


ENV_PREFIX = "FIXMERKLE_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class TreeConfig:
    """
    Configuration for constructing Merkle trees.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    height: int = DEFAULT_TREE_HEIGHT
    backend: str = DEFAULT_BACKEND_NAME
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ConfigurationException: If any value is invalid
        """
        try:
            validate_height(self.height)
        except ValueError as e:
            raise ConfigurationException(str(e), field_path="height") from e

        # get_backend raises ConfigurationException for unknown names
        get_backend(self.backend)

        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationException(
                f"Unknown log level: {self.log_level!r}",
                field_path="log_level",
                details={"allowed": list(_LOG_LEVELS)},
            )

    @property
    def capacity(self) -> int:
        return 1 << self.height

    def hash_backend(self) -> HashBackend:
        return get_backend(self.backend)

    def build_tree(self) -> MerkleTree:
        """Construct an empty tree with this configuration."""
        return MerkleTree(height=self.height, backend=self.hash_backend())

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - FIXMERKLE_TREE_HEIGHT: Tree height (capacity is 2**height)
        - FIXMERKLE_HASH_BACKEND: Hash backend name (sha256, blake2b)
        - FIXMERKLE_LOG_LEVEL: Log level
        """
        overrides: dict[str, Any] = {}

        height = os.getenv(f"{ENV_PREFIX}TREE_HEIGHT")
        if height:
            try:
                overrides["height"] = int(height)
            except ValueError as e:
                raise ConfigurationException(
                    f"{ENV_PREFIX}TREE_HEIGHT must be an integer, got {height!r}",
                    field_path="height",
                ) from e

        if os.getenv(f"{ENV_PREFIX}HASH_BACKEND"):
            overrides["backend"] = os.getenv(f"{ENV_PREFIX}HASH_BACKEND")
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")

        return overrides

    @classmethod
    def from_env(cls) -> "TreeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TreeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Config file must contain a mapping: {path}",
                details={"path": str(path)},
            )

        # Allow the settings to live under a top-level "tree" key
        return cls.from_dict(data.get("tree", data))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TreeConfig":
        """Create configuration from a dictionary; unknown keys are rejected."""
        unknown = set(data) - {"height", "backend", "log_level"}
        if unknown:
            raise ConfigurationException(
                f"Unknown configuration keys: {sorted(unknown)}",
                details={"unknown": sorted(unknown)},
            )
        return cls(**data)

    def with_env_overrides(self) -> "TreeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.items():
            setattr(new_config, key, value)
        new_config.validate()
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "height": self.height,
            "backend": self.backend,
            "log_level": self.log_level,
        }


# Global default configuration
_default_config: Optional[TreeConfig] = None


def get_default_config() -> TreeConfig:
    """Get the default tree configuration."""
    global _default_config
    if _default_config is None:
        _default_config = TreeConfig.from_env()
    return _default_config


def set_default_config(config: TreeConfig) -> None:
    """Set the default tree configuration."""
    global _default_config
    _default_config = config
