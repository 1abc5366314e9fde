"""
Runtime Configuration Module

Provides configuration loading for fixed-capacity Merkle trees.
"""

from .runtime import TreeConfig, get_default_config, set_default_config

__all__ = [
    "TreeConfig",
    "get_default_config",
    "set_default_config",
]
