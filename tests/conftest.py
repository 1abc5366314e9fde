"""
Pytest configuration and shared fixtures for fixed-merkle tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_trees = importlib.import_module("fixtures.tree_fixtures")

make_items = _trees.make_items
make_tree = _trees.make_tree
reference_root = _trees.reference_root


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def empty_tree():
    """Provide an empty height-5 tree (capacity 32)."""
    return make_tree(0)


@pytest.fixture
def three_item_tree():
    """Provide a tree holding "data1", "data2", "data3"."""
    from fixmerkle.merkle import MerkleTree

    return MerkleTree.from_items(["data1", "data2", "data3"])


@pytest.fixture
def full_tree():
    """Provide a height-5 tree filled to capacity."""
    return make_tree(32)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove FIXMERKLE_* variables and isolate cwd/home from real config files."""
    import os

    for key in list(os.environ):
        if key.startswith("FIXMERKLE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
