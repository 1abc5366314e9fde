"""
Test fixtures package for fixed-merkle tests.

Usage:
    from fixtures import make_tree, reference_root

    def test_something():
        tree = make_tree(5)
        assert tree.get_root_hash() == reference_root(tree)
"""

from .tree_fixtures import (
    make_items,
    make_tree,
    reference_root,
)

__all__ = [
    "make_items",
    "make_tree",
    "reference_root",
]
