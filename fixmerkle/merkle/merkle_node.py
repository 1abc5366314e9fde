"""
Merkle Node Addressing
Logical (level, index) addressing for a complete binary tree of fixed height.

Nodes are never materialized; a MerkleNode is only a coordinate used to
find children, siblings and the path from a leaf up to the root.

Addressing Rules:
- Level 0 holds the root, level `height` holds the leaves
- Level L has 2**L nodes, indexed left to right from 0
- Children of (L, i) are (L + 1, 2i) and (L + 1, 2i + 1)
- Parent of (L, i) is (L - 1, i // 2)
- Sibling of (L, i) is (L, i ^ 1)

MerkleNode performs no range validation. Callers (MerkleTree) guarantee
that indices are in range and that sibling()/parent() are never asked
of the root.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MerkleNode:
    """
    Coordinate of a single node in a tree of the given height.

    Attributes:
        level: Distance from the root (root is 0, leaves are `height`)
        index: Position within the level, leftmost is 0
        height: Height of the tree the node belongs to
    """
    level: int
    index: int
    height: int

    @classmethod
    def root(cls, height: int) -> MerkleNode:
        return cls(level=0, index=0, height=height)

    @classmethod
    def leaf(cls, height: int, index: int) -> MerkleNode:
        return cls(level=height, index=index, height=height)

    @property
    def is_leaf(self) -> bool:
        """True if the node is on the last level and has no children."""
        return self.level == self.height

    @property
    def is_root(self) -> bool:
        return self.level == 0

    def left_child(self) -> MerkleNode:
        return MerkleNode(self.level + 1, 2 * self.index, self.height)

    def right_child(self) -> MerkleNode:
        return MerkleNode(self.level + 1, 2 * self.index + 1, self.height)

    def parent(self) -> MerkleNode:
        return MerkleNode(self.level - 1, self.index // 2, self.height)

    def sibling(self) -> MerkleNode:
        """
        The other child of this node's parent.

        Siblings pair up as (0, 1), (2, 3), (4, 5), ... so flipping the
        lowest bit of the index maps each one to the other.

        Raises:
            ValueError: If called on the root, which has no sibling
        """
        if self.is_root:
            raise ValueError("The root node has no sibling")
        return MerkleNode(self.level, self.index ^ 1, self.height)

    def path_to_root(self) -> tuple[MerkleNode, ...]:
        """
        Nodes from this leaf up to (but excluding) the root.

        Returns:
            Tuple [n_1, ..., n_H] where n_1 is this node, each n_{k+1} is
            the parent of n_k, and n_H is a direct child of the root.
        """
        path: list[MerkleNode] = []
        node = self
        while not node.is_root:
            path.append(node)
            node = node.parent()
        return tuple(path)


__all__ = [
    "MerkleNode",
]
