"""
Fixed-Capacity Merkle Tree
Incremental root computation, proof generation, and proof verification.

This module provides:
- MerkleTree: a binary hash tree over at most 2**height inserted items
- verify_proof: check a claimed item against a root hash and a proof

Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = backend.hash_data(data)
2. Parent hashing: parent = backend.combine(left, right)
3. Unfilled leaves hold backend.placeholder (0)
4. Leaf indices are assigned in insertion order and never reused
5. A proof is the sibling hash at every level from the leaf up to a
   child of the root, leaf-adjacent first, exactly `height` entries

Verification replays a proof as acc = combine(acc, sibling), bottom-up,
without position bits. Generation and verification must change together.

Performance Notes:
- No per-node caching. Every root or sibling query recomputes its
  whole subtree from the leaves, so each insertion costs O(capacity).
  Caching along the touched root-to-leaf path would bring that down to
  O(height) but is not done here.
- Not thread-safe. Reads (get_root_hash, generate_proof) may run
  concurrently with each other only if no add_hash_of runs alongside.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from fixmerkle.crypto.hashing import (
    Data,
    HashBackend,
    HashValue,
    default_backend,
    to_hex,
)
from fixmerkle.merkle.merkle_node import MerkleNode
from fixmerkle.schemas.errors import ErrorCodes, MerkleTreeError


logger = logging.getLogger(__name__)

DEFAULT_TREE_HEIGHT = 5
MAX_TREE_HEIGHT = 20

Proof = tuple[HashValue, ...]


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_height(height: object) -> int:
    """
    Check a tree height.

    Raises:
        ValueError: If height is not an int in [1, MAX_TREE_HEIGHT]
    """
    if not _is_int(height):
        raise ValueError(f"Tree height must be an int, got {type(height).__name__}")
    if not 1 <= height <= MAX_TREE_HEIGHT:
        raise ValueError(
            f"Tree height must be between 1 and {MAX_TREE_HEIGHT}, got {height}"
        )
    return height


class MerkleTree:
    """
    Merkle tree with a fixed capacity of 2**height leaves.

    The tree stores only the hashes of inserted data, never the data.
    The root hash is recomputed after every insertion.

    Example:
        >>> tree = MerkleTree()
        >>> tree.add_hash_of("data1")
        0
        >>> proof = tree.generate_proof(0)
        >>> verify_proof(tree.get_root_hash(), proof, "data1")
        True
    """

    def __init__(
        self,
        height: int = DEFAULT_TREE_HEIGHT,
        backend: Optional[HashBackend] = None,
    ) -> None:
        self._height = validate_height(height)
        self._capacity = 1 << self._height
        self._backend = backend if backend is not None else default_backend()
        self._root = MerkleNode.root(self._height)

        # Placeholder root is never observable; get_root_hash raises while empty.
        self._root_hash: HashValue = self._backend.placeholder
        self._size = 0
        self._leaf_hashes: list[HashValue] = [self._backend.placeholder] * self._capacity

    @classmethod
    def from_items(
        cls,
        items: Iterable[Data],
        height: int = DEFAULT_TREE_HEIGHT,
        backend: Optional[HashBackend] = None,
    ) -> MerkleTree:
        """Build a tree and insert every item in order."""
        tree = cls(height=height, backend=backend)
        for item in items:
            tree.add_hash_of(item)
        return tree

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def height(self) -> int:
        return self._height

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return self._size

    @property
    def backend(self) -> HashBackend:
        return self._backend

    @property
    def leaf_hashes(self) -> tuple[HashValue, ...]:
        """All leaf slots, unfilled ones holding the placeholder."""
        return tuple(self._leaf_hashes)

    @property
    def is_full(self) -> bool:
        return self._size == self._capacity

    @property
    def is_empty(self) -> bool:
        return self._size == 0

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return (
            f"MerkleTree(height={self._height}, size={self._size}, "
            f"capacity={self._capacity}, backend={self._backend.name!r})"
        )

    # ------------------------------------------------------------------
    # Precondition checks
    # ------------------------------------------------------------------

    def check_insert(self) -> Optional[MerkleTreeError]:
        """Return the error add_hash_of would raise, or None."""
        if self.is_full:
            return MerkleTreeError(
                code=ErrorCodes.TREE_FULL,
                message="Merkle tree is full",
                details={"capacity": self._capacity},
            )
        return None

    def check_not_empty(self) -> Optional[MerkleTreeError]:
        """Return the error get_root_hash would raise, or None."""
        if self.is_empty:
            return MerkleTreeError(
                code=ErrorCodes.TREE_EMPTY,
                message="Merkle tree is empty",
            )
        return None

    def check_proof_request(self, leaf_index: int) -> Optional[MerkleTreeError]:
        """
        Return the error generate_proof(leaf_index) would raise, or None.

        The bound is the current size, not the capacity: unfilled slots
        have no meaningful proof.
        """
        error = self.check_not_empty()
        if error is not None:
            return error
        if not _is_int(leaf_index) or not 0 <= leaf_index < self._size:
            return MerkleTreeError(
                code=ErrorCodes.INDEX_OUT_OF_RANGE,
                message=f"Leaf index {leaf_index!r} out of range for {self._size} leaves",
                details={"leaf_index": repr(leaf_index), "size": self._size},
            )
        return None

    # ------------------------------------------------------------------
    # Hashing
    # ------------------------------------------------------------------

    def _node_hash(self, node: MerkleNode) -> HashValue:
        """
        Hash of a node, recomputed from the leaves below it.

        A leaf's hash is the stored slot value; any other node's hash is
        combine(hash(left child), hash(right child)).
        """
        if node.is_leaf:
            return self._leaf_hashes[node.index]

        left_hash = self._node_hash(node.left_child())
        right_hash = self._node_hash(node.right_child())
        return self._backend.combine(left_hash, right_hash)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def add_hash_of(self, data: Data) -> int:
        """
        Insert the hash of a data item into the next free leaf slot.

        The first item goes to index 0, the second to index 1, and so on.

        Returns:
            The leaf index the item was stored at

        Raises:
            TreeFullException: If the tree is full (nothing is changed)
            TypeError: If data is neither bytes nor str
        """
        error = self.check_insert()
        if error is not None:
            raise error.to_exception()

        data_hash = self._backend.hash_data(data)
        leaf_index = self._size
        self._leaf_hashes[leaf_index] = data_hash
        self._size += 1

        self._root_hash = self._node_hash(self._root)
        logger.debug(
            "Inserted leaf %d/%d, root=%s",
            leaf_index,
            self._capacity,
            to_hex(self._root_hash, self._backend.width_bits),
        )
        return leaf_index

    def get_root_hash(self) -> HashValue:
        """
        Root hash over all inserted items.

        Changes (modulo hash collisions) after every insertion.

        Raises:
            TreeEmptyException: If nothing has been inserted yet
        """
        error = self.check_not_empty()
        if error is not None:
            raise error.to_exception()
        return self._root_hash

    def leaf_hash(self, leaf_index: int) -> HashValue:
        """
        Stored hash of a filled leaf slot.

        Raises:
            TreeEmptyException: If the tree is empty
            IndexOutOfRangeException: If leaf_index >= size
        """
        error = self.check_proof_request(leaf_index)
        if error is not None:
            raise error.to_exception()
        return self._leaf_hashes[leaf_index]

    def generate_proof(self, leaf_index: int) -> Proof:
        """
        Inclusion proof for the item at leaf_index.

        The proof is independent of the tree: it can be checked with
        verify_proof given only the data and a root hash.

        Returns:
            Tuple of `height` sibling hashes, leaf-adjacent first

        Raises:
            TreeEmptyException: If the tree is empty
            IndexOutOfRangeException: If leaf_index >= size
        """
        error = self.check_proof_request(leaf_index)
        if error is not None:
            raise error.to_exception()

        path = MerkleNode.leaf(self._height, leaf_index).path_to_root()
        proof = tuple(self._node_hash(node.sibling()) for node in path)

        logger.debug("Generated proof for leaf %d (%d siblings)", leaf_index, len(proof))
        return proof

    def verify(self, proof: Sequence[HashValue], data: Data) -> bool:
        """Check a proof against this tree's current root; False if empty."""
        if self.is_empty:
            return False
        return verify_proof(
            self._root_hash,
            proof,
            data,
            height=self._height,
            backend=self._backend,
        )


def verify_proof(
    root_hash: HashValue,
    proof: Sequence[HashValue],
    data: Data,
    *,
    height: int = DEFAULT_TREE_HEIGHT,
    backend: Optional[HashBackend] = None,
) -> bool:
    """
    Verify that data was in a tree with the given root hash.

    Starting from hash(data), each proof entry is folded in with
    combine(acc, sibling), leaf level first. The data was present iff the
    result equals root_hash.

    Proofs are snapshots: a proof taken before further insertions does not
    verify against the newer root.

    Args:
        root_hash: Root hash of the tree
        proof: Sibling hashes returned by MerkleTree.generate_proof
        data: The item whose presence is being checked
        height: Height of the tree the proof came from
        backend: Hash backend the tree used (default SHA-256)

    Returns:
        True if the proof is valid, False otherwise. Never raises.
    """
    if backend is None:
        backend = default_backend()

    try:
        siblings = tuple(proof)
        if len(siblings) != height:
            logger.debug("Proof has %d entries, expected %d", len(siblings), height)
            return False
        if not all(_is_int(sibling) for sibling in siblings):
            logger.debug("Proof contains non-integer entries")
            return False

        computed_hash = backend.hash_data(data)
        for sibling in siblings:
            computed_hash = backend.combine(computed_hash, sibling)
        return bool(computed_hash == root_hash)
    except Exception as e:
        # Custom backends may raise anything on input they cannot hash
        logger.debug("Proof verification failed on malformed input: %s", e)
        return False


__all__ = [
    "DEFAULT_TREE_HEIGHT",
    "MAX_TREE_HEIGHT",
    "Proof",
    "MerkleTree",
    "validate_height",
    "verify_proof",
]
