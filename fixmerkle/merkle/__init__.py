"""
Fixed-capacity Merkle tree with inclusion proofs.

This package provides:
- MerkleNode: (level, index) addressing over the implicit tree
- MerkleTree: insertion, root hash, proof generation
- verify_proof: tree-independent proof verification
- ProofEnvelope: serializable proof with its verification context
- MerkleProver / MerkleVerifier: convenience wrappers

Usage:
    from fixmerkle.merkle import MerkleTree, verify_proof

    tree = MerkleTree()
    for item in ["data1", "data2", "data3"]:
        tree.add_hash_of(item)

    proof = tree.generate_proof(1)
    assert verify_proof(tree.get_root_hash(), proof, "data2")
"""
from .merkle_node import MerkleNode

from .merkle_tree import (
    DEFAULT_TREE_HEIGHT,
    MAX_TREE_HEIGHT,
    Proof,
    MerkleTree,
    validate_height,
    verify_proof,
)

from .merkle_proofs import (
    ProofEnvelope,
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Addressing
    "MerkleNode",
    # Core
    "DEFAULT_TREE_HEIGHT",
    "MAX_TREE_HEIGHT",
    "Proof",
    "MerkleTree",
    "validate_height",
    "verify_proof",
    # Serialization and wrappers
    "ProofEnvelope",
    "MerkleProver",
    "MerkleVerifier",
]
