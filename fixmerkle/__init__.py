"""
fixed-merkle - fixed-capacity Merkle trees with inclusion proofs.

Usage:
    from fixmerkle import MerkleTree, verify_proof

    tree = MerkleTree(height=5)          # capacity 32
    tree.add_hash_of("data1")
    tree.add_hash_of("data2")

    root = tree.get_root_hash()
    proof = tree.generate_proof(1)
    assert verify_proof(root, proof, "data2")
"""
from fixmerkle.schemas.errors import (
    ErrorCodes,
    MerkleTreeError,
    MerkleTreeException,
    TreeFullException,
    TreeEmptyException,
    IndexOutOfRangeException,
    ProofFormatException,
    ConfigurationException,
)
from fixmerkle.crypto.hashing import (
    HashBackend,
    Sha256Backend,
    Blake2bBackend,
    get_backend,
)
from fixmerkle.merkle import (
    DEFAULT_TREE_HEIGHT,
    MerkleNode,
    MerkleTree,
    Proof,
    ProofEnvelope,
    MerkleProver,
    MerkleVerifier,
    verify_proof,
)
from fixmerkle.config import TreeConfig

__version__ = "0.1.0"

__all__ = [
    "ErrorCodes",
    "MerkleTreeError",
    "MerkleTreeException",
    "TreeFullException",
    "TreeEmptyException",
    "IndexOutOfRangeException",
    "ProofFormatException",
    "ConfigurationException",
    "HashBackend",
    "Sha256Backend",
    "Blake2bBackend",
    "get_backend",
    "DEFAULT_TREE_HEIGHT",
    "MerkleNode",
    "MerkleTree",
    "Proof",
    "ProofEnvelope",
    "MerkleProver",
    "MerkleVerifier",
    "verify_proof",
    "TreeConfig",
    "__version__",
]
