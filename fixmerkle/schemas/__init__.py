"""
Schemas for fixed-merkle.

Error taxonomy and canonical serialization.
"""
from .errors import (
    ErrorCodes,
    MerkleTreeError,
    MerkleTreeException,
    TreeFullException,
    TreeEmptyException,
    IndexOutOfRangeException,
    ProofFormatException,
    CanonicalizationException,
    ConfigurationException,
)
from .canonical import canonicalize_value, dumps_canonical

__all__ = [
    "ErrorCodes",
    "MerkleTreeError",
    "MerkleTreeException",
    "TreeFullException",
    "TreeEmptyException",
    "IndexOutOfRangeException",
    "ProofFormatException",
    "CanonicalizationException",
    "ConfigurationException",
    "canonicalize_value",
    "dumps_canonical",
]
