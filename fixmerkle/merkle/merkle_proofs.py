"""
Merkle Proof Envelopes and Convenience Wrappers

This module provides:
- ProofEnvelope: self-describing, serializable form of an inclusion proof
- MerkleProver: build trees and proofs from raw items
- MerkleVerifier: verify proofs, raw or enveloped

An envelope records everything a verifier needs besides the data:
tree height, hash backend name, root hash and siblings. Hash values are
written as zero-padded 0x hex strings so order and exact width survive
a JSON round trip.
"""
from __future__ import annotations

from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from fixmerkle.crypto.hashing import (
    DEFAULT_BACKEND_NAME,
    Data,
    HashBackend,
    HashValue,
    available_backends,
    from_hex,
    get_backend,
    to_hex,
)
from fixmerkle.merkle.merkle_tree import (
    DEFAULT_TREE_HEIGHT,
    MAX_TREE_HEIGHT,
    MerkleTree,
    Proof,
    verify_proof,
)
from fixmerkle.schemas.canonical import dumps_canonical
from fixmerkle.schemas.errors import ProofFormatException


def _format_error(e: ValidationError) -> ProofFormatException:
    return ProofFormatException(
        message=f"Invalid proof envelope: {e.error_count()} error(s)",
        details={"errors": [err["msg"] for err in e.errors()]},
    )


class ProofEnvelope(BaseModel):
    """
    Serializable inclusion proof.

    Attributes:
        height: Height of the tree the proof was generated from
        backend: Name of the hash backend the tree used
        leaf_index: Index of the proven leaf (informational; verification
            does not depend on it)
        root_hash: Root hash at generation time, 0x hex
        siblings: Sibling hashes, leaf-adjacent first, 0x hex
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    height: int = Field(..., ge=1, le=MAX_TREE_HEIGHT)
    backend: str = Field(default=DEFAULT_BACKEND_NAME)
    leaf_index: int = Field(..., ge=0)
    root_hash: str
    siblings: list[str]

    @model_validator(mode="after")
    def check_hashes(self) -> "ProofEnvelope":
        if self.backend not in available_backends():
            raise ValueError(f"Unknown hash backend: {self.backend!r}")
        if self.leaf_index >= 1 << self.height:
            raise ValueError(
                f"Leaf index {self.leaf_index} does not fit a tree of height {self.height}"
            )
        if len(self.siblings) != self.height:
            raise ValueError(
                f"Expected {self.height} siblings, got {len(self.siblings)}"
            )

        digits = get_backend(self.backend).width_bits // 4
        for value in [self.root_hash, *self.siblings]:
            from_hex(value)
            if len(value) != digits + 2:
                raise ValueError(
                    f"Hash {value!r} must have exactly {digits} hex digits"
                )
        return self

    @classmethod
    def from_proof(
        cls,
        proof: Sequence[HashValue],
        root_hash: HashValue,
        leaf_index: int,
        height: int = DEFAULT_TREE_HEIGHT,
        backend: Optional[HashBackend] = None,
    ) -> ProofEnvelope:
        """
        Wrap a raw proof tuple.

        Raises:
            ProofFormatException: If the proof does not fit the height
                or a hash does not fit the backend width
        """
        backend = backend if backend is not None else get_backend()
        width = backend.width_bits
        try:
            return cls(
                height=height,
                backend=backend.name,
                leaf_index=leaf_index,
                root_hash=to_hex(root_hash, width),
                siblings=[to_hex(sibling, width) for sibling in proof],
            )
        except ValidationError as e:
            raise _format_error(e) from e
        except (TypeError, ValueError) as e:
            raise ProofFormatException(
                message=f"Invalid proof: {e}",
                details={"errors": [str(e)]},
            ) from e

    @classmethod
    def from_tree(cls, tree: MerkleTree, leaf_index: int) -> ProofEnvelope:
        """
        Generate and wrap a proof against the tree's current root.

        Raises:
            TreeEmptyException: If the tree is empty
            IndexOutOfRangeException: If leaf_index >= tree.size
        """
        proof = tree.generate_proof(leaf_index)
        return cls.from_proof(
            proof,
            tree.get_root_hash(),
            leaf_index,
            height=tree.height,
            backend=tree.backend,
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> ProofEnvelope:
        """
        Parse an envelope from JSON.

        Raises:
            ProofFormatException: If the JSON is malformed or inconsistent
        """
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise _format_error(e) from e

    def to_json(self) -> str:
        """Canonical JSON (sorted keys, no whitespace)."""
        return dumps_canonical(self)

    @property
    def root_value(self) -> HashValue:
        return from_hex(self.root_hash)

    @property
    def proof(self) -> Proof:
        return tuple(from_hex(sibling) for sibling in self.siblings)

    def hash_backend(self) -> HashBackend:
        return get_backend(self.backend)

    def verify(self, data: Data, root_hash: Optional[HashValue] = None) -> bool:
        """
        Verify data against this proof.

        Args:
            data: The claimed item
            root_hash: Root to check against; defaults to the recorded root
        """
        root = self.root_value if root_hash is None else root_hash
        return verify_proof(
            root,
            self.proof,
            data,
            height=self.height,
            backend=self.hash_backend(),
        )


class MerkleProver:
    """
    Convenience class for building trees and proofs from raw items.

    Example:
        >>> envelope = MerkleProver.prove(["a", "b", "c"], index=1)
        >>> envelope.verify("b")
        True
    """

    @staticmethod
    def build(
        items: Sequence[Data],
        height: int = DEFAULT_TREE_HEIGHT,
        backend: Optional[HashBackend] = None,
    ) -> MerkleTree:
        """
        Build a tree holding every item, in order.

        Raises:
            TreeFullException: If there are more items than the capacity
        """
        return MerkleTree.from_items(items, height=height, backend=backend)

    @staticmethod
    def compute_root(
        items: Sequence[Data],
        height: int = DEFAULT_TREE_HEIGHT,
        backend: Optional[HashBackend] = None,
    ) -> HashValue:
        """
        Root hash of a tree holding the items.

        Raises:
            TreeEmptyException: If items is empty
            TreeFullException: If there are more items than the capacity
        """
        return MerkleProver.build(items, height, backend).get_root_hash()

    @staticmethod
    def prove(
        items: Sequence[Data],
        index: int,
        height: int = DEFAULT_TREE_HEIGHT,
        backend: Optional[HashBackend] = None,
    ) -> ProofEnvelope:
        """Envelope proving items[index] in a tree built from items."""
        tree = MerkleProver.build(items, height, backend)
        return ProofEnvelope.from_tree(tree, index)


class MerkleVerifier:
    """Convenience class for verifying proofs."""

    @staticmethod
    def verify(envelope: ProofEnvelope, data: Data) -> bool:
        return envelope.verify(data)

    @staticmethod
    def verify_json(text: str | bytes, data: Data) -> bool:
        """
        Verify a JSON-encoded envelope; malformed JSON counts as invalid.
        """
        try:
            envelope = ProofEnvelope.from_json(text)
        except ProofFormatException:
            return False
        return envelope.verify(data)

    @staticmethod
    def verify_raw(
        root_hash: HashValue,
        proof: Sequence[HashValue],
        data: Data,
        height: int = DEFAULT_TREE_HEIGHT,
        backend: Optional[HashBackend] = None,
    ) -> bool:
        return verify_proof(root_hash, proof, data, height=height, backend=backend)


__all__ = [
    "ProofEnvelope",
    "MerkleProver",
    "MerkleVerifier",
]
