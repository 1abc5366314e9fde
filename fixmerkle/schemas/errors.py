"""
Schemas - Error Taxonomy
File: errors.py

Purpose: Standard error taxonomy for fixed-capacity Merkle trees.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every tree error is a precondition violation detected before any
state is mutated. None of them is retryable by the tree itself.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Tree preconditions
    TREE_FULL = "TREE_FULL"
    TREE_EMPTY = "TREE_EMPTY"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"

    # Serialization
    PROOF_FORMAT_ERROR = "PROOF_FORMAT_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Configuration
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class MerkleTreeError(BaseModel):
    """
    Error value returned by the non-raising precondition checks.

    Lets callers inspect why an operation would fail without using
    exceptions for control flow.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.TREE_FULL],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "MerkleTreeException":
        """Convert this error model to the matching exception."""
        exc_type = _EXCEPTIONS_BY_CODE.get(self.code)
        if exc_type is None:
            return MerkleTreeException(
                message=self.message,
                code=self.code,
                details=dict(self.details),
                retryable=self.retryable,
            )
        return exc_type(message=self.message, details=dict(self.details))


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleTreeException(Exception):
    """
    Base exception for all Merkle tree errors.

    Carries structured error information and can be converted
    to/from MerkleTreeError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_TREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> MerkleTreeError:
        """Convert this exception to a MerkleTreeError model."""
        return MerkleTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class TreeFullException(MerkleTreeException):
    """Raised when inserting into a tree that has reached its capacity."""

    def __init__(
        self,
        message: str = "Merkle tree is full",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_FULL,
            details=details,
        )


class TreeEmptyException(MerkleTreeException):
    """Raised when the root or a proof is requested from an empty tree."""

    def __init__(
        self,
        message: str = "Merkle tree is empty",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_EMPTY,
            details=details,
        )


class IndexOutOfRangeException(MerkleTreeException):
    """Raised when a leaf index does not refer to a filled leaf slot."""

    def __init__(
        self,
        message: str = "Node index out of range",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details=details,
        )


class ProofFormatException(MerkleTreeException):
    """Raised when a serialized proof cannot be decoded."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_FORMAT_ERROR,
            details=details,
        )


class CanonicalizationException(MerkleTreeException):
    """Raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class ConfigurationException(MerkleTreeException):
    """Raised when tree configuration values are invalid."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_CONFIGURATION,
            details=full_details,
        )


_EXCEPTIONS_BY_CODE: dict[str, type[MerkleTreeException]] = {
    ErrorCodes.TREE_FULL: TreeFullException,
    ErrorCodes.TREE_EMPTY: TreeEmptyException,
    ErrorCodes.INDEX_OUT_OF_RANGE: IndexOutOfRangeException,
    ErrorCodes.PROOF_FORMAT_ERROR: ProofFormatException,
    ErrorCodes.CANONICALIZATION_ERROR: CanonicalizationException,
    ErrorCodes.INVALID_CONFIGURATION: ConfigurationException,
}


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
]
