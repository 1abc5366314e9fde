"""
Hash primitives for fixed-merkle.
"""
from .hashing import (
    HashValue,
    HashBackend,
    Sha256Backend,
    Blake2bBackend,
    DEFAULT_BACKEND_NAME,
    PLACEHOLDER_HASH,
    available_backends,
    get_backend,
    default_backend,
    to_hex,
    from_hex,
)

__all__ = [
    "HashValue",
    "HashBackend",
    "Sha256Backend",
    "Blake2bBackend",
    "DEFAULT_BACKEND_NAME",
    "PLACEHOLDER_HASH",
    "available_backends",
    "get_backend",
    "default_backend",
    "to_hex",
    "from_hex",
]
