"""
Hashing Backends
Pluggable hash primitives for fixed-capacity Merkle trees.

This module provides:
- HashBackend: the capability a tree hashes with
- Built-in backends (SHA-256 and BLAKE2b, truncated to 64 bits)
- A small registry to select a backend by name
- Hex encoding/decoding of hash values with 0x prefix

Backend Contract:
1. hash_data(data) is deterministic and returns an int in [0, 2**width_bits)
2. combine(left, right) is deterministic and returns a value of the same width
3. placeholder is the value held by unfilled leaf slots (0)

Combine Rule (built-in backends):
    combine(a, b) = digest(((a + b) mod 2**width_bits).to_bytes(width, "big"))

The sum makes combine symmetric, which is what allows a proof to be
replayed as combine(accumulator, sibling) without knowing whether the
accumulator was the left or the right child. A leaf next to an unfilled
slot hashes as digest(leaf + 0), i.e. the placeholder does not change the
operand. This is not a true identity: a real item that hashes to 0 is
indistinguishable from an empty slot, and anyone can fill the tree with
garbage to exhaust its capacity. Neither is defended against here.

Security Notes:
- 64-bit digests are not collision resistant; swap in a wider backend
  when the tree is used for anything adversarial
"""
from __future__ import annotations

import hashlib
import string
from abc import ABC, abstractmethod
from typing import Union

from fixmerkle.schemas.errors import ConfigurationException


HashValue = int
Data = Union[bytes, str]

DEFAULT_WIDTH_BITS = 64
PLACEHOLDER_HASH: HashValue = 0


class HashBackend(ABC):
    """
    Base class for hash backends.

    Subclasses only supply the raw digest; leaf hashing and the
    combine rule are shared.
    """

    name: str = "abstract"
    width_bits: int = DEFAULT_WIDTH_BITS
    placeholder: HashValue = PLACEHOLDER_HASH

    @property
    def width_bytes(self) -> int:
        return self.width_bits // 8

    @property
    def mask(self) -> int:
        return (1 << self.width_bits) - 1

    @abstractmethod
    def digest(self, data: bytes) -> HashValue:
        """Hash raw bytes to an unsigned int of width_bits bits."""

    def hash_data(self, data: Data) -> HashValue:
        """
        Hash a data item for storage in a leaf slot.

        Strings are UTF-8 encoded first, so "abc" and b"abc" hash equally.

        Raises:
            TypeError: If data is neither bytes nor str
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        elif not isinstance(data, bytes):
            raise TypeError(
                f"Data must be bytes or str, got {type(data).__name__}"
            )
        return self.digest(data)

    def combine(self, left: HashValue, right: HashValue) -> HashValue:
        """Compute the parent hash of two child hashes."""
        total = (left + right) & self.mask
        return self.digest(total.to_bytes(self.width_bytes, "big"))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(width_bits={self.width_bits})"


class Sha256Backend(HashBackend):
    """SHA-256 truncated to its leading 64 bits."""

    name = "sha256"

    def digest(self, data: bytes) -> HashValue:
        return int.from_bytes(hashlib.sha256(data).digest()[: self.width_bytes], "big")


class Blake2bBackend(HashBackend):
    """BLAKE2b with a native 8-byte digest."""

    name = "blake2b"

    def digest(self, data: bytes) -> HashValue:
        return int.from_bytes(
            hashlib.blake2b(data, digest_size=self.width_bytes).digest(), "big"
        )


_BACKENDS: dict[str, type[HashBackend]] = {
    Sha256Backend.name: Sha256Backend,
    Blake2bBackend.name: Blake2bBackend,
}

DEFAULT_BACKEND_NAME = Sha256Backend.name


def available_backends() -> list[str]:
    """Names accepted by get_backend(), sorted."""
    return sorted(_BACKENDS)


def get_backend(name: str = DEFAULT_BACKEND_NAME) -> HashBackend:
    """
    Instantiate a built-in backend by name.

    Raises:
        ConfigurationException: If no backend has that name
    """
    try:
        backend_cls = _BACKENDS[name.lower()]
    except (KeyError, AttributeError):
        raise ConfigurationException(
            message=f"Unknown hash backend: {name!r}",
            field_path="backend",
            details={"available": available_backends()},
        ) from None
    return backend_cls()


def default_backend() -> HashBackend:
    return get_backend(DEFAULT_BACKEND_NAME)


def to_hex(value: HashValue, width_bits: int = DEFAULT_WIDTH_BITS) -> str:
    """
    Format a hash value as a zero-padded hex string with 0x prefix.

    Example:
        >>> to_hex(255)
        '0x00000000000000ff'
    """
    if value < 0 or value >> width_bits:
        raise ValueError(f"Hash value does not fit in {width_bits} bits: {value}")
    return f"0x{value:0{width_bits // 4}x}"


def from_hex(hex_string: str) -> HashValue:
    """
    Parse a 0x-prefixed hex string into a hash value.

    Raises:
        ValueError: If the prefix is missing or the digits are invalid
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]
    if not hex_content:
        raise ValueError("Hex string has no digits after 0x prefix")

    invalid = set(hex_content) - set(string.hexdigits)
    if invalid:
        raise ValueError(
            f"Invalid hex characters in string: {''.join(sorted(invalid))!r}"
        )
    return int(hex_content, 16)


__all__ = [
    "HashValue",
    "Data",
    "DEFAULT_WIDTH_BITS",
    "PLACEHOLDER_HASH",
    "HashBackend",
    "Sha256Backend",
    "Blake2bBackend",
    "DEFAULT_BACKEND_NAME",
    "available_backends",
    "get_backend",
    "default_backend",
    "to_hex",
    "from_hex",
]
