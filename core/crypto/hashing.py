"""
Module 02 - Hashing Utilities
Hash primitive for entitlement leaves, Merkle nodes and derived ledger keys.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Keccak-256 hashing for raw bytes (the distributor's only hash function)
- Canonical hashing for objects (via dumps_canonical)
- Sorted-pair hashing for Merkle parents
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Keccak-256 is the original pre-standard Keccak, NOT hashlib.sha3_256
- Always hash raw bytes exactly as specified
- All operations are deterministic
"""
from __future__ import annotations

from typing import Any

from eth_utils import keccak

from core.schemas.canonical import dumps_canonical


# Digest width in bytes for every leaf, node and root
DIGEST_SIZE: int = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def hash_bytes(data: bytes) -> bytes:
    """Alias for keccak256()."""
    return keccak256(data)


def hashv(*parts: bytes) -> bytes:
    """
    Hash the concatenation of several byte strings.

    Args:
        *parts: Byte strings, concatenated in the given order

    Returns:
        32-byte Keccak-256 digest of the concatenation
    """
    return keccak256(b"".join(parts))


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: digest = keccak256(dumps_canonical(obj).encode("utf-8"))

    Args:
        obj: Any object that can be canonically serialized
             (Pydantic model, dict, list, primitives)

    Returns:
        32-byte digest of the canonical JSON

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return keccak256(canonical_json.encode("utf-8"))


def hash_sorted_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two digests in canonical (sorted) order.

    parent = keccak256(min(a, b) + max(a, b))

    Sorting removes left/right position from proofs: a verifier only
    needs the sibling, never which side it was on.

    Args:
        a: First child digest
        b: Second child digest

    Returns:
        32-byte parent digest
    """
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def digest_from_hex(hex_string: str) -> bytes:
    """
    Decode a 0x-prefixed 32-byte digest.

    Raises:
        ValueError: If the string is not valid hex or not 32 bytes long
    """
    data = from_hex(hex_string)
    if len(data) != DIGEST_SIZE:
        raise ValueError(
            f"Digest must be {DIGEST_SIZE} bytes, got {len(data)}"
        )
    return data


__all__ = [
    "DIGEST_SIZE",
    "keccak256",
    "hash_bytes",
    "hashv",
    "hash_canonical",
    "hash_sorted_pair",
    "to_hex",
    "from_hex",
    "digest_from_hex",
]
