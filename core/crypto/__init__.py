"""
Core cryptographic utilities.

Module 02 provides the Keccak-256 hash primitive and hex helpers used by
the Merkle builder, the verifier and the claim ledger.
"""
from .hashing import (
    DIGEST_SIZE,
    keccak256,
    hash_bytes,
    hashv,
    hash_canonical,
    hash_sorted_pair,
    to_hex,
    from_hex,
    digest_from_hex,
)

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
