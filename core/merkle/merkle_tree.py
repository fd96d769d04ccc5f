"""
Module 02 - Merkle Tree Implementation
Deterministic Merkle tree construction, proof generation, and verification.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Entitlement leaf hashing
- Deterministic Merkle root computation with sorted-pair parents
- Merkle proof generation for any leaf index
- Merkle proof verification (linear fold over siblings)

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = keccak256(recipient(32) || amount_le(8))
2. Parent hashing: parent = keccak256(min(a, b) || max(a, b))
3. Promotion rule: a lone last node at any level moves up unchanged
   (no sibling is recorded for that level)
4. Empty leaves: rejected with ValueError
5. Single leaf: root = leaf, proof = []

Determinism Notes:
- No randomness or non-deterministic ordering
- Leaf ordering is the entitlement list order; this module never sorts leaves
- These rules match merkletreejs with sortPairs=true, so roots built by
  existing JavaScript campaign tooling verify here unchanged
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.crypto.hashing import DIGEST_SIZE, hash_sorted_pair, keccak256
from core.schemas.entitlement import Entitlement, encode_amount, parse_address


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf.

    Attributes:
        leaf: The leaf hash being proven (32 bytes)
        siblings: Sibling hashes from bottom to top of tree
        root: The Merkle root this proof is against
    """
    leaf: bytes
    siblings: tuple[bytes, ...]
    root: bytes

    @property
    def depth(self) -> int:
        return len(self.siblings)


def leaf_hash(recipient: bytes | str, amount: int) -> bytes:
    """
    Compute the leaf digest for a (recipient, amount) pair.

    Args:
        recipient: 32-byte address or its 0x-hex form
        amount: u64 amount

    Returns:
        32-byte leaf digest

    Raises:
        InvalidAddressException: If recipient is not a 32-byte key
        InvalidAmountException: If amount is outside the u64 range
    """
    return keccak256(parse_address(recipient) + encode_amount(amount))


def entitlement_leaf(entitlement: Entitlement) -> bytes:
    """Leaf digest of an Entitlement."""
    return keccak256(entitlement.encode())


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Children are sorted before hashing, so merkle_parent(a, b)
    == merkle_parent(b, a).
    """
    return hash_sorted_pair(left, right)


def build_merkle_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first, root last.

    Example: [a, b, c] -> [[a, b, c], [parent(a,b), c], [parent(parent(a,b), c)]]

    Raises:
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot build a Merkle tree from an empty leaf list")

    levels: list[list[bytes]] = [list(leaves)]
    current_level = levels[0]

    while len(current_level) > 1:
        next_level: list[bytes] = []
        for i in range(0, len(current_level), 2):
            if i + 1 < len(current_level):
                next_level.append(merkle_parent(current_level[i], current_level[i + 1]))
            else:
                # Promote the lone node unchanged
                next_level.append(current_level[i])
        levels.append(next_level)
        current_level = next_level

    return levels


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Raises:
        ValueError: If leaves is empty
    """
    return build_merkle_levels(leaves)[-1][0]


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Args:
        leaves: Sequence of leaf hashes
        index: 0-based index of the leaf to prove

    Returns:
        MerkleProof with leaf, siblings (bottom-up), and root

    Raises:
        IndexError: If index is out of range
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot generate proof for empty leaf list")

    if index < 0 or index >= len(leaves):
        raise IndexError(
            f"Leaf index {index} out of range for {len(leaves)} leaves"
        )

    levels = build_merkle_levels(leaves)
    return proof_from_levels(levels, index)


def proof_from_levels(levels: list[list[bytes]], index: int) -> MerkleProof:
    """
    Extract the proof for leaf `index` from prebuilt levels.

    Lets a builder produce proofs for every leaf without rebuilding
    the tree each time.
    """
    siblings: list[bytes] = []
    current_index = index

    for level in levels[:-1]:
        sibling_index = current_index ^ 1
        if sibling_index < len(level):
            siblings.append(level[sibling_index])
        current_index //= 2

    return MerkleProof(
        leaf=levels[0][index],
        siblings=tuple(siblings),
        root=levels[-1][0],
    )


def compute_root_from_proof(leaf: bytes, siblings: Sequence[bytes]) -> bytes:
    """Fold siblings into the leaf left-to-right with sorted-pair hashing."""
    current_hash = leaf
    for sibling in siblings:
        current_hash = merkle_parent(current_hash, sibling)
    return current_hash


def verify_merkle_proof(proof: MerkleProof) -> bool:
    """
    Verify a Merkle proof.

    Returns False (never raises) for malformed digests.
    """
    if len(proof.leaf) != DIGEST_SIZE or len(proof.root) != DIGEST_SIZE:
        return False
    if any(len(s) != DIGEST_SIZE for s in proof.siblings):
        return False
    return compute_root_from_proof(proof.leaf, proof.siblings) == proof.root


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of hashing levels above the leaves.

    A single leaf has depth 0, two leaves depth 1, three or four depth 2.
    """
    if num_leaves <= 0:
        raise ValueError("Tree must contain at least one leaf")

    depth = 0
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


__all__ = [
    "MerkleProof",
    "leaf_hash",
    "entitlement_leaf",
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "proof_from_levels",
    "compute_root_from_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
