"""
Module 02 - Merkle Tree and Commitments
Entitlement tree construction + proof generation/verification.

Owner: Protocol/Crypto Engineer
Module ID: M02

Canonical Commitment Rules:
1. Leaf hashing: keccak256(recipient(32) || amount_le(8))
2. Parent hashing: keccak256(sorted(left, right))
3. Promotion: lone last node moves up unchanged
4. Single leaf: root = leaf, empty proof

Usage:
    from core.merkle import build_entitlement_tree, verify_entitlement

    tree = build_entitlement_tree([(alice, 100), (bob, 200), (carol, 300)])
    proof = tree.proof_for(alice)

    assert verify_entitlement(alice, 100, proof.siblings, tree.root)
"""
from .merkle_tree import (
    MerkleProof,
    leaf_hash,
    entitlement_leaf,
    merkle_parent,
    build_merkle_levels,
    build_merkle_root,
    build_merkle_proof,
    compute_root_from_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    EntitlementTree,
    MerkleVerifier,
    build_entitlement_tree,
    verify_entitlement,
)


__all__ = [
    # Core types
    "MerkleProof",
    "EntitlementTree",
    # Core functions
    "leaf_hash",
    "entitlement_leaf",
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "compute_root_from_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Campaign level
    "build_entitlement_tree",
    "verify_entitlement",
    "MerkleVerifier",
]
