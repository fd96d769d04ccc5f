"""
Module 02 - Entitlement Tree Builder and Proof Verifier

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides the two campaign-level entry points:
- build_entitlement_tree: offline builder, run once per campaign. Turns
  the entitlement list into a root plus one proof per recipient.
- verify_entitlement: pure verifier used by the distributor at claim time.

The verifier needs nothing but (recipient, amount), the sibling list and
the committed root, which is what lets any proof holder self-serve a
claim without a central lookup.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_levels,
    compute_root_from_proof,
    entitlement_leaf,
    leaf_hash,
    proof_from_levels,
)
from core.crypto.hashing import DIGEST_SIZE
from core.schemas.entitlement import Entitlement, format_address, parse_address
from core.schemas.errors import (
    DistributorException,
    DuplicateRecipientException,
    EmptyEntitlementsException,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntitlementTree:
    """
    Result of building a campaign tree.

    Attributes:
        root: The 32-byte Merkle root committed at initialize
        entitlements: Entitlements in leaf order
        proofs: Recipient address -> MerkleProof
    """
    root: bytes
    entitlements: tuple[Entitlement, ...]
    proofs: dict[bytes, MerkleProof] = field(repr=False)
    depth: int = 0

    @property
    def token_total(self) -> int:
        return sum(e.amount for e in self.entitlements)

    def proof_for(self, recipient: bytes | str) -> MerkleProof:
        """
        Proof for a recipient.

        Raises:
            KeyError: If the recipient has no entitlement
        """
        return self.proofs[parse_address(recipient)]

    def amount_for(self, recipient: bytes | str) -> int:
        """
        Entitled amount for a recipient.

        Raises:
            KeyError: If the recipient has no entitlement
        """
        address = parse_address(recipient)
        for entitlement in self.entitlements:
            if entitlement.recipient == address:
                return entitlement.amount
        raise KeyError(format_address(address))


def _coerce_entitlement(item: Any) -> Entitlement:
    if isinstance(item, Entitlement):
        return item
    if isinstance(item, dict):
        return Entitlement(**item)
    recipient, amount = item
    return Entitlement(recipient=recipient, amount=amount)


def build_entitlement_tree(entitlements: Iterable[Any]) -> EntitlementTree:
    """
    Build the campaign Merkle tree.

    Args:
        entitlements: Entitlement objects, {"recipient", "amount"} dicts,
            or (recipient, amount) tuples, in leaf order

    Returns:
        EntitlementTree with root and per-recipient proofs

    Raises:
        EmptyEntitlementsException: If the list is empty
        DuplicateRecipientException: If a recipient appears twice
        InvalidAddressException / InvalidAmountException: For bad entries
    """
    items = tuple(_coerce_entitlement(e) for e in entitlements)
    if not items:
        raise EmptyEntitlementsException()

    seen: set[bytes] = set()
    for item in items:
        if item.recipient in seen:
            raise DuplicateRecipientException(item.recipient_hex)
        seen.add(item.recipient)

    levels = build_merkle_levels([entitlement_leaf(e) for e in items])
    proofs = {
        item.recipient: proof_from_levels(levels, index)
        for index, item in enumerate(items)
    }
    root = levels[-1][0]

    logger.info(
        f"Built entitlement tree: {len(items)} leaves, depth {len(levels) - 1}, "
        f"root 0x{root.hex()}"
    )
    return EntitlementTree(
        root=root,
        entitlements=items,
        proofs=proofs,
        depth=len(levels) - 1,
    )


def verify_entitlement(
    recipient: bytes | str,
    amount: int,
    proof: Sequence[bytes],
    root: bytes,
) -> bool:
    """
    Check that (recipient, amount) is committed under root.

    Recomputes the leaf with the builder's encoding, folds the proof
    left-to-right with sorted-pair hashing and compares to root. Runs in
    time linear in the proof length.

    Returns:
        True iff the folded digest equals root. Malformed input
        (bad address, out-of-range amount, wrong digest sizes) is False.
    """
    if len(root) != DIGEST_SIZE or any(len(s) != DIGEST_SIZE for s in proof):
        return False
    try:
        leaf = leaf_hash(recipient, amount)
    except DistributorException:
        return False
    return compute_root_from_proof(leaf, proof) == root


class MerkleVerifier:
    """
    Class-based wrapper around the verifier.

    Example:
        >>> tree = build_entitlement_tree([(a, 100), (b, 200)])
        >>> MerkleVerifier(tree.root).verify(a, 100, tree.proof_for(a).siblings)
        True
    """

    def __init__(self, root: bytes) -> None:
        self.root = root

    def verify(self, recipient: bytes | str, amount: int, proof: Sequence[bytes]) -> bool:
        return verify_entitlement(recipient, amount, proof, self.root)

    def verify_proof(self, proof: MerkleProof) -> bool:
        return proof.root == self.root and compute_root_from_proof(proof.leaf, proof.siblings) == self.root


__all__ = [
    "EntitlementTree",
    "build_entitlement_tree",
    "verify_entitlement",
    "MerkleVerifier",
]
