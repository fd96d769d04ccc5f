"""
Module 02 - Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Tests:
1. Root determinism - same leaves -> same root across runs
2. Promotion rule - odd node count promotes the lone last node unchanged
3. Proof verification - generate proof for each index, verify passes
4. Tamper detection - tampered sibling/leaf/root fails verification
5. Empty leaves - rejected
6. Single leaf - root equals leaf, empty proof
"""
import pytest

from core.crypto.hashing import keccak256
from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_levels,
    build_merkle_proof,
    build_merkle_root,
    compute_root_from_proof,
    compute_tree_depth,
    leaf_hash,
    merkle_parent,
    verify_merkle_proof,
)
from core.schemas.entitlement import encode_amount
from core.schemas.errors import InvalidAddressException, InvalidAmountException


def _leaves(n: int) -> list[bytes]:
    return [keccak256(f"leaf {i}".encode()) for i in range(n)]


class TestLeafHash:
    """Tests for the entitlement leaf encoding."""

    def test_leaf_is_keccak_of_recipient_and_le_amount(self):
        recipient = b"\x07" * 32
        expected = keccak256(recipient + (100).to_bytes(8, "little"))
        assert leaf_hash(recipient, 100) == expected

    def test_hex_recipient_accepted(self):
        recipient = b"\x07" * 32
        assert leaf_hash("0x" + recipient.hex(), 5) == leaf_hash(recipient, 5)

    def test_amount_is_little_endian(self):
        assert encode_amount(1) == b"\x01" + b"\x00" * 7

    def test_max_u64_amount(self):
        assert len(leaf_hash(b"\x01" * 32, 2**64 - 1)) == 32

    def test_amount_out_of_range(self):
        with pytest.raises(InvalidAmountException):
            leaf_hash(b"\x01" * 32, 2**64)
        with pytest.raises(InvalidAmountException):
            leaf_hash(b"\x01" * 32, -1)

    def test_bad_address(self):
        with pytest.raises(InvalidAddressException):
            leaf_hash(b"\x01" * 31, 1)

    def test_amount_changes_leaf(self):
        assert leaf_hash(b"\x01" * 32, 100) != leaf_hash(b"\x01" * 32, 101)


class TestEmptyTree:
    """Tests for empty tree behavior."""

    def test_build_root_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            build_merkle_root([])

    def test_build_proof_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            build_merkle_proof([], 0)


class TestSingleLeaf:
    """Tests for single leaf tree behavior."""

    def test_single_leaf_root_equals_leaf(self):
        leaf = keccak256(b"single leaf")
        assert build_merkle_root([leaf]) == leaf

    def test_single_leaf_proof_no_siblings(self):
        leaf = keccak256(b"only one")
        proof = build_merkle_proof([leaf], 0)

        assert proof.leaf == leaf
        assert proof.siblings == ()
        assert proof.root == leaf
        assert proof.depth == 0

    def test_single_leaf_proof_verifies(self):
        proof = build_merkle_proof([keccak256(b"single")], 0)
        assert verify_merkle_proof(proof)


class TestTreeShape:
    """Tests for sorted-pair parents and the promotion rule."""

    def test_two_leaves(self):
        a, b = _leaves(2)
        assert build_merkle_root([a, b]) == merkle_parent(a, b)
        assert build_merkle_root([b, a]) == build_merkle_root([a, b])

    def test_three_leaves_promotes_last(self):
        a, b, c = _leaves(3)
        levels = build_merkle_levels([a, b, c])

        assert levels[1] == [merkle_parent(a, b), c]
        assert levels[2] == [merkle_parent(merkle_parent(a, b), c)]

    def test_three_leaves_no_duplication(self):
        """The lone node is not paired with a copy of itself."""
        a, b, c = _leaves(3)
        duplicated = merkle_parent(merkle_parent(a, b), merkle_parent(c, c))
        assert build_merkle_root([a, b, c]) != duplicated

    def test_promoted_leaf_proof_is_shorter(self):
        a, b, c = _leaves(3)
        proof_c = build_merkle_proof([a, b, c], 2)
        proof_a = build_merkle_proof([a, b, c], 0)

        assert proof_c.siblings == (merkle_parent(a, b),)
        assert proof_a.siblings == (b, c)

    def test_five_leaves_promotion_twice(self):
        leaves = _leaves(5)
        levels = build_merkle_levels(leaves)

        assert [len(level) for level in levels] == [5, 3, 2, 1]
        assert levels[1][2] == leaves[4]
        assert levels[2][1] == leaves[4]
        assert build_merkle_proof(leaves, 4).siblings == (levels[2][0],)


class TestRootDeterminism:
    """Tests for deterministic root computation."""

    def test_same_leaves_same_root(self):
        leaves = _leaves(7)
        assert build_merkle_root(leaves) == build_merkle_root(list(leaves))

    def test_leaf_order_matters_beyond_pairs(self):
        a, b, c, d = _leaves(4)
        assert build_merkle_root([a, b, c, d]) != build_merkle_root([a, c, b, d])


class TestProofVerification:
    """Every index of various tree sizes produces a verifying proof."""

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 7, 8, 9, 16, 33])
    def test_every_index_verifies(self, n):
        leaves = _leaves(n)
        root = build_merkle_root(leaves)
        for i in range(n):
            proof = build_merkle_proof(leaves, i)
            assert proof.root == root
            assert verify_merkle_proof(proof), f"index {i} of {n}"
            assert compute_root_from_proof(leaves[i], proof.siblings) == root

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            build_merkle_proof(_leaves(3), 3)
        with pytest.raises(IndexError):
            build_merkle_proof(_leaves(3), -1)


class TestTamperDetection:
    """Tampered proofs do not verify."""

    def _proof(self) -> MerkleProof:
        return build_merkle_proof(_leaves(8), 3)

    def test_tampered_leaf(self):
        proof = self._proof()
        tampered = MerkleProof(leaf=keccak256(b"evil"), siblings=proof.siblings, root=proof.root)
        assert not verify_merkle_proof(tampered)

    def test_tampered_sibling(self):
        proof = self._proof()
        siblings = (keccak256(b"evil"),) + proof.siblings[1:]
        assert not verify_merkle_proof(MerkleProof(proof.leaf, siblings, proof.root))

    def test_dropped_sibling(self):
        proof = self._proof()
        assert not verify_merkle_proof(MerkleProof(proof.leaf, proof.siblings[:-1], proof.root))

    def test_tampered_root(self):
        proof = self._proof()
        assert not verify_merkle_proof(MerkleProof(proof.leaf, proof.siblings, keccak256(b"x")))

    def test_wrong_digest_size_is_false(self):
        proof = self._proof()
        siblings = (proof.siblings[0][:31],) + proof.siblings[1:]
        assert verify_merkle_proof(MerkleProof(proof.leaf, siblings, proof.root)) is False


class TestTreeDepth:
    """Tests for compute_tree_depth()."""

    @pytest.mark.parametrize(
        "n,depth",
        [(1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4), (1000, 10)],
    )
    def test_depth(self, n, depth):
        assert compute_tree_depth(n) == depth
        assert len(build_merkle_levels(_leaves(n))) - 1 == depth

    def test_zero_leaves(self):
        with pytest.raises(ValueError):
            compute_tree_depth(0)
