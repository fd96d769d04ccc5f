"""
Module 03 - Derived Keys

Deterministic addresses for a campaign's distributor account and for each
recipient's claim ledger entry, derived the way program-derived addresses
are: hash of a fixed tag plus the seeds.
"""

from core.crypto.hashing import hashv


DISTRIBUTOR_TAG = b"distributor"
CLAIM_STATUS_TAG = b"claim_status"


def derive_distributor_key(campaign_id: bytes) -> bytes:
    """keccak256("distributor" || campaign_id). Also the custody vault address."""
    return hashv(DISTRIBUTOR_TAG, campaign_id)


def derive_ledger_key(distributor_key: bytes, recipient: bytes) -> bytes:
    """keccak256("claim_status" || distributor_key || recipient)."""
    return hashv(CLAIM_STATUS_TAG, distributor_key, recipient)
