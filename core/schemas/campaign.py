"""
Module 01 - Schemas & Canonicalization
File: campaign.py

Purpose: Campaign setup artifact (manifest), claim ledger records and the
persisted distributor snapshot.

Raw byte fields (addresses, digests) are held as bytes in Python and
rendered as 0x-prefixed hex in JSON.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer

from .entitlement import MAX_U64, format_address, parse_address


MANIFEST_VERSION = "1"
DIGEST_SIZE = 32
CAMPAIGN_ID_SIZE = 8


def _to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def _parse_digest(value: Any) -> bytes:
    if isinstance(value, str):
        if not value.startswith("0x"):
            raise ValueError("Digest must be 0x-prefixed hex")
        value = bytes.fromhex(value[2:])
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError(f"Unsupported digest type: {type(value).__name__}")
    if len(value) != DIGEST_SIZE:
        raise ValueError(f"Digest must be {DIGEST_SIZE} bytes, got {len(value)}")
    return bytes(value)


def parse_campaign_id(value: Any) -> bytes:
    """
    Normalize a campaign seed to 8 raw bytes.

    Accepts raw bytes, 0x-hex, or a short text label (UTF-8, at most
    8 bytes, zero-padded on the right).

    Raises:
        ValueError: If the seed does not fit in 8 bytes
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str) and value.startswith("0x"):
        raw = bytes.fromhex(value[2:])
    elif isinstance(value, str):
        raw = value.encode("utf-8").ljust(CAMPAIGN_ID_SIZE, b"\x00")
    else:
        raise ValueError(f"Unsupported campaign id type: {type(value).__name__}")

    if len(raw) != CAMPAIGN_ID_SIZE:
        raise ValueError(
            f"Campaign id must be {CAMPAIGN_ID_SIZE} bytes, got {len(raw)}"
        )
    return raw


Digest = Annotated[
    bytes,
    BeforeValidator(_parse_digest),
    PlainSerializer(_to_hex, return_type=str, when_used="json"),
]

Address = Annotated[
    bytes,
    BeforeValidator(parse_address),
    PlainSerializer(format_address, return_type=str, when_used="json"),
]

CampaignSeed = Annotated[
    bytes,
    BeforeValidator(parse_campaign_id),
    PlainSerializer(_to_hex, return_type=str, when_used="json"),
]


class ManifestClaim(BaseModel):
    """One recipient's entry in the campaign manifest."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: int = Field(..., ge=0, le=MAX_U64)
    proof: list[Digest] = Field(
        default_factory=list,
        description="Sibling digests from leaf to root",
    )


class CampaignManifest(BaseModel):
    """
    Setup artifact handed to the proof distribution channel.

    The distributor only ever receives merkle_root; the claims map is
    what each recipient gets out-of-band.
    """

    model_config = ConfigDict(extra="forbid")

    version: str = Field(default=MANIFEST_VERSION)
    merkle_root: Digest = Field(..., description="Committed 32-byte root")
    token_total: int = Field(..., ge=0, description="Sum of all entitled amounts")
    entitlement_count: int = Field(..., ge=1)
    depth: int = Field(..., ge=0)
    claims: dict[str, ManifestClaim] = Field(
        ...,
        description="0x-hex recipient address -> amount and proof",
    )

    def claim_for(self, recipient: bytes | str) -> ManifestClaim:
        """
        Manifest entry for a recipient.

        Raises:
            KeyError: If the recipient is not in the campaign
        """
        return self.claims[format_address(parse_address(recipient))]


class ClaimRecord(BaseModel):
    """
    Durable claim ledger entry.

    Written once when a claim commits; never mutated afterwards.
    Unclaimed recipients have no record.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    ledger_key: Digest = Field(..., description="keccak256('claim_status' || distributor_key || recipient)")
    recipient: Address
    claimed: bool = Field(default=True)
    claimed_amount: int = Field(..., ge=0, le=MAX_U64)
    claimed_at: int = Field(..., ge=0, description="Logical clock value at commit")


class DistributorSnapshot(BaseModel):
    """Persisted distributor account state."""

    model_config = ConfigDict(extra="forbid")

    campaign_id: CampaignSeed
    committed_root: Digest
    authority: Address
    custody_balance: int = Field(..., ge=0, le=MAX_U64)
    total_funded: int = Field(default=0, ge=0)
    total_claimed: int = Field(default=0, ge=0)
    clock: int = Field(default=0, ge=0)
