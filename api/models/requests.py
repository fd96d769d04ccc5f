"""
Module 09D - API Request Models

Pydantic models for API request validation.

Addresses, digests and proofs travel as 0x-prefixed hex strings and are
decoded by the route handlers, so that a malformed value surfaces as the
matching distributor error rather than a generic validation failure.
Amounts are range-checked by the distributor itself for the same reason.
"""

from pydantic import BaseModel, Field


class InitializeCampaignRequest(BaseModel):
    """Request body for POST /campaigns."""

    campaign_id: str = Field(
        ...,
        min_length=1,
        description="Campaign seed: up to 8 UTF-8 bytes, or 0x + 16 hex digits",
    )
    merkle_root: str = Field(..., description="32-byte Merkle root (0x-hex)")
    authority: str = Field(..., description="Address allowed to fund the campaign (0x-hex)")


class FundRequest(BaseModel):
    """Request body for POST /campaigns/{id}/fund."""

    amount: int = Field(..., description="Tokens to move from the caller into custody")
    mint_to_caller: bool = Field(
        default=False,
        description="Credit the caller's custody account with the amount first (in-memory custody only)",
    )


class ClaimRequest(BaseModel):
    """Request body for POST /campaigns/{id}/claim."""

    recipient: str | None = Field(
        default=None,
        description="Recipient address (0x-hex); defaults to the caller identity",
    )
    amount: int = Field(..., description="Entitled amount bound in the Merkle root")
    proof: list[str] = Field(
        default_factory=list,
        description="Sibling digests from leaf to root (0x-hex)",
    )


class VerifyRequest(BaseModel):
    """Request body for POST /verify."""

    recipient: str = Field(..., description="Recipient address (0x-hex)")
    amount: int = Field(..., description="Claimed amount")
    proof: list[str] = Field(default_factory=list, description="Sibling digests (0x-hex)")
    merkle_root: str = Field(..., description="Root to verify against (0x-hex)")
