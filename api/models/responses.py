"""
Module 09D - API Response Models

Pydantic models for API response serialization. Byte values (addresses,
digests, campaign ids) are rendered as 0x-prefixed hex strings.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "airdrop-distributor-api"
    version: str = "v1"
    campaigns: int = Field(default=0, description="Number of initialized campaigns")


class CampaignResponse(BaseModel):
    """Distributor account state for one campaign."""

    campaign_id: str = Field(..., description="8-byte campaign seed (0x-hex)")
    state: str = Field(..., description="uninitialized or active")
    committed_root: str = Field(..., description="Committed Merkle root")
    authority: str = Field(..., description="Address allowed to fund")
    vault: str = Field(..., description="Custody account holding the pooled balance")
    custody_balance: int
    total_funded: int
    total_claimed: int
    claim_count: int


class ReceiptResponse(BaseModel):
    """One committed custody movement."""

    receipt_id: str
    kind: str = Field(..., description="deposit or claim")
    account: str
    amount: int
    clock: int
    request_hash: str


class FundResponse(BaseModel):
    """Response for POST /campaigns/{id}/fund."""

    ok: bool = True
    campaign: CampaignResponse
    receipt: ReceiptResponse


class ClaimRecordResponse(BaseModel):
    """A committed claim ledger entry."""

    ledger_key: str
    recipient: str
    claimed: bool = True
    claimed_amount: int
    claimed_at: int


class ClaimResponse(BaseModel):
    """Response for POST /campaigns/{id}/claim."""

    ok: bool = True
    record: ClaimRecordResponse
    custody_balance: int


class ClaimStatusResponse(BaseModel):
    """Response for GET /campaigns/{id}/claims/{recipient}."""

    recipient: str
    claimed: bool
    record: ClaimRecordResponse | None = None


class ReceiptsResponse(BaseModel):
    """Response for GET /campaigns/{id}/receipts."""

    campaign_id: str
    receipts: list[ReceiptResponse] = Field(default_factory=list)


class VerifyResponse(BaseModel):
    """Response for POST /verify endpoint."""

    ok: bool = Field(..., description="Whether (recipient, amount) is committed under the root")
    recipient: str
    amount: int
    merkle_root: str
    proof_length: int


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = Field(default=False, description="Whether retrying may succeed")


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
