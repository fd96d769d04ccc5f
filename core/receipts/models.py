"""
Receipt Models

Schemas for recording committed custody movements. A receipt is the
counterpart of the TokensDeposited / TokensClaimed events: one per
successful fund or claim, written only after the state change commits.

Key Design Principles:
1. request_hash enables deterministic verification of what was authorized
2. Wall-clock time lives in non-committed metadata (recorded_at)
3. The logical clock orders receipts within a campaign
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


ReceiptKind = Literal["deposit", "claim"]


class ReceiptRef(BaseModel):
    """Lightweight reference to a receipt."""

    model_config = ConfigDict(extra="forbid")

    receipt_id: str = Field(..., description="Unique receipt identifier")
    kind: ReceiptKind = Field(..., description="Type of custody movement")
    request_hash: str = Field(..., description="Hash of the request (0x-prefixed)")


class TransferReceipt(BaseModel):
    """
    Receipt for a committed custody movement.

    For a deposit, account is the funder (the authority); for a claim it
    is the recipient.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    receipt_id: str = Field(..., description="Unique identifier for this receipt")
    kind: ReceiptKind = Field(..., description="Type of custody movement")
    campaign_id: str = Field(..., description="Campaign seed (0x-prefixed)")
    account: str = Field(..., description="Funder or recipient address (0x-prefixed)")
    amount: int = Field(..., ge=0, description="Tokens moved")
    clock: int = Field(..., ge=0, description="Logical clock value at commit")
    request: dict[str, Any] = Field(default_factory=dict, description="Authorized request")
    request_hash: str = Field(..., description="Hash of canonical request (0x-prefixed)")
    recorded_at: Optional[datetime] = Field(
        default=None,
        description="Wall-clock time (non-committed)",
    )

    def to_ref(self) -> ReceiptRef:
        """Convert to a lightweight reference."""
        return ReceiptRef(
            receipt_id=self.receipt_id,
            kind=self.kind,
            request_hash=self.request_hash,
        )
