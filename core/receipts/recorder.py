"""
Receipt Recorder

Append-only, thread-safe log of custody movements for one distributor.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any

from core.crypto.hashing import hash_canonical, to_hex

from .models import ReceiptKind, ReceiptRef, TransferReceipt


def generate_receipt_id(kind: ReceiptKind, request_hash: str) -> str:
    """
    Generate a deterministic receipt ID from kind and request hash.

    Format: rc_{kind}_{hash_prefix}
    """
    return f"rc_{kind}_{request_hash[2:14]}"


class ReceiptRecorder:
    """
    Records receipts for committed deposits and claims.

    Usage:
        recorder = ReceiptRecorder()
        recorder.record("claim", campaign_id=..., account=..., amount=100, clock=3)
        receipts = recorder.get_receipts()
    """

    def __init__(self) -> None:
        self._receipts: list[TransferReceipt] = []
        self._lock = threading.Lock()

    def record(
        self,
        kind: ReceiptKind,
        *,
        campaign_id: str,
        account: str,
        amount: int,
        clock: int,
    ) -> TransferReceipt:
        """Record one committed movement and return its receipt."""
        request: dict[str, Any] = {
            "kind": kind,
            "campaign_id": campaign_id,
            "account": account,
            "amount": amount,
            "clock": clock,
        }
        request_hash = to_hex(hash_canonical(request))
        receipt = TransferReceipt(
            receipt_id=generate_receipt_id(kind, request_hash),
            kind=kind,
            campaign_id=campaign_id,
            account=account,
            amount=amount,
            clock=clock,
            request=request,
            request_hash=request_hash,
            recorded_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._receipts.append(receipt)
        return receipt

    def get_receipts(self, kind: ReceiptKind | None = None) -> list[TransferReceipt]:
        """Get completed receipts, optionally filtered by kind."""
        with self._lock:
            receipts = list(self._receipts)
        if kind is not None:
            receipts = [r for r in receipts if r.kind == kind]
        return receipts

    def get_receipt_refs(self) -> list[ReceiptRef]:
        """Get lightweight references to all receipts."""
        return [r.to_ref() for r in self.get_receipts()]

    def load(self, receipts: list[TransferReceipt]) -> None:
        """Replace the log with previously persisted receipts."""
        with self._lock:
            self._receipts = list(receipts)

    def to_dict_list(self) -> list[dict[str, Any]]:
        """Convert all receipts to JSON-serializable dicts."""
        return [r.model_dump(mode="json", exclude_none=True) for r in self.get_receipts()]
