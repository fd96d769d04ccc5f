"""
Core Receipts Module

Receipts for every committed deposit and claim. They play the role of
the TokensDeposited / TokensClaimed events of an on-chain distributor.
"""

from .models import (
    ReceiptKind,
    ReceiptRef,
    TransferReceipt,
)
from .recorder import ReceiptRecorder, generate_receipt_id

__all__ = [
    "ReceiptKind",
    "ReceiptRef",
    "TransferReceipt",
    "ReceiptRecorder",
    "generate_receipt_id",
]
