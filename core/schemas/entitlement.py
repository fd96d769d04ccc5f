"""
Module 01 - Schemas & Canonicalization
File: entitlement.py

Purpose: Address/identity encoding and the immutable Entitlement record.

An Address (and a caller Identity) is a 32-byte public key. Its textual
form is 0x-prefixed lowercase hex. Amounts are unsigned 64-bit integers.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .errors import InvalidAddressException, InvalidAmountException


ADDRESS_SIZE: int = 32
AMOUNT_SIZE: int = 8
MAX_U64: int = 2**64 - 1


def parse_address(value: Any) -> bytes:
    """
    Normalize an address or identity to 32 raw bytes.

    Accepts raw bytes or a 0x-prefixed hex string.

    Raises:
        InvalidAddressException: If the value is not a 32-byte key
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        text = value.strip().lower()
        if not text.startswith("0x"):
            raise InvalidAddressException(
                "Address must be 0x-prefixed hex", value=value
            )
        try:
            raw = bytes.fromhex(text[2:])
        except ValueError:
            raise InvalidAddressException("Address is not valid hex", value=value) from None
    else:
        raise InvalidAddressException(
            f"Unsupported address type: {type(value).__name__}"
        )

    if len(raw) != ADDRESS_SIZE:
        raise InvalidAddressException(
            f"Address must be {ADDRESS_SIZE} bytes, got {len(raw)}",
            value=value if isinstance(value, str) else raw.hex(),
        )
    return raw


def format_address(address: bytes) -> str:
    """Render a 32-byte address as 0x-prefixed lowercase hex."""
    return "0x" + address.hex()


def validate_amount(amount: Any, *, allow_zero: bool = True) -> int:
    """
    Check an amount fits the unsigned 64-bit range.

    Raises:
        InvalidAmountException: For non-integers, negatives, zero (unless
            allowed) or values above 2**64 - 1
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountException(
            f"Amount must be an integer, got {type(amount).__name__}"
        )
    if amount < 0 or amount > MAX_U64:
        raise InvalidAmountException(
            f"Amount {amount} is outside the u64 range", amount=amount
        )
    if amount == 0 and not allow_zero:
        raise InvalidAmountException("Amount must be greater than zero", amount=0)
    return amount


def encode_amount(amount: int) -> bytes:
    """Fixed-width little-endian u64 encoding used inside leaves."""
    return validate_amount(amount).to_bytes(AMOUNT_SIZE, "little")


class Entitlement(BaseModel):
    """
    A fixed (recipient, amount) right to claim.

    The full set is defined once at campaign setup and never mutated.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    recipient: bytes = Field(
        ...,
        description="32-byte recipient address (0x-hex on the wire)",
    )
    amount: int = Field(
        ...,
        ge=0,
        le=MAX_U64,
        description="Entitled token amount in base units (u64)",
    )

    @field_validator("recipient", mode="before")
    @classmethod
    def _parse_recipient(cls, v: Any) -> bytes:
        return parse_address(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _check_amount(cls, v: Any) -> Any:
        if isinstance(v, int):
            return validate_amount(v)
        return v

    @field_serializer("recipient")
    def _serialize_recipient(self, v: bytes) -> str:
        return format_address(v)

    @property
    def recipient_hex(self) -> str:
        return format_address(self.recipient)

    def encode(self) -> bytes:
        """Leaf preimage: recipient(32) || amount(8, little-endian)."""
        return self.recipient + encode_amount(self.amount)
