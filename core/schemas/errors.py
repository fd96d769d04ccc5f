"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the airdrop distributor.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every distributor operation is all-or-nothing: an exception from this
module means no state was mutated.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the distributor."""

    # Serialization
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Campaign setup
    EMPTY_ENTITLEMENTS = "EMPTY_ENTITLEMENTS"
    DUPLICATE_RECIPIENT = "DUPLICATE_RECIPIENT"
    INVALID_ADDRESS = "INVALID_ADDRESS"

    # Distributor state machine
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    UNINITIALIZED = "UNINITIALIZED"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_AMOUNT = "INVALID_AMOUNT"

    # Claims
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    INVALID_PROOF = "INVALID_PROOF"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"

    # Custody collaborator
    TRANSFER_FAILED = "TRANSFER_FAILED"

    # Persistence
    STATE_CORRUPTED = "STATE_CORRUPTED"
    STATE_LOCKED = "STATE_LOCKED"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class DistributorError(BaseModel):
    """
    Base error model for structured error communication.

    Used for returning failures across the CLI and API boundaries
    without exceptions.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_PROOF],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the caller may retry the operation",
    )

    def to_exception(self) -> "DistributorException":
        """Convert this error model to a raised exception."""
        return DistributorException(
            message=self.message,
            code=self.code,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class DistributorException(Exception):
    """
    Base exception for all distributor errors.

    Carries structured error information and can be converted
    to/from DistributorError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "DISTRIBUTOR_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> DistributorError:
        """Convert this exception to a DistributorError model."""
        return DistributorError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(DistributorException):
    """Raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class EmptyEntitlementsException(DistributorException):
    """Raised when a campaign is built from an empty entitlement list."""

    def __init__(self, message: str = "Entitlement list must not be empty") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_ENTITLEMENTS)


class DuplicateRecipientException(DistributorException):
    """Raised when the same recipient appears twice in an entitlement list."""

    def __init__(self, recipient: str, details: dict[str, Any] | None = None) -> None:
        full_details = details or {}
        full_details["recipient"] = recipient
        super().__init__(
            message=f"Duplicate recipient in entitlement list: {recipient}",
            code=ErrorCodes.DUPLICATE_RECIPIENT,
            details=full_details,
        )


class InvalidAddressException(DistributorException):
    """Raised when an address or identity is not a 32-byte key."""

    def __init__(self, message: str, value: str | None = None) -> None:
        details = {"value": value} if value is not None else {}
        super().__init__(message=message, code=ErrorCodes.INVALID_ADDRESS, details=details)


class AlreadyInitializedException(DistributorException):
    """Raised when initialize is called twice for the same campaign."""

    def __init__(self, campaign_id: str) -> None:
        super().__init__(
            message=f"Distributor already initialized for campaign {campaign_id}",
            code=ErrorCodes.ALREADY_INITIALIZED,
            details={"campaign_id": campaign_id},
        )


class UninitializedException(DistributorException):
    """Raised when an operation runs before initialize."""

    def __init__(self, campaign_id: str | None = None) -> None:
        details = {"campaign_id": campaign_id} if campaign_id else {}
        target = f" for campaign {campaign_id}" if campaign_id else ""
        super().__init__(
            message=f"Distributor is not initialized{target}",
            code=ErrorCodes.UNINITIALIZED,
            details=details,
        )


class UnauthorizedException(DistributorException):
    """Raised when the caller identity does not match the required one."""

    def __init__(self, message: str = "Unauthorized access", details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=ErrorCodes.UNAUTHORIZED, details=details)


class InvalidAmountException(DistributorException):
    """Raised for zero or out-of-range (u64) amounts."""

    def __init__(self, message: str, amount: int | None = None) -> None:
        details = {"amount": amount} if amount is not None else {}
        super().__init__(message=message, code=ErrorCodes.INVALID_AMOUNT, details=details)


class AlreadyClaimedException(DistributorException):
    """Raised when a recipient's entitlement has already been paid out."""

    def __init__(self, recipient: str) -> None:
        super().__init__(
            message="Tokens have already been claimed",
            code=ErrorCodes.ALREADY_CLAIMED,
            details={"recipient": recipient},
        )


class InvalidProofException(DistributorException):
    """Raised when a proof does not bind (recipient, amount) to the committed root."""

    def __init__(self, recipient: str, amount: int) -> None:
        super().__init__(
            message="Invalid merkle proof",
            code=ErrorCodes.INVALID_PROOF,
            details={"recipient": recipient, "amount": amount},
            retryable=True,
        )


class InsufficientFundsException(DistributorException):
    """Raised when custody cannot cover a valid claim."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            message="Insufficient balance in vault",
            code=ErrorCodes.INSUFFICIENT_FUNDS,
            details={"requested": requested, "available": available},
            retryable=True,
        )


class TransferFailedException(DistributorException):
    """Raised by a custody collaborator when a token transfer fails."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.TRANSFER_FAILED,
            details=details,
            retryable=True,
        )


class StateCorruptedException(DistributorException):
    """Raised when persisted distributor state fails validation on load."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=ErrorCodes.STATE_CORRUPTED, details=details)



class StateLockedException(DistributorException):
    """Raised when another session holds the state directory lock."""

    def __init__(self, path: str, timeout: float) -> None:
        super().__init__(
            message=f"State directory is locked by another session: {path}",
            code=ErrorCodes.STATE_LOCKED,
            details={"path": path, "timeout": timeout},
            retryable=True,
        )
