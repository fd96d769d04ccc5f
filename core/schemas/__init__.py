"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    format_datetime_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    AlreadyClaimedException,
    AlreadyInitializedException,
    CanonicalizationException,
    DistributorError,
    DistributorException,
    DuplicateRecipientException,
    EmptyEntitlementsException,
    ErrorCodes,
    InsufficientFundsException,
    InvalidAddressException,
    InvalidAmountException,
    InvalidProofException,
    StateCorruptedException,
    StateLockedException,
    TransferFailedException,
    UnauthorizedException,
    UninitializedException,
)

# Entitlements
from .entitlement import (
    ADDRESS_SIZE,
    MAX_U64,
    Entitlement,
    encode_amount,
    format_address,
    parse_address,
    validate_amount,
)

# Campaign artifacts and persisted state
from .campaign import (
    CAMPAIGN_ID_SIZE,
    MANIFEST_VERSION,
    CampaignManifest,
    ClaimRecord,
    DistributorSnapshot,
    ManifestClaim,
    parse_campaign_id,
)


__all__ = [
    # Canonical serialization
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "format_datetime_canonical",
    "loads_canonical",
    # Errors
    "AlreadyClaimedException",
    "AlreadyInitializedException",
    "CanonicalizationException",
    "DistributorError",
    "DistributorException",
    "DuplicateRecipientException",
    "EmptyEntitlementsException",
    "ErrorCodes",
    "InsufficientFundsException",
    "InvalidAddressException",
    "InvalidAmountException",
    "InvalidProofException",
    "StateCorruptedException",
    "StateLockedException",
    "TransferFailedException",
    "UnauthorizedException",
    "UninitializedException",
    # Entitlements
    "ADDRESS_SIZE",
    "MAX_U64",
    "Entitlement",
    "encode_amount",
    "format_address",
    "parse_address",
    "validate_amount",
    # Campaign
    "CAMPAIGN_ID_SIZE",
    "MANIFEST_VERSION",
    "CampaignManifest",
    "ClaimRecord",
    "DistributorSnapshot",
    "ManifestClaim",
    "parse_campaign_id",
]
