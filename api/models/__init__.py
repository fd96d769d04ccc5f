"""API request and response models."""

from api.models.requests import (
    ClaimRequest,
    FundRequest,
    InitializeCampaignRequest,
    VerifyRequest,
)
from api.models.responses import (
    CampaignResponse,
    ClaimRecordResponse,
    ClaimResponse,
    ClaimStatusResponse,
    ErrorDetail,
    ErrorResponse,
    FundResponse,
    HealthResponse,
    ReceiptResponse,
    ReceiptsResponse,
    VerifyResponse,
)

__all__ = [
    "ClaimRequest",
    "FundRequest",
    "InitializeCampaignRequest",
    "VerifyRequest",
    "CampaignResponse",
    "ClaimRecordResponse",
    "ClaimResponse",
    "ClaimStatusResponse",
    "ErrorDetail",
    "ErrorResponse",
    "FundResponse",
    "HealthResponse",
    "ReceiptResponse",
    "ReceiptsResponse",
    "VerifyResponse",
]
