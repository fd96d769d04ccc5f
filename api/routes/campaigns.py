"""
Module 09D - Campaign Routes

Initialize, fund and claim against campaign distributors.

Handlers are plain functions so FastAPI runs them on its worker thread
pool; concurrent claims are serialized by the distributor, not here.
Distributor exceptions propagate to the handlers in api.errors.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_caller, get_registry
from api.errors import InvalidRequestError
from api.models.requests import ClaimRequest, FundRequest, InitializeCampaignRequest
from api.models.responses import (
    CampaignResponse,
    ClaimRecordResponse,
    ClaimResponse,
    ClaimStatusResponse,
    FundResponse,
    ReceiptResponse,
    ReceiptsResponse,
)
from core.crypto.hashing import digest_from_hex, to_hex
from core.custody.memory import InMemoryCustody
from core.distributor import Distributor, DistributorRegistry
from core.receipts import TransferReceipt
from core.schemas.campaign import ClaimRecord, parse_campaign_id
from core.schemas.entitlement import format_address, parse_address


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


def _seed(campaign_id: str) -> bytes:
    try:
        return parse_campaign_id(campaign_id)
    except ValueError as e:
        raise InvalidRequestError(str(e), details={"campaign_id": campaign_id}) from e


def _digest(value: str, field: str) -> bytes:
    try:
        return digest_from_hex(value)
    except ValueError as e:
        raise InvalidRequestError(f"Invalid {field}: {e}", details={field: value}) from e


def campaign_response(distributor: Distributor) -> CampaignResponse:
    snapshot = distributor.snapshot()
    return CampaignResponse(
        campaign_id=to_hex(snapshot.campaign_id),
        state=distributor.state.value,
        committed_root=to_hex(snapshot.committed_root),
        authority=format_address(snapshot.authority),
        vault=format_address(distributor.vault),
        custody_balance=snapshot.custody_balance,
        total_funded=snapshot.total_funded,
        total_claimed=snapshot.total_claimed,
        claim_count=len(distributor.ledger),
    )


def record_response(record: ClaimRecord) -> ClaimRecordResponse:
    return ClaimRecordResponse(**record.model_dump(mode="json"))


def receipt_response(receipt: TransferReceipt) -> ReceiptResponse:
    return ReceiptResponse(
        receipt_id=receipt.receipt_id,
        kind=receipt.kind,
        account=receipt.account,
        amount=receipt.amount,
        clock=receipt.clock,
        request_hash=receipt.request_hash,
    )


@router.post("", response_model=CampaignResponse, status_code=201)
def initialize_campaign(
    request: InitializeCampaignRequest,
    registry: DistributorRegistry = Depends(get_registry),
) -> CampaignResponse:
    """Commit a Merkle root for a new campaign."""
    distributor = registry.initialize(
        _seed(request.campaign_id),
        _digest(request.merkle_root, "merkle_root"),
        parse_address(request.authority),
    )
    return campaign_response(distributor)


@router.get("/{campaign_id}", response_model=CampaignResponse)
def get_campaign(
    campaign_id: str,
    registry: DistributorRegistry = Depends(get_registry),
) -> CampaignResponse:
    return campaign_response(registry.get(_seed(campaign_id)))


@router.post("/{campaign_id}/fund", response_model=FundResponse)
def fund_campaign(
    campaign_id: str,
    request: FundRequest,
    caller: bytes = Depends(get_caller),
    registry: DistributorRegistry = Depends(get_registry),
) -> FundResponse:
    """Deposit tokens from the authority into custody."""
    distributor = registry.get(_seed(campaign_id))
    if request.mint_to_caller:
        if not isinstance(registry.custody, InMemoryCustody):
            raise InvalidRequestError("mint_to_caller requires in-memory custody")
        # Mint only for a deposit that fund() would accept
        distributor.validate_fund(request.amount, caller)
        registry.custody.mint(caller, request.amount)
    receipt = distributor.fund(request.amount, caller=caller)
    return FundResponse(
        ok=True,
        campaign=campaign_response(distributor),
        receipt=receipt_response(receipt),
    )


@router.post("/{campaign_id}/claim", response_model=ClaimResponse)
def claim(
    campaign_id: str,
    request: ClaimRequest,
    caller: bytes = Depends(get_caller),
    registry: DistributorRegistry = Depends(get_registry),
) -> ClaimResponse:
    """Claim the caller's entitlement with a Merkle proof."""
    distributor = registry.get(_seed(campaign_id))
    recipient = parse_address(request.recipient) if request.recipient else caller
    proof = [_digest(s, "proof") for s in request.proof]
    record = distributor.claim(recipient, request.amount, proof, caller=caller)
    return ClaimResponse(
        ok=True,
        record=record_response(record),
        custody_balance=distributor.custody_balance,
    )


@router.get("/{campaign_id}/claims/{recipient}", response_model=ClaimStatusResponse)
def claim_status(
    campaign_id: str,
    recipient: str,
    registry: DistributorRegistry = Depends(get_registry),
) -> ClaimStatusResponse:
    address = parse_address(recipient)
    record = registry.get(_seed(campaign_id)).claim_status(address)
    return ClaimStatusResponse(
        recipient=format_address(address),
        claimed=record is not None,
        record=record_response(record) if record is not None else None,
    )


@router.get("/{campaign_id}/receipts", response_model=ReceiptsResponse)
def list_receipts(
    campaign_id: str,
    registry: DistributorRegistry = Depends(get_registry),
) -> ReceiptsResponse:
    seed = _seed(campaign_id)
    distributor = registry.get(seed)
    return ReceiptsResponse(
        campaign_id=to_hex(seed),
        receipts=[receipt_response(r) for r in distributor.receipts()],
    )
