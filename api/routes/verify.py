"""
Module 09D - Verify Route

Stateless proof check: is (recipient, amount) committed under a root?
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from api.errors import InvalidRequestError
from api.models.requests import VerifyRequest
from api.models.responses import VerifyResponse
from core.crypto.hashing import digest_from_hex
from core.merkle import verify_entitlement
from core.schemas.entitlement import format_address, parse_address


logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


@router.post("/verify", response_model=VerifyResponse)
def verify_proof(request: VerifyRequest) -> VerifyResponse:
    """
    Verify an entitlement proof against a Merkle root.

    Returns ok=false (HTTP 200) for a proof that does not verify; only
    malformed hex is a request error.
    """
    recipient = parse_address(request.recipient)
    try:
        root = digest_from_hex(request.merkle_root)
        proof = [digest_from_hex(s) for s in request.proof]
    except ValueError as e:
        raise InvalidRequestError(f"Invalid digest: {e}") from e

    ok = verify_entitlement(recipient, request.amount, proof, root)
    logger.debug(f"Verify {format_address(recipient)} amount={request.amount}: {ok}")
    return VerifyResponse(
        ok=ok,
        recipient=format_address(recipient),
        amount=request.amount,
        merkle_root=request.merkle_root.lower(),
        proof_length=len(proof),
    )
