"""
Module 09D - API Error Handling

Standardized error handling for the API.

Distributor exceptions raised by route handlers are mapped to HTTP status
codes here, so routes never build error responses themselves.
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas.errors import DistributorException, ErrorCodes


STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.UNAUTHORIZED: 403,
    ErrorCodes.UNINITIALIZED: 404,
    ErrorCodes.ALREADY_INITIALIZED: 409,
    ErrorCodes.ALREADY_CLAIMED: 409,
    ErrorCodes.INVALID_PROOF: 422,
    ErrorCodes.INVALID_AMOUNT: 422,
    ErrorCodes.INSUFFICIENT_FUNDS: 402,
    ErrorCodes.TRANSFER_FAILED: 502,
    ErrorCodes.INVALID_ADDRESS: 400,
    ErrorCodes.EMPTY_ENTITLEMENTS: 400,
    ErrorCodes.DUPLICATE_RECIPIENT: 400,
    ErrorCodes.STATE_LOCKED: 503,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=400,
            details=details,
        )


def status_for(exc: DistributorException) -> int:
    return STATUS_BY_CODE.get(exc.code, 500)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def distributor_error_handler(request: Request, exc: DistributorException) -> JSONResponse:
    """Handle distributor exceptions raised by route handlers."""
    return JSONResponse(
        status_code=status_for(exc),
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                retryable=exc.retryable,
            ),
        ).model_dump(),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request bodies with the standard error shape."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INVALID_REQUEST",
                message="Request validation failed",
                details={"errors": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                    for e in exc.errors()
                ]},
            ),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
