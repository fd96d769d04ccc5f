"""
Module 09D - Health Check Route

Simple health check endpoint for liveness probes.
"""

from fastapi import APIRouter, Depends

from api.deps import get_registry
from api.models.responses import HealthResponse
from core.distributor import DistributorRegistry


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(registry: DistributorRegistry = Depends(get_registry)) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status for liveness probes.
    """
    return HealthResponse(
        ok=True,
        service="airdrop-distributor-api",
        version="v1",
        campaigns=len(registry),
    )


@router.get("/", response_model=HealthResponse)
async def root(registry: DistributorRegistry = Depends(get_registry)) -> HealthResponse:
    """
    Root endpoint - same as health check.
    """
    return await health_check(registry)
