"""
Module 09D - FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.deps import load_runtime_config
from api.errors import (
    APIError,
    api_error_handler,
    distributor_error_handler,
    generic_error_handler,
    validation_error_handler,
)
from api.routes import campaigns, health, verify
from core.config.runtime import RuntimeConfig
from core.schemas.errors import DistributorException


logger = logging.getLogger(__name__)


def setup_logging(config: RuntimeConfig) -> None:
    """Configure logging from AIRDROP_LOG_LEVEL / airdrop.json log_level."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def create_app(config: Optional[RuntimeConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or load_runtime_config()
    setup_logging(config)

    app = FastAPI(
        title="Airdrop Distributor API",
        description="""
HTTP API for a Merkle-proof token airdrop distributor.

## Endpoints

- **POST /campaigns** - Initialize a campaign with its committed Merkle root
- **POST /campaigns/{id}/fund** - Deposit tokens (authority only)
- **POST /campaigns/{id}/claim** - Claim an entitlement, exactly once
- **GET /campaigns/{id}/claims/{recipient}** - Claim status
- **GET /campaigns/{id}/receipts** - Deposit and claim receipts
- **POST /verify** - Stateless proof check
- **GET /health** - Health check

## Caller identity

Mutating campaign endpoints read the caller from the `X-Caller-Identity`
header (a 0x-prefixed 32-byte address).
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(DistributorException, distributor_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(campaigns.router)
    app.include_router(verify.router)

    app.state.config = config
    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app.state.config.api.host, port=app.state.config.api.port)
