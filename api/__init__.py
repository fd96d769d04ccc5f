"""
Module 09D - Minimal API (FastAPI)

HTTP API for the airdrop distributor:
- POST /campaigns - Initialize a campaign with a Merkle root
- GET /campaigns/{id} - Campaign state
- POST /campaigns/{id}/fund - Deposit tokens (authority only)
- POST /campaigns/{id}/claim - Claim an entitlement with a proof
- GET /campaigns/{id}/claims/{recipient} - Claim status
- GET /campaigns/{id}/receipts - Deposit and claim receipts
- POST /verify - Stateless proof check
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
