"""
Module 09D - API Dependencies

Dependency injection for the API.
Provides the runtime config, the process-wide distributor registry and the
caller identity taken from the request headers.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from fastapi import Header

from core.config.runtime import RuntimeConfig
from core.distributor import DistributorRegistry
from core.schemas.entitlement import parse_address
from core.schemas.errors import UnauthorizedException

logger = logging.getLogger(__name__)


CALLER_HEADER = "X-Caller-Identity"

_registry: Optional[DistributorRegistry] = None
_registry_lock = threading.Lock()


def load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./airdrop.json
      2. ./.airdrop.json
      3. ~/.config/airdrop/config.json

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    search_paths = [
        Path.cwd() / "airdrop.json",
        Path.cwd() / ".airdrop.json",
        Path.home() / ".config" / "airdrop" / "config.json",
    ]

    config: RuntimeConfig | None = None

    for path in search_paths:
        if path.exists():
            config = RuntimeConfig.from_file(path)
            logger.info(f"Loaded config from {path}")
            break

    if config is None:
        # No config file found, start with defaults
        config = RuntimeConfig()

    # Always apply environment variable overrides
    return config.with_env_overrides()


def get_registry() -> DistributorRegistry:
    """Process-wide registry of campaign distributors (in-memory custody)."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = DistributorRegistry()
        return _registry


def set_registry(registry: DistributorRegistry | None) -> None:
    """Replace (or reset with None) the process-wide registry."""
    global _registry
    with _registry_lock:
        _registry = registry


def get_caller(
    x_caller_identity: str | None = Header(default=None, alias=CALLER_HEADER),
) -> bytes:
    """
    Authenticated caller identity.

    Authentication itself happens upstream; this service only compares the
    identity it is handed.

    Raises:
        UnauthorizedException: If the header is missing
        InvalidAddressException: If the header is not a 32-byte key
    """
    if not x_caller_identity:
        raise UnauthorizedException(f"Missing {CALLER_HEADER} header")
    return parse_address(x_caller_identity)
