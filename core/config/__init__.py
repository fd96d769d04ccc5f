"""
Runtime Configuration Module

Provides configuration loading and management for the airdrop distributor.
"""

from .runtime import (
    ApiConfig,
    RuntimeConfig,
    StorageConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ApiConfig",
    "RuntimeConfig",
    "StorageConfig",
    "get_default_config",
    "set_default_config",
]
