"""
Runtime Configuration

Central configuration for the distributor state directory, the HTTP API and
logging.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


ENV_PREFIX = "AIRDROP_"
DEFAULT_STATE_DIR = ".airdrop"
DEFAULT_LOCK_TIMEOUT = 10.0


@dataclass
class StorageConfig:
    """Where distributor state and custody balances are persisted."""
    state_dir: str = DEFAULT_STATE_DIR
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT  # seconds to wait for the state directory lock

    @property
    def path(self) -> Path:
        return Path(self.state_dir).expanduser()


@dataclass
class ApiConfig:
    """Configuration for the HTTP service."""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for the airdrop distributor.

    Can be loaded from:
    - Environment variables
    - JSON or YAML file
    - Programmatic construction
    """
    storage: StorageConfig = field(default_factory=StorageConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - AIRDROP_STATE_DIR: Distributor state directory
        - AIRDROP_LOCK_TIMEOUT: Seconds to wait for the state directory lock
        - AIRDROP_LOG_LEVEL: Logging level name
        - AIRDROP_LOG_FILE: Optional log file path
        - AIRDROP_DEBUG: Enable debug mode (true/false)
        - AIRDROP_API_HOST: API bind host
        - AIRDROP_API_PORT: API bind port
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}STATE_DIR"):
            overrides.setdefault("storage", {})["state_dir"] = os.getenv(f"{ENV_PREFIX}STATE_DIR")
        if os.getenv(f"{ENV_PREFIX}LOCK_TIMEOUT"):
            overrides.setdefault("storage", {})["lock_timeout"] = float(os.getenv(f"{ENV_PREFIX}LOCK_TIMEOUT"))

        if os.getenv(f"{ENV_PREFIX}API_HOST"):
            overrides.setdefault("api", {})["host"] = os.getenv(f"{ENV_PREFIX}API_HOST")
        if os.getenv(f"{ENV_PREFIX}API_PORT"):
            overrides.setdefault("api", {})["port"] = int(os.getenv(f"{ENV_PREFIX}API_PORT"))

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL").upper()
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")
        if os.getenv(f"{ENV_PREFIX}DEBUG"):
            overrides["debug"] = os.getenv(f"{ENV_PREFIX}DEBUG", "false").lower() == "true"

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON or YAML file (chosen by suffix)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            if path.suffix in (".yaml", ".yml"):
                import yaml
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        storage_data = data.get("storage", {})
        api_data = data.get("api", {})

        storage = StorageConfig(**storage_data) if storage_data else StorageConfig()
        api = ApiConfig(**api_data) if api_data else ApiConfig()

        return cls(
            storage=storage,
            api=api,
            log_level=str(data.get("log_level", "INFO")).upper(),
            log_file=data.get("log_file"),
            debug=bool(data.get("debug", False)),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        for key, value in overrides.get("storage", {}).items():
            setattr(new_config.storage, key, value)
        for key, value in overrides.get("api", {}).items():
            setattr(new_config.api, key, value)
        for key in ("log_level", "log_file", "debug"):
            if key in overrides:
                setattr(new_config, key, overrides[key])

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "storage": {
                "state_dir": self.storage.state_dir,
                "lock_timeout": self.storage.lock_timeout,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "cors_origins": list(self.api.cors_origins),
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
            "debug": self.debug,
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Set (or reset with None) the default runtime configuration."""
    global _default_config
    _default_config = config
