"""
Shared helpers for CLI commands: exit codes, output and error reporting.
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from core.config import RuntimeConfig
from core.distributor import DistributorStore
from core.schemas.errors import DistributorException, ErrorCodes


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_REJECTED = 2

# Errors that mean "the distributor said no" rather than "something broke"
REJECTION_CODES = frozenset({
    ErrorCodes.ALREADY_INITIALIZED,
    ErrorCodes.UNINITIALIZED,
    ErrorCodes.UNAUTHORIZED,
    ErrorCodes.INVALID_AMOUNT,
    ErrorCodes.ALREADY_CLAIMED,
    ErrorCodes.INVALID_PROOF,
    ErrorCodes.INSUFFICIENT_FUNDS,
})


def emit(data: dict[str, Any], as_json: bool) -> None:
    """Print a result as indented JSON or as `key: value` lines."""
    if as_json:
        print(json.dumps(data, indent=2))
        return
    for key, value in data.items():
        if isinstance(value, bool):
            value = str(value).lower()
        elif isinstance(value, (list, dict)):
            value = json.dumps(value)
        print(f"{key}: {value}")


def report_error(e: DistributorException, as_json: bool) -> int:
    """Print a distributor error and map it to an exit code."""
    if as_json:
        print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
    else:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
    return EXIT_REJECTED if e.code in REJECTION_CODES else EXIT_RUNTIME_ERROR


def get_store(args: Namespace) -> DistributorStore:
    """State store from --state-dir, falling back to the loaded config."""
    config: RuntimeConfig = getattr(args, "cli_config", None) or RuntimeConfig()
    state_dir = getattr(args, "state_dir", None)
    if state_dir is None:
        state_dir = config.storage.path
    return DistributorStore(Path(state_dir), lock_timeout=config.storage.lock_timeout)
