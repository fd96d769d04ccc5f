"""
Module 04 - In-Memory Custody

Token custody backed by a dict of account balances. Used by the CLI state
directory, the HTTP API and tests. Supports failure injection so callers
can exercise rollback paths.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from core.schemas.entitlement import validate_amount
from core.schemas.errors import TransferFailedException

from .base import CustodyProvider


logger = logging.getLogger(__name__)

# (direction, source, destination, amount) -> True to make the transfer fail
FailurePredicate = Callable[[str, bytes, bytes, int], bool]


class InMemoryCustody(CustodyProvider):
    """
    Dict-backed token ledger.

    Example:
        >>> custody = InMemoryCustody()
        >>> custody.mint(authority, 1_000)
        >>> custody.transfer_in(authority, vault, 500)
        >>> custody.balance_of(vault)
        500
    """

    provider_id = "memory"

    def __init__(self, balances: Optional[dict[bytes, int]] = None) -> None:
        self._balances: dict[bytes, int] = dict(balances or {})
        self._lock = threading.Lock()
        self._fail_when: Optional[FailurePredicate] = None

    def mint(self, account: bytes, amount: int) -> None:
        """Credit an account out of thin air (test and CLI setup helper)."""
        validate_amount(amount)
        with self._lock:
            self._balances[account] = self._balances.get(account, 0) + amount

    def balance_of(self, account: bytes) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    def fail_when(self, predicate: Optional[FailurePredicate]) -> None:
        """Install (or clear with None) a predicate that forces transfers to fail."""
        self._fail_when = predicate

    def transfer_in(self, source: bytes, vault: bytes, amount: int) -> None:
        self._move("in", source, vault, amount)

    def transfer_out(self, vault: bytes, destination: bytes, amount: int) -> None:
        self._move("out", vault, destination, amount)

    def _move(self, direction: str, source: bytes, destination: bytes, amount: int) -> None:
        details = {
            "direction": direction,
            "source": "0x" + source.hex(),
            "destination": "0x" + destination.hex(),
            "amount": amount,
        }
        if self._fail_when is not None and self._fail_when(direction, source, destination, amount):
            logger.warning(f"Injected transfer failure: {details}")
            raise TransferFailedException("Transfer rejected by custody", details=details)

        with self._lock:
            available = self._balances.get(source, 0)
            if available < amount:
                raise TransferFailedException(
                    f"Source balance {available} is below transfer amount {amount}",
                    details=details,
                )
            self._balances[source] = available - amount
            self._balances[destination] = self._balances.get(destination, 0) + amount

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable balances (hex account -> amount)."""
        with self._lock:
            return {
                "provider": self.provider_id,
                "balances": {"0x" + k.hex(): v for k, v in sorted(self._balances.items())},
            }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryCustody":
        balances = {
            bytes.fromhex(k[2:]): int(v)
            for k, v in data.get("balances", {}).items()
        }
        return cls(balances)
