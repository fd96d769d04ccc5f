"""
Module 03 - Claim Ledger

Per-recipient "already claimed" markers for one campaign.

Entries are created lazily: a recipient has a record only once a claim
for them commits, so storage grows with claims, not with the size of the
entitlement list. Each entry is guarded by its own lock; claims for
different recipients never wait on each other here.

The check ("is there a record?") and the set ("write the record") happen
inside one critical section held for the whole claim, so two concurrent
claims for the same recipient cannot both pass the check.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from core.schemas.campaign import ClaimRecord
from core.schemas.entitlement import format_address
from core.schemas.errors import AlreadyClaimedException

from .keys import derive_ledger_key


logger = logging.getLogger(__name__)


class ClaimSlot:
    """
    Exclusive handle on one recipient's ledger entry.

    Only valid inside ClaimLedger.claim_slot(). Calling commit() writes the
    record; leaving the block without commit() leaves the entry untouched.
    """

    def __init__(self, ledger: "ClaimLedger", ledger_key: bytes, recipient: bytes) -> None:
        self._ledger = ledger
        self.ledger_key = ledger_key
        self.recipient = recipient
        self.record: Optional[ClaimRecord] = None

    def commit(self, amount: int, claimed_at: int) -> ClaimRecord:
        if self.record is not None:
            raise RuntimeError("Claim slot already committed")
        record = ClaimRecord(
            ledger_key=self.ledger_key,
            recipient=self.recipient,
            claimed=True,
            claimed_amount=amount,
            claimed_at=claimed_at,
        )
        self._ledger._write(record)
        self.record = record
        return record


class ClaimLedger:
    """Claim ledger keyed by derive_ledger_key(distributor_key, recipient)."""

    def __init__(self, distributor_key: bytes, records: Iterable[ClaimRecord] = ()) -> None:
        self.distributor_key = distributor_key
        self._records: dict[bytes, ClaimRecord] = {}
        self._records_guard = threading.Lock()
        self._entry_locks: dict[bytes, threading.Lock] = {}
        self._entry_locks_guard = threading.Lock()

        for record in records:
            expected = self.key_for(record.recipient)
            if record.ledger_key != expected:
                raise ValueError(
                    f"Ledger key mismatch for {format_address(record.recipient)}"
                )
            self._records[record.ledger_key] = record

    def key_for(self, recipient: bytes) -> bytes:
        return derive_ledger_key(self.distributor_key, recipient)

    def get(self, recipient: bytes) -> Optional[ClaimRecord]:
        """Committed record for a recipient, or None if unclaimed."""
        key = self.key_for(recipient)
        with self._records_guard:
            return self._records.get(key)

    def is_claimed(self, recipient: bytes) -> bool:
        return self.get(recipient) is not None

    def records(self) -> list[ClaimRecord]:
        """All committed records ordered by claimed_at."""
        with self._records_guard:
            records = list(self._records.values())
        return sorted(records, key=lambda r: r.claimed_at)

    def total_claimed(self) -> int:
        return sum(r.claimed_amount for r in self.records())

    def __len__(self) -> int:
        with self._records_guard:
            return len(self._records)

    def _entry_lock(self, key: bytes) -> threading.Lock:
        with self._entry_locks_guard:
            lock = self._entry_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._entry_locks[key] = lock
            return lock

    def _write(self, record: ClaimRecord) -> None:
        with self._records_guard:
            if record.ledger_key in self._records:
                raise AlreadyClaimedException(format_address(record.recipient))
            self._records[record.ledger_key] = record

    @contextmanager
    def claim_slot(self, recipient: bytes) -> Iterator[ClaimSlot]:
        """
        Hold the recipient's entry exclusively for the duration of a claim.

        Raises:
            AlreadyClaimedException: If the entry is already committed
        """
        key = self.key_for(recipient)
        with self._entry_lock(key):
            with self._records_guard:
                already = key in self._records
            if already:
                raise AlreadyClaimedException(format_address(recipient))
            yield ClaimSlot(self, key, recipient)
