"""
Distributor Store

Directory-backed persistence for distributors and custody balances.

Layout:
    <state_dir>/
        .lock
        commit.json            (only while a commit is being applied)
        custody.json
        campaigns/<campaign_id_hex>/
            distributor.json
            receipts.json
            claims/<ledger_key_hex>.json

Every file is canonical JSON written atomically (temp file + os.replace).
Claim files are write-once: an existing claim file is never rewritten.

A session that changes state holds the directory lock from load to
commit. A commit first writes everything it will change to commit.json,
then applies it file by file, then removes it. A commit.json found on the
next locked session is applied again before anything is loaded.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from filelock import FileLock, Timeout
from pydantic import ValidationError

from core.custody.memory import InMemoryCustody
from core.receipts import TransferReceipt
from core.schemas.campaign import ClaimRecord, DistributorSnapshot, parse_campaign_id
from core.schemas.canonical import dumps_canonical
from core.schemas.errors import (
    InvalidAddressException,
    StateCorruptedException,
    StateLockedException,
    UninitializedException,
)

from .distributor import Distributor
from .registry import DistributorRegistry


logger = logging.getLogger(__name__)


LOCK_FILE = ".lock"
JOURNAL_FILE = "commit.json"
CUSTODY_FILE = "custody.json"
CAMPAIGNS_DIR = "campaigns"
DISTRIBUTOR_FILE = "distributor.json"
RECEIPTS_FILE = "receipts.json"
CLAIMS_DIR = "claims"

DEFAULT_LOCK_TIMEOUT = 10.0


def _write_json_atomic(path: Path, data: Any) -> None:
    """Write canonical JSON to path via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = dumps_canonical(data).encode("utf-8")
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StateCorruptedException(
            f"Invalid JSON in {path.name}", details={"path": str(path), "error": str(e)}
        ) from e


class DistributorStore:
    """
    Saves and restores distributors under a state directory.

    Usage:
        store = DistributorStore("./.airdrop")
        with store.locked():
            custody = store.load_custody()
            distributor = store.load(b"campaign", custody)
            distributor.claim(...)
            store.commit(distributor, custody)
    """

    def __init__(self, root_dir: Union[str, Path], lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.root_dir = Path(root_dir)
        self.lock_timeout = lock_timeout
        self._lock = FileLock(str(self.root_dir / LOCK_FILE))

    def campaign_dir(self, campaign_id: Union[bytes, str]) -> Path:
        return self.root_dir / CAMPAIGNS_DIR / parse_campaign_id(campaign_id).hex()

    def exists(self, campaign_id: Union[bytes, str]) -> bool:
        return (self.campaign_dir(campaign_id) / DISTRIBUTOR_FILE).exists()

    def list_campaigns(self) -> list[bytes]:
        base = self.root_dir / CAMPAIGNS_DIR
        if not base.is_dir():
            return []
        return sorted(
            bytes.fromhex(p.name)
            for p in base.iterdir()
            if (p / DISTRIBUTOR_FILE).exists()
        )

    # ------------------------------------------------------------------
    # Locking and commits
    # ------------------------------------------------------------------

    @contextmanager
    def locked(self, timeout: Optional[float] = None) -> Iterator["DistributorStore"]:
        """
        Hold the state directory lock for a load-operate-commit session.

        An interrupted commit left by an earlier session is finished first.

        Raises:
            StateLockedException: If the lock is not free within the timeout
        """
        timeout = self.lock_timeout if timeout is None else timeout
        self.root_dir.mkdir(parents=True, exist_ok=True)
        try:
            self._lock.acquire(timeout=timeout)
        except Timeout as e:
            raise StateLockedException(str(self.root_dir), timeout) from e
        try:
            self.recover()
            yield self
        finally:
            self._lock.release()

    def commit(self, distributor: Distributor, custody: Optional[InMemoryCustody] = None) -> Path:
        """
        Persist a distributor and, optionally, the custody balances as one unit.

        Call while holding locked().

        Returns:
            The campaign directory
        """
        journal = self._changes(distributor, custody)
        _write_json_atomic(self.root_dir / JOURNAL_FILE, journal)
        directory = self._apply(journal)
        (self.root_dir / JOURNAL_FILE).unlink()
        return directory

    def recover(self) -> bool:
        """
        Finish a commit that was interrupted after its journal was written.

        Returns:
            True if a pending commit was applied
        """
        path = self.root_dir / JOURNAL_FILE
        if not path.exists():
            return False
        journal = _read_json(path)
        if not isinstance(journal, dict) or "campaign_id" not in journal:
            raise StateCorruptedException(
                "Invalid pending commit", details={"path": str(path)}
            )
        logger.warning(f"Applying interrupted commit for campaign {journal['campaign_id']}")
        self._apply(journal)
        path.unlink()
        return True

    def _changes(self, distributor: Distributor, custody: Optional[InMemoryCustody]) -> dict[str, Any]:
        snapshot = distributor.snapshot()
        claims_dir = self.campaign_dir(snapshot.campaign_id) / CLAIMS_DIR
        return {
            "campaign_id": "0x" + snapshot.campaign_id.hex(),
            "claims": [
                record.model_dump(mode="json")
                for record in distributor.ledger.records()
                if not (claims_dir / f"{record.ledger_key.hex()}.json").exists()
            ],
            "receipts": [
                r.model_dump(mode="json", exclude_none=True) for r in distributor.receipts()
            ],
            "distributor": snapshot.model_dump(mode="json"),
            "custody": custody.to_dict() if custody is not None else None,
        }

    def _apply(self, changes: dict[str, Any]) -> Path:
        directory = self.campaign_dir(changes["campaign_id"])
        claims_dir = directory / CLAIMS_DIR
        claims_dir.mkdir(parents=True, exist_ok=True)

        # Claim records first, so distributor.json never counts a claim
        # whose record is missing
        for record in changes["claims"]:
            path = claims_dir / f"{record['ledger_key'][2:]}.json"
            if not path.exists():
                _write_json_atomic(path, record)

        _write_json_atomic(directory / RECEIPTS_FILE, changes["receipts"])
        _write_json_atomic(directory / DISTRIBUTOR_FILE, changes["distributor"])
        if changes.get("custody") is not None:
            _write_json_atomic(self.root_dir / CUSTODY_FILE, changes["custody"])
        logger.debug(f"Saved distributor {changes['campaign_id']} to {directory}")
        return directory

    # ------------------------------------------------------------------
    # Custody
    # ------------------------------------------------------------------

    def load_custody(self) -> InMemoryCustody:
        path = self.root_dir / CUSTODY_FILE
        if not path.exists():
            return InMemoryCustody()
        try:
            return InMemoryCustody.from_dict(_read_json(path))
        except (ValueError, TypeError) as e:
            raise StateCorruptedException(
                "Invalid custody balances", details={"path": str(path), "error": str(e)}
            ) from e

    def save_custody(self, custody: InMemoryCustody) -> None:
        _write_json_atomic(self.root_dir / CUSTODY_FILE, custody.to_dict())

    # ------------------------------------------------------------------
    # Distributors
    # ------------------------------------------------------------------

    def save(self, distributor: Distributor) -> Path:
        """
        Persist a distributor's account state, new claim records and receipts.

        Custody is left alone; use commit() when custody changed too.

        Returns:
            The campaign directory
        """
        return self._apply(self._changes(distributor, None))

    def load(self, campaign_id: Union[bytes, str], custody: InMemoryCustody) -> Distributor:
        """
        Restore a distributor and check it against the custody balances.

        Raises:
            UninitializedException: If the campaign has no saved state
            StateCorruptedException: If the saved state is inconsistent
        """
        seed = parse_campaign_id(campaign_id)
        directory = self.campaign_dir(seed)
        path = directory / DISTRIBUTOR_FILE
        if not path.exists():
            raise UninitializedException("0x" + seed.hex())

        try:
            snapshot = DistributorSnapshot.model_validate(_read_json(path))
            claims = [
                ClaimRecord.model_validate(_read_json(p))
                for p in sorted((directory / CLAIMS_DIR).glob("*.json"))
            ]
            receipts_path = directory / RECEIPTS_FILE
            receipts = [
                TransferReceipt.model_validate(item)
                for item in (_read_json(receipts_path) if receipts_path.exists() else [])
            ]
            distributor = Distributor.restore(snapshot, custody, claims, receipts)
        except (ValidationError, ValueError, InvalidAddressException) as e:
            raise StateCorruptedException(
                f"Saved state for campaign 0x{seed.hex()} is invalid",
                details={"path": str(directory), "error": str(e)},
            ) from e

        if snapshot.campaign_id != seed:
            raise StateCorruptedException(
                "Campaign id in distributor.json does not match its directory",
                details={"path": str(directory)},
            )
        held = custody.balance_of(distributor.vault)
        if held != snapshot.custody_balance:
            raise StateCorruptedException(
                "Custody vault balance does not match the distributor balance",
                details={"vault_balance": held, "custody_balance": snapshot.custody_balance},
            )
        return distributor

    def load_registry(self) -> DistributorRegistry:
        """Restore every saved campaign into a registry sharing one custody."""
        registry = DistributorRegistry(self.load_custody())
        for seed in self.list_campaigns():
            registry.register(self.load(seed, registry.custody))
        return registry

    def save_registry(self, registry: DistributorRegistry) -> None:
        for seed in registry.list_campaigns():
            self.save(registry.get(seed))
        self.save_custody(registry.custody)
