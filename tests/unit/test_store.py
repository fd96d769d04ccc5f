"""
Tests for core/distributor/store.py

Persisted state must reload to an equivalent distributor, claim records
must survive restarts, and inconsistent files must be reported rather
than silently accepted.
"""
import json
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

import core.distributor.store as store_module
from core.distributor import DistributorStore
from core.schemas.errors import (
    AlreadyClaimedException,
    StateCorruptedException,
    StateLockedException,
    UninitializedException,
)

from fixtures import ALICE, BOB, DEFAULT_CAMPAIGN, make_distributor


@pytest.fixture
def store(tmp_path):
    return DistributorStore(tmp_path / "state")


def _persist(store, distributor, custody):
    with store.locked():
        store.commit(distributor, custody)


def _claim_session(root, recipient, amount, proof):
    """One CLI-style session: lock, load, claim, commit."""
    session = DistributorStore(root)
    with session.locked():
        custody = session.load_custody()
        distributor = session.load(DEFAULT_CAMPAIGN, custody)
        distributor.claim(recipient, amount, proof, caller=recipient)
        session.commit(distributor, custody)


class TestSaveLoad:

    def test_layout(self, store, funded_distributor, custody):
        _persist(store, funded_distributor, custody)
        directory = store.campaign_dir(DEFAULT_CAMPAIGN)

        assert (store.root_dir / "custody.json").exists()
        assert (directory / "distributor.json").exists()
        assert (directory / "receipts.json").exists()
        assert directory.name == DEFAULT_CAMPAIGN.hex()
        assert store.exists(DEFAULT_CAMPAIGN)
        assert store.list_campaigns() == [DEFAULT_CAMPAIGN]

    def test_round_trip(self, store, funded_distributor, tree, custody):
        funded_distributor.claim(ALICE, 100, tree.proof_for(ALICE), caller=ALICE)
        _persist(store, funded_distributor, custody)

        custody2 = store.load_custody()
        loaded = store.load(DEFAULT_CAMPAIGN, custody2)

        assert loaded.snapshot() == funded_distributor.snapshot()
        assert loaded.claim_status(ALICE) == funded_distributor.claim_status(ALICE)
        assert [r.receipt_id for r in loaded.receipts()] == [
            r.receipt_id for r in funded_distributor.receipts()
        ]
        assert custody2.balance_of(ALICE) == 100

    def test_claim_survives_restart(self, store, funded_distributor, tree, custody):
        funded_distributor.claim(ALICE, 100, tree.proof_for(ALICE), caller=ALICE)
        _persist(store, funded_distributor, custody)

        custody2 = store.load_custody()
        loaded = store.load(DEFAULT_CAMPAIGN, custody2)
        with pytest.raises(AlreadyClaimedException):
            loaded.claim(ALICE, 100, tree.proof_for(ALICE), caller=ALICE)

        loaded.claim(BOB, 200, tree.proof_for(BOB), caller=BOB)
        _persist(store, loaded, custody2)

        again = store.load(DEFAULT_CAMPAIGN, store.load_custody())
        assert again.custody_balance == 200
        assert len(list((store.campaign_dir(DEFAULT_CAMPAIGN) / "claims").glob("*.json"))) == 2

    def test_files_are_canonical_json(self, store, funded_distributor, custody):
        _persist(store, funded_distributor, custody)
        text = (store.campaign_dir(DEFAULT_CAMPAIGN) / "distributor.json").read_text()
        data = json.loads(text)
        assert text == json.dumps(data, sort_keys=True, separators=(",", ":"))
        assert data["committed_root"].startswith("0x")

    def test_no_temp_files_left(self, store, funded_distributor, custody):
        _persist(store, funded_distributor, custody)
        assert not list(store.root_dir.rglob("*.tmp"))

    def test_load_missing(self, store, custody):
        with pytest.raises(UninitializedException):
            store.load(DEFAULT_CAMPAIGN, custody)

    def test_load_custody_missing_is_empty(self, store):
        assert store.load_custody().balance_of(ALICE) == 0

    def test_registry_round_trip(self, store, tree, custody):
        first = make_distributor(tree, campaign_id=b"first-id", custody=custody, funded=100)
        second = make_distributor(tree, campaign_id=b"secondid", custody=custody, funded=50)
        store.save(first)
        store.save(second)
        store.save_custody(custody)

        registry = store.load_registry()
        assert registry.list_campaigns() == [b"first-id", b"secondid"]
        assert registry.get(b"secondid").custody_balance == 50


class TestCorruption:

    def test_invalid_json(self, store, funded_distributor, custody):
        _persist(store, funded_distributor, custody)
        (store.campaign_dir(DEFAULT_CAMPAIGN) / "distributor.json").write_text("{not json")

        with pytest.raises(StateCorruptedException):
            store.load(DEFAULT_CAMPAIGN, store.load_custody())

    def test_vault_balance_mismatch(self, store, funded_distributor, custody):
        _persist(store, funded_distributor, custody)
        custody.transfer_out(funded_distributor.vault, ALICE, 1)
        store.save_custody(custody)

        with pytest.raises(StateCorruptedException, match="vault balance"):
            store.load(DEFAULT_CAMPAIGN, store.load_custody())

    def test_missing_claim_file(self, store, funded_distributor, tree, custody):
        funded_distributor.claim(ALICE, 100, tree.proof_for(ALICE), caller=ALICE)
        _persist(store, funded_distributor, custody)
        for path in (store.campaign_dir(DEFAULT_CAMPAIGN) / "claims").glob("*.json"):
            path.unlink()

        with pytest.raises(StateCorruptedException):
            store.load(DEFAULT_CAMPAIGN, store.load_custody())

    def test_tampered_totals(self, store, funded_distributor, custody):
        _persist(store, funded_distributor, custody)
        path = store.campaign_dir(DEFAULT_CAMPAIGN) / "distributor.json"
        data = json.loads(path.read_text())
        data["total_funded"] = 1
        path.write_text(json.dumps(data))

        with pytest.raises(StateCorruptedException):
            store.load(DEFAULT_CAMPAIGN, store.load_custody())


class TestSessions:
    """Separate store instances on one directory, as separate CLI processes."""

    def test_interleaved_sessions_keep_every_claim(self, store, funded_distributor, tree, custody):
        _persist(store, funded_distributor, custody)
        claims = [(ALICE, 100), (BOB, 200)]
        barrier = threading.Barrier(len(claims))

        def run(claim):
            recipient, amount = claim
            barrier.wait()
            _claim_session(store.root_dir, recipient, amount, tree.proof_for(recipient))

        with ThreadPoolExecutor(max_workers=len(claims)) as pool:
            list(pool.map(run, claims))

        with store.locked():
            reloaded_custody = store.load_custody()
            loaded = store.load(DEFAULT_CAMPAIGN, reloaded_custody)
        assert loaded.total_claimed == 300
        assert loaded.custody_balance == 200
        assert reloaded_custody.balance_of(ALICE) == 100
        assert reloaded_custody.balance_of(BOB) == 200

    def test_lock_is_exclusive(self, store):
        other = DistributorStore(store.root_dir)
        with store.locked():
            with pytest.raises(StateLockedException) as exc_info:
                with other.locked(timeout=0):
                    pass
        assert exc_info.value.retryable

        with other.locked(timeout=0):
            pass

    def test_commit_leaves_no_journal(self, store, funded_distributor, custody):
        _persist(store, funded_distributor, custody)
        assert not (store.root_dir / store_module.JOURNAL_FILE).exists()
        assert store.recover() is False

    def test_interrupted_commit_is_finished(self, store, funded_distributor, tree, custody, monkeypatch):
        _persist(store, funded_distributor, custody)
        write = store_module._write_json_atomic

        def crash_on_custody(path, data):
            if path.name == store_module.CUSTODY_FILE:
                raise OSError("disk full")
            write(path, data)

        monkeypatch.setattr(store_module, "_write_json_atomic", crash_on_custody)
        funded_distributor.claim(ALICE, 100, tree.proof_for(ALICE), caller=ALICE)
        with pytest.raises(OSError):
            with store.locked():
                store.commit(funded_distributor, custody)
        monkeypatch.undo()

        assert (store.root_dir / store_module.JOURNAL_FILE).exists()
        with pytest.raises(StateCorruptedException, match="vault balance"):
            store.load(DEFAULT_CAMPAIGN, store.load_custody())

        with store.locked():
            reloaded_custody = store.load_custody()
            loaded = store.load(DEFAULT_CAMPAIGN, reloaded_custody)
        assert not (store.root_dir / store_module.JOURNAL_FILE).exists()
        assert loaded.total_claimed == 100
        assert reloaded_custody.balance_of(ALICE) == 100
        assert reloaded_custody.balance_of(loaded.vault) == 400
