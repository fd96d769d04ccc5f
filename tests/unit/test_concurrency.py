"""
Module 03 - Concurrent Claim Tests

Races between claims on one distributor. Exactly one claim per recipient
may succeed no matter how many threads try, and claims for different
recipients never block each other out. Deposits racing claims are never
lost.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.merkle import build_entitlement_tree
from core.schemas.campaign import ClaimRecord
from core.schemas.errors import AlreadyClaimedException, InsufficientFundsException

from fixtures import ALICE, AUTHORITY, make_distributor, make_entitlements


def _race(fn, workers: int) -> list:
    """Run fn from `workers` threads released at the same moment."""
    barrier = threading.Barrier(workers)

    def run():
        barrier.wait()
        try:
            return fn()
        except Exception as e:
            return e

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda _: run(), range(workers)))


@pytest.mark.slow
class TestConcurrentClaims:

    def test_same_recipient_paid_once(self, funded_distributor, tree, custody):
        d = funded_distributor
        proof = tree.proof_for(ALICE)

        results = _race(lambda: d.claim(ALICE, 100, proof, caller=ALICE), workers=16)

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert all(isinstance(e, AlreadyClaimedException) for e in failures)
        assert d.custody_balance == 400
        assert custody.balance_of(ALICE) == 100
        assert len([r for r in d.receipts() if r.kind == "claim"]) == 1

    def test_distinct_recipients_all_paid(self, custody):
        entitlements = make_entitlements(32, base_amount=10)
        tree = build_entitlement_tree(entitlements)
        d = make_distributor(tree, custody=custody, funded=tree.token_total)
        pending = iter(entitlements)
        lock = threading.Lock()

        def claim_next():
            with lock:
                e = next(pending)
            return d.claim(e.recipient, e.amount, tree.proof_for(e.recipient), caller=e.recipient)

        results = _race(claim_next, workers=len(entitlements))

        assert not [r for r in results if isinstance(r, Exception)]
        assert d.custody_balance == 0
        assert d.total_claimed == tree.token_total
        assert len({r.claimed_at for r in results}) == len(entitlements)

    def test_underfunded_race_never_overdraws(self, custody):
        entitlements = make_entitlements(20, base_amount=10)
        tree = build_entitlement_tree(entitlements)
        d = make_distributor(tree, custody=custody, funded=tree.token_total // 2)
        pending = iter(entitlements)
        lock = threading.Lock()

        def claim_next():
            with lock:
                e = next(pending)
            return d.claim(e.recipient, e.amount, tree.proof_for(e.recipient), caller=e.recipient)

        results = _race(claim_next, workers=len(entitlements))

        failures = [r for r in results if isinstance(r, Exception)]
        assert failures
        assert all(isinstance(e, InsufficientFundsException) for e in failures)
        assert d.custody_balance >= 0
        assert d.custody_balance == d.total_funded - d.total_claimed
        assert custody.balance_of(d.vault) == d.custody_balance

    def test_funding_during_claims(self, custody):
        entitlements = make_entitlements(16, base_amount=10)
        tree = build_entitlement_tree(entitlements)
        d = make_distributor(tree, custody=custody, funded=50)
        deposits = [40] * 16
        custody.mint(AUTHORITY, sum(deposits))

        tasks = [
            lambda e=e: d.claim(e.recipient, e.amount, tree.proof_for(e.recipient), caller=e.recipient)
            for e in entitlements
        ]
        tasks += [lambda amount=amount: d.fund(amount, caller=AUTHORITY) for amount in deposits]
        pending = iter(tasks)
        lock = threading.Lock()

        def run_next():
            with lock:
                task = next(pending)
            return task()

        results = _race(run_next, workers=len(tasks))

        failures = [r for r in results if isinstance(r, Exception)]
        assert all(isinstance(e, InsufficientFundsException) for e in failures)
        claimed = [r for r in results if isinstance(r, ClaimRecord)]
        assert d.total_funded == 50 + sum(deposits)
        assert d.total_claimed == sum(r.claimed_amount for r in claimed)
        assert d.custody_balance == d.total_funded - d.total_claimed
        assert custody.balance_of(d.vault) == d.custody_balance
        assert custody.balance_of(AUTHORITY) == 0
        assert len([r for r in d.receipts() if r.kind == "deposit"]) == 1 + len(deposits)
