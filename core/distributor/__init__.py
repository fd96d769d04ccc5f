"""
Module 03 - Distributor

Campaign state machine, claim ledger, registry and on-disk store.

Usage:
    from core.distributor import Distributor
    from core.custody import InMemoryCustody

    distributor = Distributor(InMemoryCustody())
    distributor.initialize(tree.root, b"campaign", authority)
"""

from .keys import CLAIM_STATUS_TAG, DISTRIBUTOR_TAG, derive_distributor_key, derive_ledger_key
from .ledger import ClaimLedger, ClaimSlot
from .distributor import Distributor, DistributorState
from .registry import DistributorRegistry
from .store import DistributorStore

__all__ = [
    "CLAIM_STATUS_TAG",
    "DISTRIBUTOR_TAG",
    "derive_distributor_key",
    "derive_ledger_key",
    "ClaimLedger",
    "ClaimSlot",
    "Distributor",
    "DistributorState",
    "DistributorRegistry",
    "DistributorStore",
]
