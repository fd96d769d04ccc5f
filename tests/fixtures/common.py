"""
Common test fixtures shared by all modules.

Provides factory functions for core distributor data structures:
- Addresses (deterministic 32-byte keys)
- Entitlement lists and trees
- Initialized and funded distributors

These are the foundational building blocks used by higher-level fixtures.
"""

from typing import Optional

from core.custody import InMemoryCustody
from core.distributor import Distributor
from core.merkle import EntitlementTree, build_entitlement_tree
from core.schemas.entitlement import Entitlement


DEFAULT_CAMPAIGN = b"test-cmp"


# =============================================================================
# Address Factory
# =============================================================================

def make_address(n: int) -> bytes:
    """
    Create a deterministic 32-byte address.

    make_address(1) != make_address(2); both are stable across runs.
    """
    return n.to_bytes(4, "big") * 8


AUTHORITY = make_address(0xA0A0)
ALICE = make_address(1)
BOB = make_address(2)
CAROL = make_address(3)
MALLORY = make_address(0x6666)


# =============================================================================
# Entitlement Factories
# =============================================================================

def make_entitlements(
    count: int = 3,
    base_amount: int = 100,
    start: int = 1,
) -> list[Entitlement]:
    """
    Create `count` entitlements with amounts base_amount * (i + 1).

    With the defaults this is [(ALICE, 100), (BOB, 200), (CAROL, 300)].
    """
    return [
        Entitlement(recipient=make_address(start + i), amount=base_amount * (i + 1))
        for i in range(count)
    ]


def make_tree(
    entitlements: Optional[list[Entitlement]] = None,
) -> EntitlementTree:
    """Build the tree for an entitlement list (defaults to make_entitlements())."""
    return build_entitlement_tree(entitlements if entitlements is not None else make_entitlements())


# =============================================================================
# Distributor Factories
# =============================================================================

def make_distributor(
    tree: Optional[EntitlementTree] = None,
    *,
    funded: int = 0,
    custody: Optional[InMemoryCustody] = None,
    campaign_id: bytes = DEFAULT_CAMPAIGN,
    authority: bytes = AUTHORITY,
) -> Distributor:
    """
    Create an ACTIVE distributor for a tree.

    Args:
        tree: Campaign tree (defaults to make_tree())
        funded: If > 0, mint this many tokens to the authority and fund them
        custody: Custody provider (defaults to a fresh InMemoryCustody)
        campaign_id: 8-byte campaign seed
        authority: Funding authority
    """
    tree = tree or make_tree()
    custody = custody if custody is not None else InMemoryCustody()
    distributor = Distributor(custody)
    distributor.initialize(tree.root, campaign_id, authority)
    if funded:
        custody.mint(authority, funded)
        distributor.fund(funded, caller=authority)
    return distributor
