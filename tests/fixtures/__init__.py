"""
Test fixtures package for airdrop distributor tests.

This package provides factory functions for creating test objects.

Usage:
    from fixtures import make_tree, make_distributor, ALICE

    def test_something():
        tree = make_tree()
        distributor = make_distributor(tree, funded=500)
"""

from .common import (
    ALICE,
    AUTHORITY,
    BOB,
    CAROL,
    DEFAULT_CAMPAIGN,
    MALLORY,
    make_address,
    make_distributor,
    make_entitlements,
    make_tree,
)

__all__ = [
    "ALICE",
    "AUTHORITY",
    "BOB",
    "CAROL",
    "DEFAULT_CAMPAIGN",
    "MALLORY",
    "make_address",
    "make_distributor",
    "make_entitlements",
    "make_tree",
]
