"""
Module 04 - Custody

Token custody collaborators used by the distributor for fund and claim.
"""

from .base import CustodyProvider
from .memory import FailurePredicate, InMemoryCustody

__all__ = [
    "CustodyProvider",
    "FailurePredicate",
    "InMemoryCustody",
]
