"""
Distributor Registry

Maps campaign seeds to their distributors. This is where "one distributor
per campaign identity" holds: initializing the same seed twice raises
AlreadyInitializedException regardless of which Distributor object the
caller holds.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Union

from core.custody.base import CustodyProvider
from core.custody.memory import InMemoryCustody
from core.schemas.campaign import parse_campaign_id
from core.schemas.errors import AlreadyInitializedException, UninitializedException

from .distributor import Distributor


logger = logging.getLogger(__name__)


class DistributorRegistry:
    """
    Thread-safe campaign registry sharing one custody provider.

    Usage:
        registry = DistributorRegistry()
        distributor = registry.initialize(b"campaign", root, authority)
        registry.get(b"campaign").fund(100, caller=authority)
    """

    def __init__(self, custody: Optional[CustodyProvider] = None) -> None:
        self.custody = custody if custody is not None else InMemoryCustody()
        self._distributors: dict[bytes, Distributor] = {}
        self._lock = threading.Lock()

    def initialize(
        self,
        campaign_id: Union[bytes, str],
        root: bytes,
        authority: Union[bytes, str],
    ) -> Distributor:
        """
        Create and initialize the distributor for a campaign.

        Raises:
            AlreadyInitializedException: If the campaign already exists
        """
        seed = parse_campaign_id(campaign_id)
        with self._lock:
            if seed in self._distributors:
                raise AlreadyInitializedException("0x" + seed.hex())
            distributor = Distributor(self.custody)
            distributor.initialize(root, seed, authority)
            self._distributors[seed] = distributor
        return distributor

    def register(self, distributor: Distributor) -> None:
        """Add an already ACTIVE distributor (e.g. one restored from disk)."""
        seed = distributor.campaign_id
        with self._lock:
            if seed in self._distributors:
                raise AlreadyInitializedException("0x" + seed.hex())
            self._distributors[seed] = distributor

    def get(self, campaign_id: Union[bytes, str]) -> Distributor:
        """
        Look up a campaign's distributor.

        Raises:
            UninitializedException: If the campaign was never initialized
        """
        seed = parse_campaign_id(campaign_id)
        with self._lock:
            distributor = self._distributors.get(seed)
        if distributor is None:
            raise UninitializedException("0x" + seed.hex())
        return distributor

    def list_campaigns(self) -> list[bytes]:
        with self._lock:
            return sorted(self._distributors)

    def __contains__(self, campaign_id: object) -> bool:
        try:
            seed = parse_campaign_id(campaign_id)
        except ValueError:
            return False
        with self._lock:
            return seed in self._distributors

    def __len__(self) -> int:
        with self._lock:
            return len(self._distributors)
