"""
Module 04 - Custody Collaborator Interface

The distributor never moves tokens itself. It asks a custody provider to
move them and binds the result to its own state change: if the provider
raises, the distributor mutates nothing.
"""

from abc import ABC, abstractmethod


class CustodyProvider(ABC):
    """
    Abstract token custody.

    Implementations must either complete a transfer fully or raise
    TransferFailedException having moved nothing.
    """

    provider_id: str = "base"

    @abstractmethod
    def transfer_in(self, source: bytes, vault: bytes, amount: int) -> None:
        """
        Move `amount` from a funder's account into the campaign vault.

        Raises:
            TransferFailedException: If the transfer did not happen
        """

    @abstractmethod
    def transfer_out(self, vault: bytes, destination: bytes, amount: int) -> None:
        """
        Move `amount` from the campaign vault to a recipient.

        Raises:
            TransferFailedException: If the transfer did not happen
        """

    @abstractmethod
    def balance_of(self, account: bytes) -> int:
        """Token balance currently held by an account."""
