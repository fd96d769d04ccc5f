"""
Module 03 - Distributor State Machine

Owner: Protocol Engineer
Module ID: M03

Holds one campaign's committed Merkle root, custody balance, authority and
claim ledger, and enforces every invariant of the airdrop:

- custody_balance never goes negative
- each recipient is paid at most once, exactly the amount bound in the root
- committed_root never changes after initialize
- custody_balance == total_funded - total_claimed

States: UNINITIALIZED -> ACTIVE (no terminal state).

Concurrency: every public operation may be called from any thread.
Balance mutations run under one state lock together with the custody
transfer they account for; claim ledger entries are locked per recipient
(see ClaimLedger). Lock order is always ledger entry, then state lock.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from core.custody.base import CustodyProvider
from core.merkle.merkle_proofs import verify_entitlement
from core.merkle.merkle_tree import MerkleProof
from core.receipts import ReceiptRecorder, TransferReceipt
from core.schemas.campaign import ClaimRecord, DistributorSnapshot, parse_campaign_id
from core.schemas.entitlement import MAX_U64, format_address, parse_address, validate_amount
from core.schemas.errors import (
    AlreadyInitializedException,
    InsufficientFundsException,
    InvalidAmountException,
    InvalidProofException,
    UnauthorizedException,
    UninitializedException,
)

from .keys import derive_distributor_key
from .ledger import ClaimLedger


logger = logging.getLogger(__name__)


ProofInput = Union[MerkleProof, Sequence[bytes]]


class DistributorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class Distributor:
    """
    Merkle airdrop distributor for a single campaign.

    Usage:
        distributor = Distributor(custody)
        distributor.initialize(tree.root, b"campaign", authority)
        distributor.fund(500, caller=authority)
        distributor.claim(alice, 100, tree.proof_for(alice), caller=alice)
    """

    def __init__(
        self,
        custody: CustodyProvider,
        *,
        recorder: Optional[ReceiptRecorder] = None,
    ) -> None:
        self._custody = custody
        self._recorder = recorder or ReceiptRecorder()
        self._lock = threading.Lock()

        self._state = DistributorState.UNINITIALIZED
        self._committed_root: Optional[bytes] = None
        self._campaign_id: Optional[bytes] = None
        self._authority: Optional[bytes] = None
        self._vault: Optional[bytes] = None
        self._ledger: Optional[ClaimLedger] = None

        self._custody_balance = 0
        self._total_funded = 0
        self._total_claimed = 0
        self._clock = 0

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> DistributorState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is DistributorState.ACTIVE

    @property
    def committed_root(self) -> bytes:
        self._require_active()
        return self._committed_root

    @property
    def campaign_id(self) -> bytes:
        self._require_active()
        return self._campaign_id

    @property
    def authority(self) -> bytes:
        self._require_active()
        return self._authority

    @property
    def vault(self) -> bytes:
        """Custody account holding the pooled balance."""
        self._require_active()
        return self._vault

    @property
    def custody_balance(self) -> int:
        with self._lock:
            return self._custody_balance

    @property
    def total_funded(self) -> int:
        with self._lock:
            return self._total_funded

    @property
    def total_claimed(self) -> int:
        with self._lock:
            return self._total_claimed

    @property
    def clock(self) -> int:
        with self._lock:
            return self._clock

    @property
    def ledger(self) -> ClaimLedger:
        self._require_active()
        return self._ledger

    def _campaign_label(self) -> Optional[str]:
        return "0x" + self._campaign_id.hex() if self._campaign_id else None

    def _require_active(self) -> None:
        if self._state is not DistributorState.ACTIVE:
            raise UninitializedException(self._campaign_label())

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def initialize(
        self,
        root: bytes,
        campaign_id: Union[bytes, str],
        authority: Union[bytes, str],
    ) -> None:
        """
        Commit the Merkle root and move to ACTIVE with a zero balance.

        Raises:
            AlreadyInitializedException: If called a second time
            ValueError: If root is not 32 bytes or the seed is not 8 bytes
            InvalidAddressException: If authority is not a 32-byte key
        """
        seed = parse_campaign_id(campaign_id)
        authority_key = parse_address(authority)
        if not isinstance(root, (bytes, bytearray)) or len(root) != 32:
            raise ValueError("Merkle root must be 32 bytes")

        with self._lock:
            if self._state is not DistributorState.UNINITIALIZED:
                raise AlreadyInitializedException("0x" + self._campaign_id.hex())

            self._campaign_id = seed
            self._committed_root = bytes(root)
            self._authority = authority_key
            self._vault = derive_distributor_key(seed)
            self._ledger = ClaimLedger(self._vault)
            self._custody_balance = 0
            self._state = DistributorState.ACTIVE

        logger.info(
            f"Initialized distributor 0x{seed.hex()} with root 0x{root.hex()}, "
            f"authority {format_address(authority_key)}"
        )

    def validate_fund(self, amount: int, caller: Union[bytes, str]) -> bytes:
        """
        Run every fund() check that does not move tokens.

        Returns:
            The caller key

        Raises:
            The same rejections as fund(), except TransferFailedException
        """
        self._require_active()
        caller_key = parse_address(caller)
        if caller_key != self._authority:
            logger.warning(f"Rejected fund from non-authority {format_address(caller_key)}")
            raise UnauthorizedException(
                "Only the campaign authority may fund the distributor",
                details={"caller": format_address(caller_key)},
            )
        validate_amount(amount, allow_zero=False)
        with self._lock:
            self._check_headroom(amount)
        return caller_key

    def _check_headroom(self, amount: int) -> None:
        if self._custody_balance + amount > MAX_U64:
            raise InvalidAmountException(
                "Deposit would overflow the u64 custody balance", amount=amount
            )

    def fund(self, amount: int, caller: Union[bytes, str]) -> TransferReceipt:
        """
        Deposit tokens from the authority into custody.

        The custody transfer and the balance update are one atomic unit:
        a failed transfer leaves the balance unchanged.

        Raises:
            UninitializedException: Before initialize
            UnauthorizedException: If caller is not the authority
            InvalidAmountException: If amount is zero, not a u64, or would
                overflow the u64 custody balance
            TransferFailedException: If custody rejects the deposit
        """
        caller_key = self.validate_fund(amount, caller)

        with self._lock:
            self._check_headroom(amount)
            self._custody.transfer_in(caller_key, self._vault, amount)
            self._custody_balance += amount
            self._total_funded += amount
            self._clock += 1
            clock = self._clock
            balance = self._custody_balance

        logger.info(f"Deposited {amount} into 0x{self._campaign_id.hex()}, balance {balance}")
        return self._recorder.record(
            "deposit",
            campaign_id=self._campaign_label(),
            account=format_address(caller_key),
            amount=amount,
            clock=clock,
        )

    def claim(
        self,
        recipient: Union[bytes, str],
        amount: int,
        proof: ProofInput,
        caller: Union[bytes, str],
    ) -> ClaimRecord:
        """
        Pay a recipient their proven entitlement, exactly once.

        The proof is checked first: it is stateless, and the amount paid is
        only ever the amount it binds to the committed root. The ledger
        entry is then held exclusively while funds are checked, custody
        pays out, the balance is decremented and the entry is written.

        Returns:
            The committed ClaimRecord

        Raises:
            UninitializedException: Before initialize
            UnauthorizedException: If caller is not the recipient
            InvalidProofException: If (recipient, amount) is not under the root
            AlreadyClaimedException: If the recipient was already paid
            InsufficientFundsException: If custody cannot cover the amount
            TransferFailedException: If custody rejects the payout
        """
        self._require_active()
        recipient_key = parse_address(recipient)
        caller_key = parse_address(caller)
        recipient_hex = format_address(recipient_key)

        if caller_key != recipient_key:
            logger.warning(f"Rejected claim for {recipient_hex} by {format_address(caller_key)}")
            raise UnauthorizedException(
                "Claims must be signed by the recipient",
                details={"recipient": recipient_hex, "caller": format_address(caller_key)},
            )

        siblings = proof.siblings if isinstance(proof, MerkleProof) else tuple(proof)
        if not verify_entitlement(recipient_key, amount, siblings, self._committed_root):
            logger.warning(f"Rejected claim for {recipient_hex}: invalid proof")
            raise InvalidProofException(recipient_hex, amount)

        with self._ledger.claim_slot(recipient_key) as slot:
            with self._lock:
                if self._custody_balance < amount:
                    logger.warning(
                        f"Rejected claim for {recipient_hex}: needs {amount}, "
                        f"custody holds {self._custody_balance}"
                    )
                    raise InsufficientFundsException(amount, self._custody_balance)
                self._custody.transfer_out(self._vault, recipient_key, amount)
                self._custody_balance -= amount
                self._total_claimed += amount
                self._clock += 1
                record = slot.commit(amount, self._clock)

        logger.info(f"Claimed {amount} for {recipient_hex} from 0x{self._campaign_id.hex()}")
        self._recorder.record(
            "claim",
            campaign_id=self._campaign_label(),
            account=recipient_hex,
            amount=amount,
            clock=record.claimed_at,
        )
        return record

    # ------------------------------------------------------------------
    # Queries and persistence
    # ------------------------------------------------------------------

    def claim_status(self, recipient: Union[bytes, str]) -> Optional[ClaimRecord]:
        """Committed record for a recipient, or None if unclaimed."""
        self._require_active()
        return self._ledger.get(parse_address(recipient))

    def receipts(self) -> list[TransferReceipt]:
        return self._recorder.get_receipts()

    def snapshot(self) -> DistributorSnapshot:
        """Consistent copy of the persisted account state."""
        self._require_active()
        with self._lock:
            return DistributorSnapshot(
                campaign_id=self._campaign_id,
                committed_root=self._committed_root,
                authority=self._authority,
                custody_balance=self._custody_balance,
                total_funded=self._total_funded,
                total_claimed=self._total_claimed,
                clock=self._clock,
            )

    @classmethod
    def restore(
        cls,
        snapshot: DistributorSnapshot,
        custody: CustodyProvider,
        claims: Iterable[ClaimRecord] = (),
        receipts: Iterable[TransferReceipt] = (),
    ) -> "Distributor":
        """
        Rebuild an ACTIVE distributor from persisted state.

        Raises:
            ValueError: If the claim records disagree with the snapshot
        """
        distributor = cls(custody)
        distributor._campaign_id = snapshot.campaign_id
        distributor._committed_root = snapshot.committed_root
        distributor._authority = snapshot.authority
        distributor._vault = derive_distributor_key(snapshot.campaign_id)
        distributor._ledger = ClaimLedger(distributor._vault, claims)
        distributor._custody_balance = snapshot.custody_balance
        distributor._total_funded = snapshot.total_funded
        distributor._total_claimed = snapshot.total_claimed
        distributor._clock = snapshot.clock
        distributor._recorder.load(list(receipts))
        distributor._state = DistributorState.ACTIVE

        if distributor._ledger.total_claimed() != snapshot.total_claimed:
            raise ValueError("Claim records do not add up to total_claimed")
        if snapshot.total_funded - snapshot.total_claimed != snapshot.custody_balance:
            raise ValueError("custody_balance != total_funded - total_claimed")
        return distributor
