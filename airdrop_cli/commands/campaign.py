"""
Module 09C - CLI Campaign Commands

Operate a distributor persisted in the state directory:
- init: commit a Merkle root for a campaign
- fund: deposit tokens from the authority into custody
- claim: pay a recipient using their manifest proof
- status: show balances and claims

Each command holds the state directory lock while it loads state, runs one
distributor operation and commits state again only if the operation
succeeded.

Usage:
    airdrop init --campaign spring24 --manifest manifest.json --authority 0x<addr>
    airdrop fund --campaign spring24 --amount 500 --caller 0x<addr> --mint-to-caller
    airdrop claim --campaign spring24 --manifest manifest.json --caller 0x<addr>
    airdrop status --campaign spring24 [--json]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from typing import Any

from core.crypto.hashing import digest_from_hex, to_hex
from core.distributor import Distributor
from core.merkle.manifest import load_manifest
from core.schemas.campaign import parse_campaign_id
from core.schemas.entitlement import format_address, parse_address
from core.schemas.errors import AlreadyInitializedException, DistributorException

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    emit,
    get_store,
    report_error,
)


logger = logging.getLogger(__name__)


def _campaign_seed(args: Namespace) -> bytes | None:
    try:
        return parse_campaign_id(args.campaign)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None


def init_cmd(args: Namespace) -> int:
    """Initialize a campaign distributor with a committed root."""
    seed = _campaign_seed(args)
    if seed is None:
        return EXIT_RUNTIME_ERROR

    try:
        if args.root is not None:
            root = digest_from_hex(args.root)
        elif args.manifest is not None:
            root = load_manifest(args.manifest).merkle_root
        else:
            print("Error: provide --root or --manifest", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    store = get_store(args)
    try:
        with store.locked():
            if store.exists(seed):
                raise AlreadyInitializedException("0x" + seed.hex())
            distributor = Distributor(store.load_custody())
            distributor.initialize(root, seed, args.authority)
            store.commit(distributor)
    except DistributorException as e:
        return report_error(e, args.json)

    emit(_status_dict(distributor), args.json)
    return EXIT_SUCCESS


def fund_cmd(args: Namespace) -> int:
    """Deposit tokens into a campaign's custody."""
    seed = _campaign_seed(args)
    if seed is None:
        return EXIT_RUNTIME_ERROR

    store = get_store(args)
    try:
        with store.locked():
            custody = store.load_custody()
            distributor = store.load(seed, custody)
            caller = parse_address(args.caller)
            if args.mint_to_caller:
                distributor.validate_fund(args.amount, caller)
                custody.mint(caller, args.amount)
            receipt = distributor.fund(args.amount, caller=caller)
            store.commit(distributor, custody)
    except DistributorException as e:
        return report_error(e, args.json)

    result = _status_dict(distributor)
    result["receipt_id"] = receipt.receipt_id
    emit(result, args.json)
    return EXIT_SUCCESS


def claim_cmd(args: Namespace) -> int:
    """Claim a recipient's entitlement using the campaign manifest."""
    seed = _campaign_seed(args)
    if seed is None:
        return EXIT_RUNTIME_ERROR

    try:
        manifest = load_manifest(args.manifest)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    store = get_store(args)
    try:
        caller = parse_address(args.caller)
        recipient = parse_address(args.recipient) if args.recipient else caller
        try:
            entry = manifest.claim_for(recipient)
            amount, proof = entry.amount, list(entry.proof)
        except KeyError:
            amount, proof = 0, []
        if args.amount is not None:
            amount = args.amount

        with store.locked():
            custody = store.load_custody()
            distributor = store.load(seed, custody)
            record = distributor.claim(recipient, amount, proof, caller=caller)
            store.commit(distributor, custody)
    except DistributorException as e:
        return report_error(e, args.json)

    emit(
        {
            "ok": True,
            "recipient": format_address(record.recipient),
            "claimed_amount": record.claimed_amount,
            "claimed_at": record.claimed_at,
            "custody_balance": distributor.custody_balance,
        },
        args.json,
    )
    return EXIT_SUCCESS


def status_cmd(args: Namespace) -> int:
    """Show a campaign's balances and claim count."""
    seed = _campaign_seed(args)
    if seed is None:
        return EXIT_RUNTIME_ERROR

    store = get_store(args)
    try:
        with store.locked():
            distributor = store.load(seed, store.load_custody())
    except DistributorException as e:
        return report_error(e, args.json)

    result = _status_dict(distributor)
    if args.claims:
        result["claims"] = [
            record.model_dump(mode="json") for record in distributor.ledger.records()
        ]
    emit(result, args.json)
    return EXIT_SUCCESS


def _status_dict(distributor: Distributor) -> dict[str, Any]:
    snapshot = distributor.snapshot()
    return {
        "campaign_id": to_hex(snapshot.campaign_id),
        "state": distributor.state.value,
        "committed_root": to_hex(snapshot.committed_root),
        "authority": format_address(snapshot.authority),
        "vault": format_address(distributor.vault),
        "custody_balance": snapshot.custody_balance,
        "total_funded": snapshot.total_funded,
        "total_claimed": snapshot.total_claimed,
        "claim_count": len(distributor.ledger),
    }
