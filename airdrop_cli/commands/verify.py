"""
Module 09C - CLI Verify Command

Check offline that (address, amount) is committed under a Merkle root.

The root and proof come from a manifest, or are given explicitly:

Usage:
    airdrop verify 0x<address> 100 --manifest manifest.json
    airdrop verify 0x<address> 100 --root 0x<root> --proof 0x<sibling> ...
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from core.crypto.hashing import digest_from_hex, to_hex
from core.merkle.manifest import load_manifest
from core.merkle.merkle_proofs import verify_entitlement
from core.schemas.entitlement import format_address, parse_address
from core.schemas.errors import DistributorException

from airdrop_cli.commands.common import (
    EXIT_REJECTED,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    emit,
    report_error,
)


logger = logging.getLogger(__name__)


@dataclass
class VerifySummary:
    """Summary of a proof check for CLI output."""
    recipient: str = ""
    amount: int = 0
    merkle_root: str = ""
    proof_length: int = 0
    valid: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        return d


def verify_cmd(args: Namespace) -> int:
    """Handle verify command."""
    if args.manifest is None and args.root is None:
        print("Error: provide --manifest or --root", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        recipient = parse_address(args.address)
    except DistributorException as e:
        return report_error(e, args.json)

    summary = VerifySummary(recipient=format_address(recipient), amount=args.amount)

    try:
        if args.manifest is not None:
            manifest = load_manifest(args.manifest)
            root = manifest.merkle_root
            if args.proof is not None:
                proof = [digest_from_hex(s) for s in args.proof]
            else:
                try:
                    proof = list(manifest.claim_for(recipient).proof)
                except KeyError:
                    proof = []
                    summary.errors.append("Recipient not in manifest")
        else:
            root = digest_from_hex(args.root)
            proof = [digest_from_hex(s) for s in (args.proof or [])]
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary.merkle_root = to_hex(root)
    summary.proof_length = len(proof)
    summary.valid = verify_entitlement(recipient, args.amount, proof, root)
    logger.info(f"Proof for {summary.recipient} valid={summary.valid}")

    emit(summary.to_dict(), args.json)
    return EXIT_SUCCESS if summary.valid else EXIT_REJECTED
