"""
Module 09C - CLI Build and Prove Commands

Offline campaign setup:
- build: entitlement list -> Merkle root + manifest with every proof
- prove: look up one recipient's amount and proof in a manifest

Usage:
    airdrop build entitlements.csv --out manifest.json [--json]
    airdrop prove manifest.json 0x<address> [--json]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field

from core.merkle.manifest import build_manifest, load_entitlements, load_manifest, save_manifest
from core.schemas.entitlement import format_address, parse_address
from core.schemas.errors import DistributorException

from airdrop_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, emit, report_error


logger = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    """Summary of a campaign build for CLI output."""
    manifest_path: str = ""
    merkle_root: str = ""
    entitlement_count: int = 0
    token_total: int = 0
    depth: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProveSummary:
    """One recipient's claim material."""
    recipient: str = ""
    amount: int = 0
    merkle_root: str = ""
    proof: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def build_cmd(args: Namespace) -> int:
    """Build the Merkle tree for an entitlement file and write the manifest."""
    try:
        entitlements = load_entitlements(args.entitlements)
        manifest = build_manifest(entitlements)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except DistributorException as e:
        report_error(e, args.json)
        return EXIT_RUNTIME_ERROR

    path = save_manifest(manifest, args.out)
    logger.info(f"Wrote manifest for {manifest.entitlement_count} recipients to {path}")

    summary = BuildSummary(
        manifest_path=str(path),
        merkle_root="0x" + manifest.merkle_root.hex(),
        entitlement_count=manifest.entitlement_count,
        token_total=manifest.token_total,
        depth=manifest.depth,
    )
    emit(summary.to_dict(), args.json)
    return EXIT_SUCCESS


def prove_cmd(args: Namespace) -> int:
    """Print a recipient's amount and proof from a manifest."""
    try:
        manifest = load_manifest(args.manifest)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        recipient = parse_address(args.address)
    except DistributorException as e:
        return report_error(e, args.json)

    try:
        claim = manifest.claim_for(recipient)
    except KeyError:
        print(f"Error: {format_address(recipient)} is not in this campaign", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = ProveSummary(
        recipient=format_address(recipient),
        amount=claim.amount,
        merkle_root="0x" + manifest.merkle_root.hex(),
        proof=["0x" + s.hex() for s in claim.proof],
    )
    emit(summary.to_dict(), args.json)
    return EXIT_SUCCESS
