"""
Module 02 - Campaign Manifest IO

Loads entitlement lists and writes the campaign manifest: the Merkle root
plus, for every recipient, the amount and sibling path they need to claim.
Manifests are canonical JSON, so the same entitlement list always yields a
byte-identical file.
"""
from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any

from core.merkle.merkle_proofs import EntitlementTree, build_entitlement_tree
from core.schemas.campaign import CampaignManifest, ManifestClaim
from core.schemas.canonical import dumps_canonical
from core.schemas.entitlement import Entitlement


logger = logging.getLogger(__name__)


ADDRESS_COLUMNS = ("address", "recipient")


def load_entitlements(path: str | Path) -> list[Entitlement]:
    """
    Read an entitlement list from CSV or JSON.

    CSV files need a header with an `address` (or `recipient`) column and an
    `amount` column. JSON files hold a list of {"recipient", "amount"}
    objects. Amounts may be given as integers or decimal strings.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file format or a column is not recognised
        InvalidAddressException / InvalidAmountException: For bad rows
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Entitlement file not found: {path}")

    if path.suffix.lower() == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("JSON entitlement file must contain a list")
        rows = [(item.get("recipient", item.get("address")), item.get("amount")) for item in data]
    else:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            fields = [name.strip().lower() for name in (reader.fieldnames or [])]
            address_column = next((c for c in ADDRESS_COLUMNS if c in fields), None)
            if address_column is None or "amount" not in fields:
                raise ValueError("CSV entitlement file needs 'address' and 'amount' columns")
            rows = []
            for row in reader:
                normalized = {k.strip().lower(): v for k, v in row.items()}
                rows.append((normalized[address_column], normalized["amount"]))

    entitlements = [
        Entitlement(recipient=str(recipient).strip(), amount=_parse_amount(amount))
        for recipient, amount in rows
    ]
    logger.info(f"Loaded {len(entitlements)} entitlements from {path}")
    return entitlements


def _parse_amount(value: Any) -> Any:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def manifest_from_tree(tree: EntitlementTree) -> CampaignManifest:
    """Package a built tree as a distributable manifest."""
    claims = {
        entitlement.recipient_hex: ManifestClaim(
            amount=entitlement.amount,
            proof=list(tree.proofs[entitlement.recipient].siblings),
        )
        for entitlement in tree.entitlements
    }
    return CampaignManifest(
        merkle_root=tree.root,
        token_total=tree.token_total,
        entitlement_count=len(tree.entitlements),
        depth=tree.depth,
        claims=claims,
    )


def build_manifest(entitlements: list[Any]) -> CampaignManifest:
    """Build the tree for an entitlement list and package it."""
    return manifest_from_tree(build_entitlement_tree(entitlements))


def save_manifest(manifest: CampaignManifest, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_canonical(manifest.model_dump(mode="json")), encoding="utf-8")
    return path


def load_manifest(path: str | Path) -> CampaignManifest:
    """
    Read a manifest written by save_manifest.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the content is not a valid manifest
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Manifest not found: {path}")
    return CampaignManifest.model_validate(json.loads(path.read_text(encoding="utf-8")))


__all__ = [
    "load_entitlements",
    "manifest_from_tree",
    "build_manifest",
    "save_manifest",
    "load_manifest",
]
