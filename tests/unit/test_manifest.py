"""
Module 02 - Campaign Manifest IO Tests
Tests for core/merkle/manifest.py
"""
import json

import pytest
from pydantic import ValidationError

from core.merkle import build_entitlement_tree, verify_entitlement
from core.merkle.manifest import (
    build_manifest,
    load_entitlements,
    load_manifest,
    manifest_from_tree,
    save_manifest,
)
from core.schemas.errors import InvalidAddressException, InvalidAmountException

from fixtures import ALICE, BOB, CAROL, MALLORY


def _hex(address: bytes) -> str:
    return "0x" + address.hex()


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "entitlements.csv"
    path.write_text(
        "address,amount\n"
        f"{_hex(ALICE)},100\n"
        f"{_hex(BOB)},200\n"
        f"{_hex(CAROL)},300\n"
    )
    return path


class TestLoadEntitlements:

    def test_csv(self, csv_file, entitlements):
        assert load_entitlements(csv_file) == entitlements

    def test_csv_recipient_column_and_whitespace(self, tmp_path, entitlements):
        path = tmp_path / "list.csv"
        path.write_text(
            "Recipient, Amount\n"
            f"{_hex(ALICE)}, 100\n"
            f"{_hex(BOB)},200 \n"
            f"{_hex(CAROL)},300\n"
        )
        assert load_entitlements(path) == entitlements

    def test_json(self, tmp_path, entitlements):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([
            {"recipient": _hex(ALICE), "amount": 100},
            {"address": _hex(BOB), "amount": "200"},
            {"recipient": _hex(CAROL), "amount": 300},
        ]))
        assert load_entitlements(path) == entitlements

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_entitlements(tmp_path / "nope.csv")

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("who,how_much\nx,1\n")
        with pytest.raises(ValueError, match="columns"):
            load_entitlements(path)

    def test_json_not_a_list(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"recipient": "0x00"}')
        with pytest.raises(ValueError, match="list"):
            load_entitlements(path)

    def test_bad_address_row(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("address,amount\n0x1234,5\n")
        with pytest.raises(InvalidAddressException):
            load_entitlements(path)

    def test_amount_out_of_range(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text(f"address,amount\n{_hex(ALICE)},{2**64}\n")
        with pytest.raises(InvalidAmountException):
            load_entitlements(path)


class TestManifest:

    def test_manifest_from_tree(self, tree):
        manifest = manifest_from_tree(tree)

        assert manifest.merkle_root == tree.root
        assert manifest.token_total == 600
        assert manifest.entitlement_count == 3
        assert manifest.depth == 2
        assert manifest.claim_for(BOB).amount == 200
        assert tuple(manifest.claim_for(BOB).proof) == tree.proof_for(BOB).siblings

    def test_every_manifest_proof_verifies(self, entitlements):
        manifest = build_manifest(entitlements)
        for e in entitlements:
            claim = manifest.claim_for(e.recipient)
            assert verify_entitlement(e.recipient, claim.amount, claim.proof, manifest.merkle_root)

    def test_unknown_recipient(self, tree):
        with pytest.raises(KeyError):
            manifest_from_tree(tree).claim_for(MALLORY)

    def test_save_load(self, tmp_path, tree):
        manifest = manifest_from_tree(tree)
        path = save_manifest(manifest, tmp_path / "out" / "manifest.json")

        assert load_manifest(path) == manifest
        data = json.loads(path.read_text())
        assert data["merkle_root"] == "0x" + tree.root.hex()
        assert _hex(ALICE) in data["claims"]

    def test_save_is_deterministic(self, tmp_path, entitlements):
        a = save_manifest(build_manifest(entitlements), tmp_path / "a.json")
        b = save_manifest(build_manifest(list(entitlements)), tmp_path / "b.json")
        assert a.read_bytes() == b.read_bytes()

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_manifest(tmp_path / "missing.json")

    def test_load_invalid(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text('{"merkle_root": "0x00"}')
        with pytest.raises(ValidationError):
            load_manifest(path)

    def test_single_entitlement_manifest(self):
        manifest = manifest_from_tree(build_entitlement_tree([(ALICE, 7)]))
        assert manifest.depth == 0
        assert manifest.claim_for(ALICE).proof == []
