"""
Module 09C - Airdrop CLI

Command-line interface for building campaigns and operating distributors.

Usage:
    python -m airdrop_cli build entitlements.csv --out manifest.json
    python -m airdrop_cli prove manifest.json 0x<address>
    python -m airdrop_cli init --campaign spring24 --manifest manifest.json --authority 0x<address>
    python -m airdrop_cli claim --campaign spring24 --manifest manifest.json --caller 0x<address>
"""

__version__ = "0.1.0"
