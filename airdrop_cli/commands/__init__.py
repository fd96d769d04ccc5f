"""
CLI command modules.
"""

from airdrop_cli.commands import build, campaign, verify

__all__ = ["build", "campaign", "verify"]
