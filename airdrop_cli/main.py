"""
Module 09C - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m airdrop_cli build <entitlements.csv|json> --out manifest.json
    python -m airdrop_cli prove <manifest.json> <address>
    python -m airdrop_cli verify <address> <amount> --manifest manifest.json
    python -m airdrop_cli verify <address> <amount> --root HEX --proof HEX ...
    python -m airdrop_cli init --campaign SEED (--root HEX | --manifest PATH) --authority ADDR
    python -m airdrop_cli fund --campaign SEED --amount N --caller ADDR [--mint-to-caller]
    python -m airdrop_cli claim --campaign SEED --manifest PATH --caller ADDR
    python -m airdrop_cli status --campaign SEED [--claims]
    python -m airdrop_cli config --init | --show

Environment Variables:
    AIRDROP_STATE_DIR           Distributor state directory (default: .airdrop)
    AIRDROP_LOG_LEVEL           Log level (default: INFO)
    AIRDROP_LOG_FILE            Optional log file
    AIRDROP_DEBUG               Print tracebacks on errors (true/false)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from airdrop_cli import __version__
from airdrop_cli.commands import build, campaign, verify
from airdrop_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS
from airdrop_cli.config import get_default_config_template, load_config


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_common(parser: argparse.ArgumentParser, state: bool = False) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on unexpected errors",
    )
    if state:
        parser.add_argument(
            "--state-dir",
            type=Path,
            default=None,
            help="Distributor state directory (default: from config, ./.airdrop)",
        )
        parser.add_argument(
            "--campaign",
            type=str,
            required=True,
            help="Campaign seed: up to 8 characters, or 0x + 16 hex digits",
        )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="airdrop",
        description="Merkle airdrop distributor - build campaigns, verify proofs, fund and claim.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./airdrop.json or ~/.config/airdrop/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build the Merkle tree and manifest for an entitlement list",
        description="Read (address, amount) rows from CSV or JSON and write a campaign manifest.",
    )
    build_parser.add_argument("entitlements", type=str, help="Entitlement file (.csv or .json)")
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default="manifest.json",
        help="Output manifest path (default: manifest.json)",
    )
    _add_common(build_parser)
    build_parser.set_defaults(func=build.build_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Print a recipient's amount and proof",
    )
    prove_parser.add_argument("manifest", type=str, help="Campaign manifest")
    prove_parser.add_argument("address", type=str, help="Recipient address (0x-hex)")
    _add_common(prove_parser)
    prove_parser.set_defaults(func=build.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an entitlement proof offline",
        description="Check that (address, amount) is committed under a Merkle root.",
    )
    verify_parser.add_argument("address", type=str, help="Recipient address (0x-hex)")
    verify_parser.add_argument("amount", type=int, help="Claimed amount")
    verify_parser.add_argument("--manifest", "-m", type=str, default=None, help="Campaign manifest")
    verify_parser.add_argument("--root", type=str, default=None, help="Merkle root (0x-hex)")
    verify_parser.add_argument(
        "--proof",
        type=str,
        nargs="*",
        default=None,
        help="Sibling digests leaf to root (overrides the manifest proof)",
    )
    _add_common(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- init command ---
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a campaign distributor",
    )
    init_parser.add_argument("--root", type=str, default=None, help="Merkle root (0x-hex)")
    init_parser.add_argument("--manifest", "-m", type=str, default=None, help="Take the root from a manifest")
    init_parser.add_argument("--authority", type=str, required=True, help="Authority address (0x-hex)")
    _add_common(init_parser, state=True)
    init_parser.set_defaults(func=campaign.init_cmd)

    # --- fund command ---
    fund_parser = subparsers.add_parser(
        "fund",
        help="Deposit tokens into a campaign",
    )
    fund_parser.add_argument("--amount", type=int, required=True, help="Tokens to deposit")
    fund_parser.add_argument("--caller", type=str, required=True, help="Caller identity (0x-hex)")
    fund_parser.add_argument(
        "--mint-to-caller",
        action="store_true",
        default=False,
        help="Credit the caller's custody account with the amount first",
    )
    _add_common(fund_parser, state=True)
    fund_parser.set_defaults(func=campaign.fund_cmd)

    # --- claim command ---
    claim_parser = subparsers.add_parser(
        "claim",
        help="Claim an entitlement",
    )
    claim_parser.add_argument("--manifest", "-m", type=str, required=True, help="Campaign manifest")
    claim_parser.add_argument("--caller", type=str, required=True, help="Caller identity (0x-hex)")
    claim_parser.add_argument(
        "--recipient",
        type=str,
        default=None,
        help="Recipient address (default: the caller)",
    )
    claim_parser.add_argument(
        "--amount",
        type=int,
        default=None,
        help="Amount to claim (default: the manifest amount)",
    )
    _add_common(claim_parser, state=True)
    claim_parser.set_defaults(func=campaign.claim_cmd)

    # --- status command ---
    status_parser = subparsers.add_parser(
        "status",
        help="Show campaign balances and claims",
    )
    status_parser.add_argument(
        "--claims",
        action="store_true",
        default=False,
        help="List committed claim records",
    )
    _add_common(status_parser, state=True)
    status_parser.set_defaults(func=campaign.status_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="airdrop.json",
        help="Path for config file (default: airdrop.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (AIRDROP_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: airdrop config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=rejected)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False) or config.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
