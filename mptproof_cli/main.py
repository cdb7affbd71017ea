"""
MPT Proof CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m mptproof_cli verify-proof --root 0x... --key 0x... --proof proof.json [--json]
    python -m mptproof_cli verify-account result.json --state-root 0x... [--json] [--debug]
    python -m mptproof_cli decode-node 0xf851...
    python -m mptproof_cli config --init [--path mptproof.yaml]
    python -m mptproof_cli config --show

Environment Variables:
    MPTPROOF_MAX_PROOF_NODES    Reject proofs with more elements (0 disables the limit)
    MPTPROOF_LOG_LEVEL          Log level (default: INFO)
    MPTPROOF_LOG_FILE           Also write logs to this file
    MPTPROOF_OUTPUT_FORMAT      Output format: human, json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.config.runtime import (
    RuntimeConfig,
    get_default_config,
    get_default_config_template,
)
from mptproof_cli import __version__
from mptproof_cli.commands import decode, verify


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


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


def load_config(path: Path | None) -> RuntimeConfig:
    """Load configuration from a YAML file if given, then apply env overrides."""
    if path is None:
        return get_default_config()
    return RuntimeConfig.from_yaml(path).with_env_overrides()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="mptproof",
        description="Verify Merkle-Patricia trie inclusion and exclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: environment only)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- verify-proof command ---
    proof_parser = subparsers.add_parser(
        "verify-proof",
        help="Verify a key's proof against a trie root",
        description="Recover the value (or prove the absence) of a key from a proof.",
    )
    proof_parser.add_argument(
        "--root",
        type=str,
        required=True,
        help="Trusted trie root hash (0x-prefixed hex)",
    )
    proof_parser.add_argument(
        "--key",
        type=str,
        required=True,
        help="Trie key exactly as stored (0x-prefixed hex, already hashed if the trie is secure)",
    )
    proof_parser.add_argument(
        "--proof",
        type=str,
        required=True,
        help="JSON file holding an array of hex-encoded nodes, root first",
    )
    proof_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    proof_parser.set_defaults(func=verify.verify_proof_cmd)

    # --- verify-account command ---
    account_parser = subparsers.add_parser(
        "verify-account",
        help="Verify an eth_getProof result against a state root",
        description="Check the account proof and every storage proof of an eth_getProof result.",
    )
    account_parser.add_argument(
        "result_path",
        type=str,
        help="JSON file with an eth_getProof result (bare or in a JSON-RPC response)",
    )
    account_parser.add_argument(
        "--state-root",
        type=str,
        required=True,
        help="Trusted state root (0x-prefixed hex)",
    )
    account_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    account_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include every individual check in output",
    )
    account_parser.set_defaults(func=verify.verify_account_cmd)

    # --- decode-node command ---
    decode_parser = subparsers.add_parser(
        "decode-node",
        help="Decode a serialized trie node",
        description="Print the structure of one serialized trie node as JSON.",
    )
    decode_parser.add_argument(
        "node",
        type=str,
        help="Serialized node (0x-prefixed hex)",
    )
    decode_parser.set_defaults(func=decode.decode_node_cmd)

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
        default="mptproof.yaml",
        help="Path for config file (default: mptproof.yaml)",
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
        print("You can also use environment variables (MPTPROOF_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: mptproof config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
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
    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
