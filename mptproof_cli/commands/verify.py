"""
CLI Verify Commands

Verify proofs offline against a trusted root:
- verify-proof: a raw key/value proof against any trie root
- verify-account: an eth_getProof result against a state root

Usage:
    mptproof verify-proof --root 0x... --key 0x... --proof proof.json [--json]
    mptproof verify-account result.json --state-root 0x... [--json] [--debug]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.crypto.hashing import from_hex, to_hex
from core.schemas.errors import TrieProofException
from core.schemas.proof import AccountProofResult
from core.trie.proof import verify_proof
from core.trie.records import check_proof_result


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


class InputFileError(Exception):
    """Raised when a proof input file cannot be read or understood."""


@dataclass
class ProofSummary:
    """Summary of a raw proof verification for CLI output."""
    root: str = ""
    key: str = ""
    proof_nodes: int = 0
    ok: bool = False
    found: bool = False
    value: str | None = None
    error_code: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.error is None:
            del d["error"]
            del d["error_code"]
        return d


@dataclass
class AccountSummary:
    """Summary of an eth_getProof result verification for CLI output."""
    address: str = ""
    state_root: str = ""
    ok: bool = False
    storage_slots: int = 0
    checks: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["checks"]:
            del d["checks"]
        if not d["errors"]:
            del d["errors"]
        return d


def load_json_file(path: Path) -> Any:
    """Read and parse a JSON input file."""
    if not path.exists():
        raise InputFileError(f"File not found: {path}")
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise InputFileError(f"Invalid JSON in {path}: {e}") from e


def parse_proof_entries(data: Any) -> list[bytes]:
    """
    Extract proof entries from parsed JSON.

    Accepts a bare array of hex strings or an object with a "proof" array.
    """
    if isinstance(data, dict):
        data = data.get("proof")
    if not isinstance(data, list):
        raise InputFileError("Proof must be a JSON array of hex strings")
    try:
        return [from_hex(entry) for entry in data]
    except (TypeError, AttributeError, ValueError) as e:
        raise InputFileError(f"Invalid proof entry: {e}") from e


def parse_account_result(data: Any) -> AccountProofResult:
    """Build an AccountProofResult from an eth_getProof response or its result."""
    if isinstance(data, dict) and "result" in data and "address" not in data:
        data = data["result"]
    if not isinstance(data, dict):
        raise InputFileError("Expected an eth_getProof result object")
    try:
        return AccountProofResult.model_validate(data)
    except ValidationError as e:
        raise InputFileError(f"Invalid eth_getProof result: {e}") from e


def _wants_json(args: Namespace) -> bool:
    if getattr(args, "json", False):
        return True
    config = getattr(args, "runtime_config", None)
    return config is not None and config.output.format == "json"


def _max_nodes(args: Namespace) -> int | None:
    config = getattr(args, "runtime_config", None)
    return config.verifier.max_proof_nodes if config is not None else None


# =============================================================================
# verify-proof
# =============================================================================

def print_proof_summary_human(summary: ProofSummary) -> None:
    """Print proof summary in human-readable format."""
    print(f"root: {summary.root}")
    print(f"key: {summary.key}")
    print(f"proof_nodes: {summary.proof_nodes}")
    print(f"ok: {str(summary.ok).lower()}")
    if summary.error:
        print(f"\nerror [{summary.error_code}]: {summary.error}")
    elif summary.found:
        print(f"value: {summary.value}")
    else:
        print("value: (absent)")


def verify_proof_cmd(args: Namespace) -> int:
    """
    Execute the verify-proof command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    try:
        root = from_hex(args.root)
        key = from_hex(args.key)
        proof = parse_proof_entries(load_json_file(Path(args.proof)))
    except (InputFileError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = ProofSummary(root=to_hex(root), key=to_hex(key), proof_nodes=len(proof))

    logger.info(f"Verifying {len(proof)} proof nodes against root {summary.root}")
    try:
        value = verify_proof(root, key, proof, max_nodes=_max_nodes(args))
    except TrieProofException as e:
        summary.error = e.message
        summary.error_code = e.code
    else:
        summary.ok = True
        summary.found = value is not None
        summary.value = to_hex(value) if value is not None else None

    if _wants_json(args):
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_proof_summary_human(summary)

    if summary.ok:
        logger.info("Proof accepted")
        return EXIT_SUCCESS
    logger.warning("Proof rejected")
    return EXIT_VERIFICATION_FAILED


# =============================================================================
# verify-account
# =============================================================================

def build_account_summary(
    state_root: bytes,
    result: AccountProofResult,
    max_nodes: int | None = None,
    debug: bool = False,
) -> AccountSummary:
    """Check an account result and condense the report for output."""
    report = check_proof_result(state_root, result, max_nodes=max_nodes)

    summary = AccountSummary(
        address=to_hex(result.address),
        state_root=to_hex(state_root),
        ok=report.ok,
        storage_slots=len(result.storage_proof),
    )

    for check in report.get_failed_checks():
        summary.errors.append(f"{check.check_id}: {check.message}")

    if debug:
        summary.checks = [
            {
                "check_id": check.check_id,
                "ok": check.ok,
                "message": check.message,
                "details": check.details,
            }
            for check in report.checks
        ]

    return summary


def print_account_summary_human(summary: AccountSummary) -> None:
    """Print account summary in human-readable format."""
    print(f"address: {summary.address}")
    print(f"state_root: {summary.state_root}")
    print(f"storage_slots: {summary.storage_slots}")
    print(f"ok: {str(summary.ok).lower()}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:10]:
            print(f"  ✗ {err}")

    if summary.checks:
        passed = sum(1 for c in summary.checks if c["ok"])
        failed = len(summary.checks) - passed
        print(f"\nchecks: {passed} passed, {failed} failed")
        for check in summary.checks[:20]:
            status = "✓" if check["ok"] else "✗"
            print(f"  {status} {check['check_id']}")


def verify_account_cmd(args: Namespace) -> int:
    """
    Execute the verify-account command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    try:
        state_root = from_hex(args.state_root)
        result = parse_account_result(load_json_file(Path(args.result_path)))
    except (InputFileError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    logger.info(
        f"Verifying account {to_hex(result.address)} with "
        f"{len(result.storage_proof)} storage proofs"
    )
    summary = build_account_summary(
        state_root,
        result,
        max_nodes=_max_nodes(args),
        debug=getattr(args, "debug", False),
    )

    if _wants_json(args):
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_account_summary_human(summary)

    if summary.ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS
    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
