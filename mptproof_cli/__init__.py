"""
MPT Proof CLI

Command-line interface for checking Merkle-Patricia trie proofs.

Usage:
    python -m mptproof_cli verify-proof --root 0x... --key 0x... --proof proof.json
    python -m mptproof_cli verify-account get_proof.json --state-root 0x...
    python -m mptproof_cli decode-node 0xf8...
    python -m mptproof_cli config --init
"""

__version__ = "0.1.0"
