"""
CLI Decode Command

Decode a single serialized trie node and print it as JSON.

Usage:
    mptproof decode-node 0xf851...
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.crypto.hashing import from_hex, keccak256, to_hex
from core.schemas.errors import MalformedProofException
from core.trie.codec import decode_node
from core.trie.nodes import node_to_dict


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def decode_node_cmd(args: Namespace) -> int:
    """Execute the decode-node command."""
    try:
        encoded = from_hex(args.node)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        node = decode_node(encoded)
    except MalformedProofException as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED

    print(json.dumps({
        "hash": to_hex(keccak256(encoded)),
        "size": len(encoded),
        "node": node_to_dict(node),
    }, indent=2))
    return EXIT_SUCCESS
