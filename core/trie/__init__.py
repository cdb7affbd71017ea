"""
Merkle-Patricia Trie Proofs
Node model, node codec, live trie, proof building and verification.

This module provides:
- Node variants: ShortNode, FullNode, DuoNode, HashNode, ValueNode, AccountNode
- encode_node / decode_node: canonical node codec
- Trie: in-memory trie that proofs are built from
- prove: collect the serialized nodes on a key's path
- verify_proof: recover a key's value (or absence) from a proof
- verify_account_proof / verify_storage_proof: cross-check claimed records

Usage:
    from core.trie import Trie, prove, verify_proof

    trie = Trie()
    trie.put(b"dog", b"puppy")

    proof = prove(trie, b"dog")
    assert verify_proof(trie.root_hash(), b"dog", proof) == b"puppy"
    assert verify_proof(trie.root_hash(), b"cat", prove(trie, b"cat")) is None
"""
from .nibbles import (
    TERMINATOR,
    bytes_to_nibbles,
    keybytes_to_hex,
    hex_to_keybytes,
    hex_to_compact,
    compact_to_hex,
)

from .nodes import (
    Account,
    AccountNode,
    DuoNode,
    FullNode,
    HashNode,
    Node,
    ShortNode,
    ValueNode,
    node_to_dict,
)

from .codec import (
    decode_node,
    encode_node,
    hash_node,
    node_reference,
)

from .trie import Trie

from .proof import (
    EMPTY_NODE_ENCODING,
    ProofSet,
    RawProofElement,
    prove,
    verify_proof,
)

from .records import (
    account_key,
    storage_key,
    encode_storage_value,
    verify_account_proof,
    verify_account_proof_by_hash,
    verify_storage_proof,
    verify_storage_proof_by_hash,
    check_proof_result,
)


__all__ = [
    # Key paths
    "TERMINATOR",
    "bytes_to_nibbles",
    "keybytes_to_hex",
    "hex_to_keybytes",
    "hex_to_compact",
    "compact_to_hex",
    # Nodes
    "Account",
    "AccountNode",
    "DuoNode",
    "FullNode",
    "HashNode",
    "Node",
    "ShortNode",
    "ValueNode",
    "node_to_dict",
    # Codec
    "decode_node",
    "encode_node",
    "hash_node",
    "node_reference",
    # Live trie
    "Trie",
    # Proofs
    "EMPTY_NODE_ENCODING",
    "ProofSet",
    "RawProofElement",
    "prove",
    "verify_proof",
    # Records
    "account_key",
    "storage_key",
    "encode_storage_value",
    "verify_account_proof",
    "verify_account_proof_by_hash",
    "verify_storage_proof",
    "verify_storage_proof_by_hash",
    "check_proof_result",
]
