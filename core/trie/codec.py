"""
Node Codec
Canonical RLP encoding and strict decoding of trie nodes.

Canonical Encoding Rules (Hard Contracts):
1. Short node: [compact(path), ref(child)] or, for leaves, [compact(path), value]
2. Branch node: [ref(child_0), ..., ref(child_15), value or b""]
3. Child reference: the child's item list when its encoding is shorter
   than 32 bytes, its 32-byte keccak digest otherwise, b"" when absent
4. Node hash: keccak256(encode_node(node)); a root is always hashed

Decoding is the exact inverse over canonical input and rejects anything
else. Anything hash-sized must be referenced by hash, never inlined, so
that every node has exactly one valid encoding.
"""
from __future__ import annotations

from typing import Any, Optional

import rlp
from rlp.exceptions import DecodingError

from core.crypto.hashing import HASH_LENGTH, keccak256
from core.schemas.errors import (
    InvalidNodeArityException,
    InvalidNodeException,
    MalformedEncodingException,
    OversizedEmbeddedNodeException,
)
from core.trie.nibbles import compact_to_hex, has_terminator, hex_to_compact
from core.trie.nodes import (
    VALUE_SLOT,
    AccountNode,
    DuoNode,
    FullNode,
    HashNode,
    Node,
    ShortNode,
    ValueNode,
)


# Item counts of the two serialized node shapes
SHORT_NODE_ITEMS: int = 2
FULL_NODE_ITEMS: int = 17


# =============================================================================
# Encoding
# =============================================================================

def _value_bytes(node: Optional[Node]) -> bytes:
    if node is None:
        return b""
    if isinstance(node, ValueNode):
        return node.value
    if isinstance(node, AccountNode):
        return node.account.encode()
    raise InvalidNodeException(node)


def node_items(node: Node) -> list[Any]:
    """
    Serializable item list of a node with its children replaced by references.

    Raises:
        InvalidNodeException: If the node or one of its slots holds a
                              variant that cannot appear there
    """
    if isinstance(node, ShortNode):
        compact = hex_to_compact(node.key)
        if node.is_leaf:
            return [compact, _value_bytes(node.val)]
        return [compact, node_reference(node.val)]

    if isinstance(node, DuoNode):
        node = node.to_full()

    if isinstance(node, FullNode):
        items: list[Any] = [node_reference(child) for child in node.children[:VALUE_SLOT]]
        items.append(_value_bytes(node.value))
        return items

    raise InvalidNodeException(node)


def node_reference(node: Optional[Node]) -> Any:
    """
    Reference form of a child node inside its parent.

    Returns:
        b"" for an empty slot, the 32-byte digest for hashed children, or
        the child's item list when it is small enough to embed
    """
    if node is None:
        return b""
    if isinstance(node, HashNode):
        return node.hash

    items = node_items(node)
    encoded = rlp.encode(items)
    if len(encoded) < HASH_LENGTH:
        return items
    return keccak256(encoded)


def encode_node(node: Node) -> bytes:
    """Canonical serialized form of a node."""
    return rlp.encode(node_items(node))


def hash_node(node: Node) -> bytes:
    """Digest of a node's canonical encoding."""
    return keccak256(encode_node(node))


# =============================================================================
# Decoding
# =============================================================================

def decode_node(encoded: bytes) -> Node:
    """
    Decode a serialized trie node.

    Args:
        encoded: Canonical RLP of a short or full node

    Returns:
        ShortNode or FullNode; children are HashNodes or embedded nodes

    Raises:
        MalformedEncodingException: Empty or non-canonical input, non-list
                                    outer item, or a malformed field
        InvalidNodeArityException: Neither 2 nor 17 items
        OversizedEmbeddedNodeException: An inlined child of 32+ bytes
    """
    if len(encoded) == 0:
        raise MalformedEncodingException("nodes must not be zero length")

    try:
        items = rlp.decode(encoded)
    except DecodingError as e:
        raise MalformedEncodingException(f"invalid RLP: {e}") from e

    if not isinstance(items, list):
        raise MalformedEncodingException("node encoding must be a list")
    return _decode_items(items)


def _decode_items(items: list[Any]) -> Node:
    count = len(items)
    if count == SHORT_NODE_ITEMS:
        return _decode_short(items)
    if count == FULL_NODE_ITEMS:
        return _decode_full(items)
    raise InvalidNodeArityException(count)


def _decode_short(items: list[Any]) -> ShortNode:
    key_item, val_item = items
    if not isinstance(key_item, bytes):
        raise MalformedEncodingException("short node path must be a byte string")
    try:
        key = compact_to_hex(key_item)
    except ValueError as e:
        raise MalformedEncodingException(f"invalid compact path: {e}") from e

    if has_terminator(key):
        if not isinstance(val_item, bytes):
            raise MalformedEncodingException("leaf value must be a byte string")
        return ShortNode(key, ValueNode(val_item))

    if len(key) == 0:
        raise MalformedEncodingException("extension node must have a non-empty path")
    child = _decode_ref(val_item)
    if child is None:
        raise MalformedEncodingException("extension node must have a child")
    return ShortNode(key, child)


def _decode_full(items: list[Any]) -> FullNode:
    children: list[Optional[Node]] = [_decode_ref(item) for item in items[:VALUE_SLOT]]

    value_item = items[VALUE_SLOT]
    if not isinstance(value_item, bytes):
        raise MalformedEncodingException("branch value must be a byte string")
    children.append(ValueNode(value_item) if value_item else None)
    return FullNode(tuple(children))


def _decode_ref(item: Any) -> Optional[Node]:
    if isinstance(item, list):
        size = len(rlp.encode(item))
        if size >= HASH_LENGTH:
            raise OversizedEmbeddedNodeException(size)
        return _decode_items(item)
    if len(item) == 0:
        return None
    if len(item) == HASH_LENGTH:
        return HashNode(item)
    raise MalformedEncodingException(
        f"invalid RLP string size {len(item)} (want 0 through 32)",
        details={"size": len(item)},
    )


__all__ = [
    "SHORT_NODE_ITEMS",
    "FULL_NODE_ITEMS",
    "node_items",
    "node_reference",
    "encode_node",
    "hash_node",
    "decode_node",
]
