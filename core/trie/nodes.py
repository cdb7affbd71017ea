"""
Trie Node Model
The closed set of node variants a Merkle-Patricia trie is built from.

Variants:
- ShortNode: leaf (terminated path + value) or extension (path + child)
- FullNode: 17-slot branch; slots 0..15 by nibble, slot 16 holds a value
- DuoNode: branch with exactly two occupied nibble slots and no value
- HashNode: 32-byte digest standing in for a node not materialized
- ValueNode: opaque terminal bytes
- AccountNode: account record plus optional storage sub-trie root

All nodes are immutable. Traversal sites dispatch with isinstance checks
over this set and raise InvalidNodeException for anything else.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

import rlp
from rlp.exceptions import DecodingError

from core.crypto.hashing import EMPTY_CODE_HASH, EMPTY_ROOT, HASH_LENGTH, to_hex
from core.schemas.errors import MalformedEncodingException
from core.trie.nibbles import TERMINATOR, KeyPath, has_terminator


BRANCH_WIDTH: int = 17
VALUE_SLOT: int = 16


@dataclass(frozen=True)
class Account:
    """
    The four canonical account fields committed to by the state trie.

    Attributes:
        nonce: Transaction count
        balance: Balance in wei
        storage_root: Root hash of the account's storage trie
        code_hash: Hash of the account's code
    """
    nonce: int = 0
    balance: int = 0
    storage_root: bytes = EMPTY_ROOT
    code_hash: bytes = EMPTY_CODE_HASH

    def __post_init__(self) -> None:
        if self.nonce < 0 or self.balance < 0:
            raise ValueError("Account nonce and balance must be non-negative")
        if len(self.storage_root) != HASH_LENGTH or len(self.code_hash) != HASH_LENGTH:
            raise ValueError("Account storage_root and code_hash must be 32 bytes")

    def encode(self) -> bytes:
        """RLP of [nonce, balance, storage_root, code_hash]."""
        return rlp.encode([self.nonce, self.balance, self.storage_root, self.code_hash])

    @classmethod
    def decode(cls, data: bytes) -> "Account":
        """
        Parse an encoded account.

        Raises:
            MalformedEncodingException: If data is not a 4-field account list
        """
        try:
            items = rlp.decode(data)
        except DecodingError as e:
            raise MalformedEncodingException(f"invalid account encoding: {e}") from e

        if not isinstance(items, list) or len(items) != 4:
            raise MalformedEncodingException("account encoding must be a list of 4 items")
        if not all(isinstance(item, bytes) for item in items):
            raise MalformedEncodingException("account fields must be byte strings")

        nonce, balance, storage_root, code_hash = items
        if nonce[:1] == b"\x00" or balance[:1] == b"\x00":
            raise MalformedEncodingException("account integers must be minimally encoded")
        try:
            return cls(
                nonce=int.from_bytes(nonce, "big"),
                balance=int.from_bytes(balance, "big"),
                storage_root=storage_root,
                code_hash=code_hash,
            )
        except ValueError as e:
            raise MalformedEncodingException(str(e)) from e


@dataclass(frozen=True)
class HashNode:
    """Reference to a node by its 32-byte digest."""
    hash: bytes

    def __post_init__(self) -> None:
        if len(self.hash) != HASH_LENGTH:
            raise ValueError(f"Hash node must hold {HASH_LENGTH} bytes, got {len(self.hash)}")


@dataclass(frozen=True)
class ValueNode:
    """Terminal value bytes."""
    value: bytes


@dataclass(frozen=True)
class AccountNode:
    """Materialized account with its storage sub-trie root (None if empty)."""
    account: Account
    storage: Optional["Node"] = None


@dataclass(frozen=True)
class ShortNode:
    """
    Path-compressed node.

    A leaf when `key` ends with the terminator, in which case `val` is a
    ValueNode or AccountNode. Otherwise an extension whose `val` is a
    branch or a HashNode.
    """
    key: KeyPath
    val: "Node"

    @property
    def is_leaf(self) -> bool:
        return has_terminator(self.key)


@dataclass(frozen=True)
class FullNode:
    """17-slot branch node."""
    children: tuple[Optional["Node"], ...]

    def __post_init__(self) -> None:
        if len(self.children) != BRANCH_WIDTH:
            raise ValueError(
                f"Full node must have {BRANCH_WIDTH} slots, got {len(self.children)}"
            )

    def child(self, nibble: int) -> Optional["Node"]:
        return self.children[nibble]

    @property
    def value(self) -> Optional["Node"]:
        return self.children[VALUE_SLOT]


@dataclass(frozen=True)
class DuoNode:
    """Branch with exactly two children at nibbles idx1 < idx2 and no value."""
    idx1: int
    idx2: int
    child1: "Node"
    child2: "Node"

    def __post_init__(self) -> None:
        if not 0 <= self.idx1 < self.idx2 < VALUE_SLOT:
            raise ValueError(
                f"Duo node indices must satisfy 0 <= idx1 < idx2 < 16, "
                f"got {self.idx1}, {self.idx2}"
            )

    def child(self, nibble: int) -> Optional["Node"]:
        if nibble == self.idx1:
            return self.child1
        if nibble == self.idx2:
            return self.child2
        return None

    def to_full(self) -> FullNode:
        children: list[Optional[Node]] = [None] * BRANCH_WIDTH
        children[self.idx1] = self.child1
        children[self.idx2] = self.child2
        return FullNode(tuple(children))


Node = Union[ShortNode, FullNode, DuoNode, HashNode, ValueNode, AccountNode]


def make_branch(children: list[Optional[Node]]) -> Union[FullNode, DuoNode]:
    """Build a branch, using a DuoNode when exactly two nibble slots are set."""
    occupied = [i for i in range(VALUE_SLOT) if children[i] is not None]
    if len(occupied) == 2 and children[VALUE_SLOT] is None:
        i1, i2 = occupied
        return DuoNode(i1, i2, children[i1], children[i2])
    return FullNode(tuple(children))


def node_to_dict(node: Optional[Node]) -> Any:
    """
    Render a node as JSON-friendly data.

    Used for diagnostics; the shape is not a wire format.
    """
    if node is None:
        return None
    if isinstance(node, ShortNode):
        return {
            "type": "leaf" if node.is_leaf else "extension",
            "path": "".join(format(n, "x") for n in node.key if n != TERMINATOR),
            "child": node_to_dict(node.val),
        }
    if isinstance(node, DuoNode):
        node = node.to_full()
    if isinstance(node, FullNode):
        return {
            "type": "branch",
            "children": {
                format(i, "x"): node_to_dict(child)
                for i, child in enumerate(node.children[:VALUE_SLOT])
                if child is not None
            },
            "value": node_to_dict(node.value),
        }
    if isinstance(node, HashNode):
        return {"type": "hash", "hash": to_hex(node.hash)}
    if isinstance(node, ValueNode):
        return {"type": "value", "value": to_hex(node.value)}
    if isinstance(node, AccountNode):
        return {
            "type": "account",
            "nonce": node.account.nonce,
            "balance": node.account.balance,
            "storage_root": to_hex(node.account.storage_root),
            "code_hash": to_hex(node.account.code_hash),
        }
    raise TypeError(f"{type(node).__name__} is not a trie node")


__all__ = [
    "BRANCH_WIDTH",
    "VALUE_SLOT",
    "Account",
    "HashNode",
    "ValueNode",
    "AccountNode",
    "ShortNode",
    "FullNode",
    "DuoNode",
    "Node",
    "make_branch",
    "node_to_dict",
]
