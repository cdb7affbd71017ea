"""
Live Trie
In-memory Merkle-Patricia trie that proofs are built from.

Nodes are immutable; every insert rebuilds the path from the root to the
new value and shares the rest of the structure. Branches with exactly
two nibble children are kept as DuoNodes. Accounts are stored as
AccountNodes carrying their storage sub-trie, so one walk can descend
from the state trie into an account's storage.

Only insertion and lookup are supported.
"""
from __future__ import annotations

from typing import Optional

from core.crypto.hashing import EMPTY_ROOT
from core.schemas.errors import InvalidNodeException, UnexpectedHashReferenceException
from core.trie.codec import hash_node
from core.trie.nibbles import KeyPath, common_prefix_length, keybytes_to_hex
from core.trie.nodes import (
    BRANCH_WIDTH,
    Account,
    AccountNode,
    DuoNode,
    FullNode,
    HashNode,
    Node,
    ShortNode,
    ValueNode,
    make_branch,
)


class Trie:
    """
    Mutable handle over an immutable node structure.

    Example:
        >>> trie = Trie()
        >>> trie.put(b"dog", b"puppy")
        >>> trie.get(b"dog")
        b'puppy'
    """

    def __init__(self, root: Optional[Node] = None) -> None:
        self.root = root

    def put(self, key: bytes, value: bytes) -> None:
        """
        Bind key to value, replacing any previous binding.

        Raises:
            ValueError: If value is empty
        """
        if not value:
            raise ValueError("Cannot store an empty value")
        self.root = _insert(self.root, keybytes_to_hex(key), ValueNode(value))

    def put_account(
        self,
        key: bytes,
        account: Account,
        storage: Optional["Trie"] = None,
    ) -> Account:
        """
        Bind key to an account, attaching its storage trie.

        When storage is given, the account's storage_root is replaced by
        the storage trie's root hash.

        Returns:
            The account as stored
        """
        storage_root_node = None
        if storage is not None:
            account = Account(
                nonce=account.nonce,
                balance=account.balance,
                storage_root=storage.root_hash(),
                code_hash=account.code_hash,
            )
            storage_root_node = storage.root
        self.root = _insert(
            self.root,
            keybytes_to_hex(key),
            AccountNode(account, storage_root_node),
        )
        return account

    def get(self, key: bytes) -> Optional[bytes]:
        """Raw value bound to key (account encoding for accounts), or None."""
        node = self.root
        path = keybytes_to_hex(key)
        while True:
            if node is None:
                return None
            if isinstance(node, ShortNode):
                if path[:len(node.key)] != node.key:
                    return None
                node, path = node.val, path[len(node.key):]
            elif isinstance(node, (FullNode, DuoNode)):
                if not path:
                    return None
                node, path = node.child(path[0]), path[1:]
            elif isinstance(node, ValueNode):
                return None if path else node.value
            elif isinstance(node, AccountNode):
                return None if path else node.account.encode()
            elif isinstance(node, HashNode):
                raise UnexpectedHashReferenceException(path)
            else:
                raise InvalidNodeException(node)

    def root_hash(self) -> bytes:
        """Commitment to the whole trie; EMPTY_ROOT when there are no entries."""
        if self.root is None:
            return EMPTY_ROOT
        return hash_node(self.root)


def _shorten(path: KeyPath, child: Node) -> Node:
    if not path:
        return child
    return ShortNode(path, child)


def _insert(node: Optional[Node], path: KeyPath, value: Node) -> Node:
    # Terminated paths run out exactly when the value position is reached
    if not path:
        return value
    if node is None:
        return ShortNode(path, value)

    if isinstance(node, ShortNode):
        matched = common_prefix_length(node.key, path)
        if matched == len(node.key):
            return ShortNode(node.key, _insert(node.val, path[matched:], value))

        children: list[Optional[Node]] = [None] * BRANCH_WIDTH
        children[node.key[matched]] = _shorten(node.key[matched + 1:], node.val)
        children[path[matched]] = _insert(None, path[matched + 1:], value)
        branch = make_branch(children)
        if matched == 0:
            return branch
        return ShortNode(path[:matched], branch)

    if isinstance(node, DuoNode):
        node = node.to_full()

    if isinstance(node, FullNode):
        children = list(node.children)
        children[path[0]] = _insert(children[path[0]], path[1:], value)
        return make_branch(children)

    if isinstance(node, HashNode):
        raise UnexpectedHashReferenceException(path)
    raise InvalidNodeException(node)


__all__ = ["Trie"]
