"""
Trie Proofs
Build and verify Merkle-Patricia inclusion/exclusion proofs.

A proof is the root-first list of serialized nodes on the path from the
root to the value bound to a key, or to the point where the key's path
leaves the trie. Nodes small enough to be embedded in their parent are
not listed separately; they travel inside the parent's encoding.

Verification Rules (Hard Contracts):
1. Every proof element is resolved by its keccak digest
2. Elements are consumed at most once and in their original order
3. Every element must be consumed; extra elements reject the proof
4. Absence (None) is a successful outcome; errors mean the proof
   must not be trusted either way
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from core.crypto.hashing import EMPTY_ROOT, HASH_LENGTH, keccak256
from core.schemas.errors import (
    BranchNodeHasNoValueException,
    InvalidNodeException,
    InvalidRootHashException,
    KeyShorterThanNodePathException,
    MalformedEmptyProofException,
    MissingProofNodeException,
    ProofElementsOutOfOrderException,
    ProofTooLargeException,
    TrailingKeyAtValueNodeException,
    UnexpectedHashReferenceException,
    UnusedProofElementsException,
)
from core.trie.codec import decode_node, encode_node
from core.trie.nibbles import bytes_to_nibbles, keybytes_to_hex, strip_terminator
from core.trie.nodes import (
    AccountNode,
    DuoNode,
    FullNode,
    HashNode,
    Node,
    ShortNode,
    ValueNode,
)
from core.trie.trie import Trie


logger = logging.getLogger(__name__)


# RLP of the empty string; the only node a proof of the empty trie may hold
EMPTY_NODE_ENCODING: bytes = b"\x80"


# =============================================================================
# Proof Builder
# =============================================================================

def prove(
    trie: Trie,
    key: bytes,
    skip_levels: int = 0,
    include_storage: bool = False,
) -> list[bytes]:
    """
    Collect the serialized nodes on the path to key.

    If the trie does not contain key, the proof holds the nodes of the
    longest existing prefix of the key, ending with the node that proves
    its absence.

    Args:
        trie: Live trie to walk
        key: Raw lookup key; for storage proofs through the state trie,
             the account key followed by the storage key
        skip_levels: Number of leading path nodes to leave out
        include_storage: Continue from an account into its storage trie

    Returns:
        Serialized nodes, root first

    Raises:
        UnexpectedHashReferenceException: An unresolved node was met
        InvalidNodeException: A node of an unknown variant was met
    """
    proof: list[bytes] = []
    path = bytes_to_nibbles(key)
    node: Optional[Node] = trie.root
    is_root = True

    while node is not None:
        if isinstance(node, (ShortNode, FullNode, DuoNode)):
            if skip_levels == 0:
                encoded = encode_node(node)
                if is_root or len(encoded) >= HASH_LENGTH:
                    proof.append(encoded)
            else:
                skip_levels -= 1
            is_root = False

        if isinstance(node, ShortNode):
            node_path = strip_terminator(node.key)
            if len(path) < len(node_path) or path[:len(node_path)] != node_path:
                # The trie doesn't contain the key
                node = None
            else:
                node = node.val
                path = path[len(node_path):]
        elif isinstance(node, (FullNode, DuoNode)):
            if not path:
                node = None
            else:
                node = node.child(path[0])
                path = path[1:]
        elif isinstance(node, AccountNode):
            if include_storage and path:
                node = node.storage
                is_root = True
            else:
                node = None
        elif isinstance(node, ValueNode):
            node = None
        elif isinstance(node, HashNode):
            raise UnexpectedHashReferenceException(path, skip_levels)
        else:
            raise InvalidNodeException(node)

    logger.debug("Built proof of %d nodes for key 0x%s", len(proof), key.hex())
    return proof


# =============================================================================
# Proof Element Set
# =============================================================================

@dataclass(frozen=True)
class RawProofElement:
    """A proof element as supplied: its position and serialized bytes."""
    index: int
    value: bytes


@dataclass
class ProofSet:
    """
    Proof elements indexed by digest, with consumption tracking.

    A duplicated element collapses onto one digest whose recorded index
    is its last occurrence, so duplicates are always out of order.
    """
    nodes: dict[bytes, Node] = field(default_factory=dict)
    raw: dict[bytes, RawProofElement] = field(default_factory=dict)
    consumed: set[bytes] = field(default_factory=set)

    @classmethod
    def from_entries(
        cls,
        entries: Sequence[bytes],
        max_nodes: int | None = None,
    ) -> "ProofSet":
        """
        Hash and decode every proof element.

        Raises:
            ProofTooLargeException: More than max_nodes elements
            MalformedProofException: An element fails to decode
        """
        if max_nodes is not None and len(entries) > max_nodes:
            raise ProofTooLargeException(len(entries), max_nodes)

        proof_set = cls()
        for index, entry in enumerate(entries):
            digest = keccak256(entry)
            proof_set.nodes[digest] = decode_node(entry)
            proof_set.raw[digest] = RawProofElement(index=index, value=entry)
        return proof_set

    def take(self, digest: bytes, expected_index: int) -> Node:
        """
        Resolve a digest, requiring it to be the next element in order.

        Raises:
            MissingProofNodeException: Unknown or already consumed digest
            ProofElementsOutOfOrderException: Element is at another position
        """
        if digest not in self.nodes or digest in self.consumed:
            raise MissingProofNodeException(digest)

        element = self.raw[digest]
        if element.index != expected_index:
            raise ProofElementsOutOfOrderException(expected_index, element.index)

        self.consumed.add(digest)
        return self.nodes[digest]

    def unused(self) -> list[RawProofElement]:
        """Elements never consumed, in index order."""
        return sorted(
            (element for digest, element in self.raw.items() if digest not in self.consumed),
            key=lambda element: element.index,
        )


# =============================================================================
# Proof Verifier
# =============================================================================

def verify_proof(
    root_hash: bytes,
    key: bytes,
    proof: Sequence[bytes],
    max_nodes: int | None = None,
) -> Optional[bytes]:
    """
    Replay the walk to key using only the supplied proof elements.

    Args:
        root_hash: Committed 32-byte trie root
        key: Raw lookup key
        proof: Serialized nodes, root first
        max_nodes: Optional limit on the number of proof elements

    Returns:
        The value bound to key, or None when the proof shows the key is
        absent

    Raises:
        MalformedProofException: The proof is malformed, incomplete,
                                 out of order, or has extra elements
    """
    if len(root_hash) != HASH_LENGTH:
        raise InvalidRootHashException(root_hash)
    if root_hash == EMPTY_ROOT:
        return _verify_empty_trie_proof(proof)

    proof_set = ProofSet.from_entries(proof, max_nodes=max_nodes)
    path = keybytes_to_hex(key)
    next_index = 0
    node: Optional[Node] = HashNode(root_hash)

    while True:
        if isinstance(node, (FullNode, DuoNode)):
            if not path:
                raise BranchNodeHasNoValueException()
            node, path = node.child(path[0]), path[1:]
            if node is None:
                return _finish(proof_set, None)
        elif isinstance(node, ShortNode):
            if len(node.key) > len(path):
                raise KeyShorterThanNodePathException(len(node.key), len(path))
            if path[:len(node.key)] != node.key:
                return _finish(proof_set, None)
            node, path = node.val, path[len(node.key):]
        elif isinstance(node, HashNode):
            node = proof_set.take(node.hash, next_index)
            next_index += 1
        elif isinstance(node, ValueNode):
            if path:
                raise TrailingKeyAtValueNodeException(path)
            return _finish(proof_set, node.value)
        else:
            raise InvalidNodeException(node)


def _finish(proof_set: ProofSet, value: Optional[bytes]) -> Optional[bytes]:
    unused = proof_set.unused()
    if unused:
        raise UnusedProofElementsException([element.index for element in unused])
    logger.debug("Proof verified, key %s", "present" if value is not None else "absent")
    return value


def _verify_empty_trie_proof(proof: Sequence[bytes]) -> None:
    for index, entry in enumerate(proof):
        if entry != EMPTY_NODE_ENCODING:
            raise MalformedEmptyProofException(
                "empty root should have RLP encoding of empty proof",
                details={"index": index},
            )
    return None


__all__ = [
    "EMPTY_NODE_ENCODING",
    "RawProofElement",
    "ProofSet",
    "prove",
    "verify_proof",
]
