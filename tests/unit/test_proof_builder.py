"""
Proof Builder Unit Tests
Tests for prove() in core/trie/proof.py

Tests:
- Minimal proofs and embedded nodes
- Absence proofs stop where the key leaves the trie
- skip_levels trims leading nodes
- include_storage descends from an account into its storage trie
- Unresolved nodes are reported as trie defects
"""
import pytest

from core.crypto.hashing import keccak256
from core.schemas.errors import (
    ErrorCodes,
    InvalidNodeException,
    UnexpectedHashReferenceException,
)
from core.trie.codec import decode_node, encode_node
from core.trie.nodes import ShortNode, HashNode, ValueNode
from core.trie.proof import prove, verify_proof
from core.trie.records import account_key, storage_key
from core.trie.trie import Trie

from fixtures.common import make_slot


class TestProveBasics:
    """Tests for proof shape."""

    def test_two_small_keys_single_node(self):
        """Test a trie small enough to embed everything yields one node."""
        trie = Trie()
        trie.put(b"\x01", b"a")
        trie.put(b"\x02", b"b")

        proof = prove(trie, b"\x01")

        assert len(proof) == 1
        assert proof[0] == encode_node(trie.root)
        assert keccak256(proof[0]) == trie.root_hash()
        assert verify_proof(trie.root_hash(), b"\x01", proof) == b"a"

    def test_root_always_included(self):
        """Test a tiny root is emitted even though it would be embeddable."""
        trie = Trie()
        trie.put(b"k", b"v")
        proof = prove(trie, b"k")
        assert len(encode_node(trie.root)) < 32
        assert proof == [encode_node(trie.root)]

    def test_empty_trie(self):
        assert prove(Trie(), b"anything") == []

    def test_proof_is_root_first(self, state):
        """Test each element is referenced by its predecessor."""
        address = next(iter(state.accounts))
        proof = prove(state.trie, account_key(address))

        assert keccak256(proof[0]) == state.root
        for parent, child in zip(proof, proof[1:]):
            assert keccak256(child) in parent

    def test_only_hashed_nodes_after_root(self, state):
        """Test no embedded node is emitted separately."""
        address = next(iter(state.accounts))
        proof = prove(state.trie, account_key(address))
        assert all(len(node) >= 32 for node in proof[1:])

    def test_absent_key_stops_at_divergence(self, state):
        """Test an absence proof ends where the key leaves the trie."""
        key = keccak256(b"not an account")
        proof = prove(state.trie, key)
        assert len(proof) >= 1
        assert verify_proof(state.root, key, proof) is None

    def test_key_ending_at_branch_emits_branch(self):
        """Test a key exhausted at a branch still proves the branch."""
        trie = Trie()
        trie.put(b"do", b"verb")
        trie.put(b"dog", b"puppy" * 10)
        trie.put(b"doge", b"coin" * 10)
        proof = prove(trie, b"dog")
        assert verify_proof(trie.root_hash(), b"dog", proof) == b"puppy" * 10


class TestSkipLevels:
    """Tests for skip_levels."""

    def test_skip_levels_drops_leading_nodes(self, state):
        key = account_key(state.contract)
        full = prove(state.trie, key)
        assert prove(state.trie, key, skip_levels=1) == full[1:]
        assert prove(state.trie, key, skip_levels=2) == full[2:]

    def test_skip_all_levels(self, state):
        key = account_key(state.contract)
        assert prove(state.trie, key, skip_levels=100) == []


class TestIncludeStorage:
    """Tests for descending from an account into its storage trie."""

    def test_storage_proof_appended(self, state):
        """Test the combined proof is the account proof plus the storage proof."""
        acct_key = account_key(state.contract)
        slot_key = storage_key(make_slot(1))

        account_proof = prove(state.trie, acct_key)
        storage_proof = prove(state.storage, slot_key)
        combined = prove(state.trie, acct_key + slot_key, include_storage=True)

        assert combined[:len(account_proof)] == account_proof
        assert combined[len(account_proof):] == storage_proof

    def test_storage_root_always_emitted(self, state):
        """Test the storage trie root is emitted as a root."""
        acct_key = account_key(state.contract)
        slot_key = storage_key(make_slot(1))
        combined = prove(state.trie, acct_key + slot_key, include_storage=True)
        storage_part = combined[len(prove(state.trie, acct_key)):]
        assert keccak256(storage_part[0]) == state.storage.root_hash()

    def test_without_include_storage_stops_at_account(self, state):
        acct_key = account_key(state.contract)
        slot_key = storage_key(make_slot(1))
        assert prove(state.trie, acct_key + slot_key) == prove(state.trie, acct_key)

    def test_account_without_storage(self, state):
        """Test descending into an account with no storage adds nothing."""
        address = next(a for a in state.accounts if a != state.contract)
        acct_key = account_key(address)
        combined = prove(state.trie, acct_key + bytes(32), include_storage=True)
        assert combined == prove(state.trie, acct_key)

    def test_account_only_key_stops_at_account(self, state):
        """Test a key ending at the account does not pull in the storage root."""
        acct_key = account_key(state.contract)
        combined = prove(state.trie, acct_key, include_storage=True)

        assert combined == prove(state.trie, acct_key)
        assert verify_proof(state.root, acct_key, combined) is not None


class TestDefects:
    """Tests for defect reporting."""

    def test_hash_node_in_live_trie(self):
        """Test an unresolved reference raises instead of producing a bad proof."""
        trie = Trie(root=ShortNode((1,), HashNode(keccak256(b"x"))))
        with pytest.raises(UnexpectedHashReferenceException) as exc_info:
            prove(trie, b"\x10")
        assert exc_info.value.code == ErrorCodes.UNEXPECTED_HASH_REFERENCE

    def test_hash_node_root(self):
        trie = Trie(root=HashNode(keccak256(b"root")))
        with pytest.raises(UnexpectedHashReferenceException):
            prove(trie, b"\x10")

    def test_unknown_node_variant(self):
        trie = Trie(root=ShortNode((1,), "not a node"))
        with pytest.raises(InvalidNodeException):
            prove(trie, b"\x10\x00", skip_levels=1)

    def test_decoded_proof_nodes_round_trip(self, state):
        """Test every emitted node re-encodes to itself."""
        proof = prove(state.trie, account_key(state.contract))
        for node in proof:
            assert encode_node(decode_node(node)) == node

    def test_leaf_value_node(self):
        """Test the walk stops at a value node."""
        trie = Trie(root=ShortNode((1, 0, 16), ValueNode(b"v")))
        assert prove(trie, b"\x10") == [encode_node(trie.root)]
