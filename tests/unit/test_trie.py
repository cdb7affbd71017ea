"""
Live Trie Unit Tests
Tests for core/trie/trie.py

Root hashes are checked against the public Ethereum trie test vectors.
"""
import random

import pytest

from core.crypto.hashing import EMPTY_ROOT, keccak256
from core.schemas.errors import UnexpectedHashReferenceException
from core.trie.nodes import Account, AccountNode, DuoNode, FullNode, HashNode, ShortNode
from core.trie.trie import Trie


def _build(items: dict[str, str]) -> Trie:
    trie = Trie()
    for key, value in items.items():
        trie.put(key.encode(), value.encode())
    return trie


DOGS = {"doe": "reindeer", "dog": "puppy", "dogglesworth": "cat"}
PUPPY = {"do": "verb", "dog": "puppy", "doge": "coin", "horse": "stallion"}


class TestRootHash:
    """Tests for root hash computation."""

    def test_empty_trie(self):
        assert Trie().root_hash() == EMPTY_ROOT

    @pytest.mark.parametrize(
        "items,expected",
        [
            (DOGS, "8aad789dff2f538bca5d8ea56e8abe10f4c7ba3a5dea95fea4cd6e7c3a1168d3"),
            (PUPPY, "5991bb8c6514148a29db676a14ac506cd2cd5775ace63c30a4fe457715e9ac84"),
            ({"A": "a" * 50}, "d23786fb4a010da3ce639d66d5e904a11dbc02746d1ce25029e53290cabf28ab"),
        ],
    )
    def test_known_roots(self, items, expected):
        """Test roots match the reference vectors."""
        assert _build(items).root_hash().hex() == expected

    def test_insertion_order_independent(self):
        """Test any insertion order gives the same root."""
        items = list(PUPPY.items()) + list(DOGS.items())
        expected = _build(dict(items)).root_hash()

        rng = random.Random(1234)
        for _ in range(10):
            rng.shuffle(items)
            assert _build(dict(items)).root_hash() == expected

    def test_overwrite_changes_root(self):
        trie = _build(DOGS)
        before = trie.root_hash()
        trie.put(b"dog", b"kitten")
        assert trie.root_hash() != before
        trie.put(b"dog", b"puppy")
        assert trie.root_hash() == before


class TestLookup:
    """Tests for put() and get()."""

    def test_get_present(self):
        trie = _build(PUPPY)
        for key, value in PUPPY.items():
            assert trie.get(key.encode()) == value.encode()

    def test_get_absent(self):
        trie = _build(PUPPY)
        assert trie.get(b"d") is None
        assert trie.get(b"dogs") is None
        assert trie.get(b"cat") is None
        assert Trie().get(b"anything") is None

    def test_value_in_branch_slot(self):
        """Test a key that is a prefix of another is stored in the value slot."""
        trie = _build({"do": "verb", "dog": "puppy"})
        assert trie.get(b"do") == b"verb"
        assert trie.get(b"dog") == b"puppy"

    def test_empty_value_rejected(self):
        with pytest.raises(ValueError):
            Trie().put(b"k", b"")

    def test_unresolved_node_raises(self):
        """Test lookups through a HashNode report a trie defect."""
        trie = Trie(root=ShortNode((1,), HashNode(keccak256(b"x"))))
        with pytest.raises(UnexpectedHashReferenceException):
            trie.get(b"\x10")


class TestStructure:
    """Tests for node shapes produced by insertion."""

    def test_two_children_make_duo(self):
        """Test a branch with two nibble children is a DuoNode."""
        trie = Trie()
        trie.put(b"\x01", b"a")
        trie.put(b"\x02", b"b")
        assert isinstance(trie.root, ShortNode)
        assert trie.root.key == (0,)
        assert isinstance(trie.root.val, DuoNode)

    def test_third_child_makes_full(self):
        trie = Trie()
        for key in (b"\x01", b"\x02", b"\x03"):
            trie.put(key, b"v")
        assert isinstance(trie.root.val, FullNode)

    def test_duo_root_matches_full_root(self):
        """Test DuoNode compaction does not change the commitment."""
        trie = Trie()
        trie.put(b"\x01", b"a")
        trie.put(b"\x02", b"b")
        full_trie = Trie(root=ShortNode(trie.root.key, trie.root.val.to_full()))
        assert trie.root_hash() == full_trie.root_hash()

    def test_immutable_nodes_shared(self):
        """Test inserting does not disturb a previously captured root."""
        trie = _build(DOGS)
        snapshot = Trie(root=trie.root)
        trie.put(b"cat", b"meow")
        assert snapshot.get(b"cat") is None
        assert snapshot.root_hash() == _build(DOGS).root_hash()


class TestAccounts:
    """Tests for put_account()."""

    def test_account_value_is_encoding(self):
        trie = Trie()
        account = Account(nonce=1, balance=100)
        key = keccak256(b"addr")
        trie.put_account(key, account)
        assert trie.get(key) == account.encode()

    def test_storage_root_is_attached(self):
        """Test the stored account commits to its storage trie."""
        storage = _build(DOGS)
        trie = Trie()
        key = keccak256(b"contract")
        stored = trie.put_account(key, Account(nonce=1), storage=storage)

        assert stored.storage_root == storage.root_hash()
        assert Account.decode(trie.get(key)).storage_root == storage.root_hash()
        leaf = trie.root
        assert isinstance(leaf.val, AccountNode)
        assert leaf.val.storage is storage.root

    def test_account_without_storage(self):
        trie = Trie()
        stored = trie.put_account(keccak256(b"eoa"), Account(balance=5))
        assert stored.storage_root == EMPTY_ROOT
        assert trie.root.val.storage is None
