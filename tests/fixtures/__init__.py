"""
Test fixtures package for trie proof tests.

This package provides factory functions for creating test objects:
- common.py: addresses, slots, state and storage tries, eth_getProof results

Usage:
    from fixtures import make_state, make_proof_result

    def test_something():
        state = make_state()
        result = make_proof_result(state, state.contract, slots=[1])
"""

from .common import (
    StateFixture,
    make_address,
    make_slot,
    make_storage_trie,
    make_state,
    make_proof_result,
)

__all__ = [
    "StateFixture",
    "make_address",
    "make_slot",
    "make_storage_trie",
    "make_state",
    "make_proof_result",
]
