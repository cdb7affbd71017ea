"""
Core cryptographic utilities.

Keccak-256 hashing and the digest constants used by trie commitments.
"""
from .hashing import (
    HASH_LENGTH,
    EMPTY_ROOT,
    EMPTY_CODE_HASH,
    ZERO_HASH,
    keccak256,
    to_hex,
    from_hex,
    to_hash32,
    int_to_big_endian,
)

__all__ = [
    "HASH_LENGTH",
    "EMPTY_ROOT",
    "EMPTY_CODE_HASH",
    "ZERO_HASH",
    "keccak256",
    "to_hex",
    "from_hex",
    "to_hash32",
    "int_to_big_endian",
]
