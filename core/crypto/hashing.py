"""
Hashing Utilities
Keccak-256 hashing and hex helpers for trie commitments.

This module provides:
- Keccak-256 hashing for raw bytes (the trie's digest function)
- Well-known empty-trie and empty-code digests
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Digests are always 32 bytes
- All operations are deterministic
"""
from __future__ import annotations

import rlp
from eth_utils import keccak


# Length of every trie digest in bytes
HASH_LENGTH: int = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(data)


# Root of a trie with no entries: keccak256(rlp(b""))
EMPTY_ROOT: bytes = keccak256(rlp.encode(b""))

# Code hash of an account without code: keccak256(b"")
EMPTY_CODE_HASH: bytes = keccak256(b"")

# All-zero digest, used by some clients in place of the empty constants
ZERO_HASH: bytes = b"\x00" * HASH_LENGTH


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str, allow_odd: bool = False) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix
        allow_odd: Left-pad an odd number of digits with a zero instead
                   of rejecting it (JSON-RPC quantities such as "0x1")

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith(("0x", "0X")):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        if not allow_odd:
            raise ValueError(
                f"Hex string must have even length after 0x prefix, "
                f"got length {len(hex_content)}"
            )
        hex_content = "0" + hex_content

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def to_hash32(data: bytes) -> bytes:
    """
    Fit bytes into a 32-byte word.

    Shorter input is left-padded with zeros; longer input keeps its
    trailing 32 bytes.
    """
    if len(data) >= HASH_LENGTH:
        return data[-HASH_LENGTH:]
    return data.rjust(HASH_LENGTH, b"\x00")


def int_to_big_endian(value: int) -> bytes:
    """Minimal big-endian encoding of a non-negative integer (0 -> b'')."""
    if value < 0:
        raise ValueError(f"Value must be non-negative, got {value}")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


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
