"""
Key Path Encoding
Nibble paths and the compact (hex-prefix) path encoding used inside nodes.

A key path is a tuple of nibbles in 0..15, two per key byte, high nibble
first. A path that names a complete key carries the TERMINATOR nibble (16)
as its last element. Leaf nodes store terminated paths; extension nodes
never do.

Compact encoding packs a path back into bytes. The first nibble holds
two flags:
    bit 1 (value 2): path is terminated (leaf)
    bit 0 (value 1): path has odd length
Even-length paths are preceded by a zero padding nibble so that the
flag nibble and padding fill the first byte.
"""
from __future__ import annotations

from typing import Sequence


TERMINATOR: int = 16

KeyPath = tuple[int, ...]


def bytes_to_nibbles(data: bytes) -> KeyPath:
    """Expand bytes into nibbles, without a terminator."""
    nibbles: list[int] = []
    for byte in data:
        nibbles.append(byte >> 4)
        nibbles.append(byte & 0x0F)
    return tuple(nibbles)


def keybytes_to_hex(data: bytes) -> KeyPath:
    """Expand a key into a terminated nibble path."""
    return bytes_to_nibbles(data) + (TERMINATOR,)


def has_terminator(path: Sequence[int]) -> bool:
    return len(path) > 0 and path[-1] == TERMINATOR


def strip_terminator(path: KeyPath) -> KeyPath:
    if has_terminator(path):
        return path[:-1]
    return path


def hex_to_keybytes(path: KeyPath) -> bytes:
    """
    Pack a nibble path back into key bytes.

    Raises:
        ValueError: If the path has odd length once the terminator is removed
    """
    path = strip_terminator(path)
    if len(path) % 2 != 0:
        raise ValueError(f"Cannot pack odd-length path of {len(path)} nibbles")
    return bytes((path[i] << 4) | path[i + 1] for i in range(0, len(path), 2))


def common_prefix_length(a: Sequence[int], b: Sequence[int]) -> int:
    """Length of the longest shared prefix of two paths."""
    length = min(len(a), len(b))
    for i in range(length):
        if a[i] != b[i]:
            return i
    return length


def hex_to_compact(path: KeyPath) -> bytes:
    """
    Compact-encode a nibble path.

    Example:
        >>> hex_to_compact((1, 2, 3, 4, 5, 16)).hex()
        '312345'
    """
    terminator = 1 if has_terminator(path) else 0
    path = strip_terminator(path)
    flag = terminator * 2

    if len(path) % 2 == 1:
        prefix = (flag + 1, path[0])
        rest = path[1:]
    else:
        prefix = (flag, 0)
        rest = path

    nibbles = prefix + rest
    return bytes((nibbles[i] << 4) | nibbles[i + 1] for i in range(0, len(nibbles), 2))


def compact_to_hex(data: bytes) -> KeyPath:
    """
    Decode a compact-encoded path, restoring the terminator for leaf paths.

    Raises:
        ValueError: If the input is empty, the flag nibble is unknown, or
                   the padding nibble of an even-length path is non-zero
    """
    if len(data) == 0:
        raise ValueError("compact path must not be empty")

    nibbles = bytes_to_nibbles(data)
    flag = nibbles[0]
    if flag > 3:
        raise ValueError(f"invalid compact path flag nibble {flag}")

    odd = flag & 1
    if not odd and nibbles[1] != 0:
        raise ValueError(f"non-zero padding nibble {nibbles[1]} in even-length compact path")

    path = nibbles[2 - odd:]
    if flag & 2:
        path = path + (TERMINATOR,)
    return path


__all__ = [
    "TERMINATOR",
    "KeyPath",
    "bytes_to_nibbles",
    "keybytes_to_hex",
    "has_terminator",
    "strip_terminator",
    "hex_to_keybytes",
    "common_prefix_length",
    "hex_to_compact",
    "compact_to_hex",
]
