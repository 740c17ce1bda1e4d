"""Canonical ordering of dictionary keys.

Binary keys sort before text keys. Binary keys compare by their raw bytes,
text keys by their UTF-8 encoding, both lexicographically with a strict
prefix sorting first. Encoders must emit dictionary entries in this order
for independent implementations to produce identical bytes.
"""

from typing import Any, Iterable, List, Tuple

BINARY_KEY_RANK = 0
TEXT_KEY_RANK = 1


def canonical_key(key: Any) -> Tuple[int, bytes]:
    """
    Return the sort key of a dictionary key.

    Args:
        key: A ``BencodexBinary``/``BencodexText`` key, or raw ``bytes``/``str``

    Returns:
        Tuple of (rank, bytes) whose natural ordering is the canonical order

    Raises:
        TypeError: If ``key`` is neither binary nor text
    """
    raw = getattr(key, "value", key)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return BINARY_KEY_RANK, bytes(raw)
    if isinstance(raw, str):
        return TEXT_KEY_RANK, raw.encode("utf-8")
    raise TypeError(f"dictionary keys must be binary or text, got {type(key).__name__}")


def compare_keys(left: Any, right: Any) -> int:
    """Three-way comparison of two keys: -1, 0 or 1."""
    left_key = canonical_key(left)
    right_key = canonical_key(right)
    return (left_key > right_key) - (left_key < right_key)


def sort_keys(keys: Iterable[Any]) -> List[Any]:
    """Return ``keys`` sorted in canonical order."""
    return sorted(keys, key=canonical_key)
