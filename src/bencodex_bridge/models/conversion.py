"""Conversions between plain Python objects and Bencodex values."""

from collections.abc import Mapping
from typing import Any, List

from .value import (
    BencodexBinary,
    BencodexBoolean,
    BencodexDictionary,
    BencodexKey,
    BencodexList,
    BencodexNull,
    BencodexNumber,
    BencodexText,
    BencodexType,
    BencodexValue,
)


def to_key(obj: Any) -> BencodexKey:
    """
    Convert ``bytes``-like objects or ``str`` to a dictionary key.

    Existing binary and text values pass through unchanged.

    Raises:
        TypeError: If ``obj`` cannot be a key
    """
    if isinstance(obj, (BencodexBinary, BencodexText)):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BencodexBinary(bytes(obj))
    if isinstance(obj, str):
        return BencodexText(obj)
    raise TypeError(f"Cannot use object of type {type(obj).__name__} as a Bencodex key")


def to_value(obj: Any) -> BencodexValue:
    """
    Convert a Python object into a Bencodex value.

    ``None``, ``bool``, ``int``, bytes-like objects, ``str``, lists, tuples and
    mappings (recursively) are accepted. Bencodex values pass through.

    Raises:
        TypeError: If ``obj`` (or something nested in it) has no Bencodex form
    """
    if isinstance(obj, BencodexType):
        return obj
    if obj is None:
        return BencodexNull()
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return BencodexBoolean(obj)
    if isinstance(obj, int):
        return BencodexNumber(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BencodexBinary(bytes(obj))
    if isinstance(obj, str):
        return BencodexText(obj)
    if isinstance(obj, Mapping):
        return BencodexDictionary(tuple((to_key(k), to_value(v)) for k, v in obj.items()))
    if isinstance(obj, (list, tuple)):
        return BencodexList(tuple(to_value(item) for item in obj))
    raise TypeError(f"Cannot convert object of type {type(obj).__name__} to a Bencodex value")


def to_native(value: BencodexValue) -> Any:
    """
    Convert a Bencodex value back into plain Python objects.

    Binary becomes ``bytes``, text ``str``, numbers ``int``, booleans
    ``bool``, null ``None``, lists ``list`` and dictionaries ``dict`` keyed
    by ``bytes``/``str`` in canonical order. Containers are filled from an
    explicit stack, so nesting depth is not limited by the interpreter.
    """
    root: List[Any] = []
    pending = [(value, root, None)]
    while pending:
        node, parent, slot = pending.pop()
        if isinstance(node, (BencodexBinary, BencodexText, BencodexBoolean, BencodexNumber)):
            converted = node.value
        elif isinstance(node, BencodexNull):
            converted = None
        elif isinstance(node, BencodexList):
            converted = []
            pending.extend((item, converted, None) for item in reversed(node.value))
        elif isinstance(node, BencodexDictionary):
            converted = {}
            pending.extend((item, converted, key.value) for key, item in reversed(node.items()))
        else:
            raise TypeError(f"Not a Bencodex value: {type(node).__name__}")

        if slot is None:
            parent.append(converted)
        else:
            parent[slot] = converted
    return root[0]
