"""Data models for the Bencodex bridge."""

from .value import (
    BencodexType,
    BencodexBinary,
    BencodexText,
    BencodexBoolean,
    BencodexNumber,
    BencodexList,
    BencodexDictionary,
    BencodexNull,
    BencodexKey,
    BencodexValue,
    digits_to_number,
    is_key,
    number_to_digits,
)
from .key_order import canonical_key, compare_keys, sort_keys
from .conversion import to_key, to_value, to_native

__all__ = [
    "BencodexType",
    "BencodexBinary",
    "BencodexText",
    "BencodexBoolean",
    "BencodexNumber",
    "BencodexList",
    "BencodexDictionary",
    "BencodexNull",
    "BencodexKey",
    "BencodexValue",
    "is_key",
    "number_to_digits",
    "digits_to_number",
    "canonical_key",
    "compare_keys",
    "sort_keys",
    "to_key",
    "to_value",
    "to_native",
]
