"""
Bencodex bridge - Bencodex binary codec with a lossless JSON mapping.

Bencodex is a typed superset of bencode that adds booleans, null and
explicit Unicode text, with a canonical dictionary key order so that equal
values always encode to identical bytes.
"""

__version__ = "1.0.0"

from .models import (
    BencodexBinary,
    BencodexBoolean,
    BencodexDictionary,
    BencodexKey,
    BencodexList,
    BencodexNull,
    BencodexNumber,
    BencodexText,
    BencodexValue,
    canonical_key,
    compare_keys,
    to_key,
    to_native,
    to_value,
)
from .decoder import BencodexDecoder, decode, decode_from
from .encoder import BencodexEncoder, encode, encode_to
from .json_bridge import JSONBridge, from_json, from_json_string, to_json
from .types import (
    BencodexError,
    BinaryEncoding,
    DecodeError,
    DecodeErrorReason,
    DecodeOptions,
    DecodeResult,
    JsonDecodeError,
    JsonDecodeErrorReason,
    JsonEncodeOptions,
)

__all__ = [
    "BencodexBinary",
    "BencodexBoolean",
    "BencodexDictionary",
    "BencodexKey",
    "BencodexList",
    "BencodexNull",
    "BencodexNumber",
    "BencodexText",
    "BencodexValue",
    "canonical_key",
    "compare_keys",
    "to_key",
    "to_native",
    "to_value",
    "BencodexDecoder",
    "decode",
    "decode_from",
    "BencodexEncoder",
    "encode",
    "encode_to",
    "JSONBridge",
    "from_json",
    "from_json_string",
    "to_json",
    "BencodexError",
    "BinaryEncoding",
    "DecodeError",
    "DecodeErrorReason",
    "DecodeOptions",
    "DecodeResult",
    "JsonDecodeError",
    "JsonDecodeErrorReason",
    "JsonEncodeOptions",
]
