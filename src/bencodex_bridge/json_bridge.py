"""
Lossless mapping between Bencodex values and JSON.

JSON has one string type and floating-point numbers, so every string that
stands for a value carries a marker:

    "b64:..."   binary, base64
    "0x..."     binary, hexadecimal
    "\\ufeff..."  text (newlines travel as JSON's own \\n escape)
    "-123"      number, as decimal digits

Booleans, null, arrays and objects map to their JSON counterparts; object
keys use the same binary/text markers.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .models.value import (
    BencodexBinary,
    BencodexBoolean,
    BencodexDictionary,
    BencodexKey,
    BencodexList,
    BencodexNull,
    BencodexNumber,
    BencodexText,
    BencodexValue,
    digits_to_number,
    number_to_digits,
)
from .types import (
    BinaryEncoding,
    JSONBridgeInterface,
    JsonDecodeError,
    JsonDecodeErrorReason,
    JsonEncodeOptions,
)

BASE64_PREFIX = "b64:"
HEX_PREFIX = "0x"
TEXT_PREFIX = "\ufeff"

_NUMBER_CHARACTERS = frozenset("0123456789-")


class _NumericLiteral:
    """A JSON number exactly as written; never converted, only rejected."""

    __slots__ = ("text",)

    def __init__(self, text: str):
        self.text = text


def _reject_constant(name: str) -> Any:
    raise JsonDecodeError(
        JsonDecodeErrorReason.INVALID_JSON_STRING,
        f"Invalid JSON syntax: {name} is not a JSON value",
    )


class _Path:
    """Location of a node in a JSON document, rendered as ``$[0]["key"]`` on demand."""

    __slots__ = ("segment", "parent")

    def __init__(self, segment: str = "$", parent: Optional['_Path'] = None):
        self.segment = segment
        self.parent = parent

    def child(self, segment: str) -> '_Path':
        return _Path(segment, self)

    def __str__(self) -> str:
        segments = []
        node: Optional[_Path] = self
        while node is not None:
            segments.append(node.segment)
            node = node.parent
        return "".join(reversed(segments))


class _ArrayFrame:
    def __init__(self, data: List[Any], path: _Path):
        self.items = enumerate(data)
        self.path = path
        self.values: List[BencodexValue] = []

    def next_child(self) -> Optional[Tuple[Any, _Path]]:
        entry = next(self.items, None)
        if entry is None:
            return None
        index, item = entry
        return item, self.path.child(f"[{index}]")

    def add(self, value: BencodexValue) -> None:
        self.values.append(value)

    def build(self) -> BencodexList:
        return BencodexList(tuple(self.values))


class _ObjectFrame:
    def __init__(self, bridge: 'JSONBridge', data: Dict[str, Any], path: _Path):
        self.bridge = bridge
        self.items = iter(data.items())
        self.path = path
        self.entries: Dict[BencodexKey, BencodexValue] = {}
        self.pending_key: Optional[BencodexKey] = None

    def next_child(self) -> Optional[Tuple[Any, _Path]]:
        entry = next(self.items, None)
        if entry is None:
            return None
        raw_key, raw_value = entry
        item_path = self.path.child(f"[{json.dumps(raw_key, ensure_ascii=False)}]")
        key = self.bridge._decode_key(raw_key, item_path)
        if key is None:
            raise self.bridge._invalid(f"Object key is neither binary nor text: {raw_key!r}", item_path)
        if key in self.entries:
            raise self.bridge._invalid(f"Object key {raw_key!r} duplicates another key", item_path)
        self.pending_key = key
        return raw_value, item_path

    def add(self, value: BencodexValue) -> None:
        self.entries[self.pending_key] = value

    def build(self) -> BencodexDictionary:
        return BencodexDictionary(tuple(self.entries.items()))


class JSONBridge(JSONBridgeInterface):
    """
    Converts values to JSON text and back.

    The JSON form is a second serialization of the value tree; it does not
    go through the binary encoding. Both directions walk containers with an
    explicit stack, so nesting depth is not limited by the interpreter.
    """

    def __init__(self, options: Optional[JsonEncodeOptions] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the bridge.

        Args:
            options: Options controlling JSON output
            logger: Optional logger instance
        """
        self.options = options or JsonEncodeOptions()
        self.logger = logger or logging.getLogger(__name__)

    # --------------------------
    # Value -> JSON
    # --------------------------

    def to_json(self, value: BencodexValue) -> str:
        """
        Render ``value`` as JSON text.

        Args:
            value: Value to render

        Returns:
            JSON text, compact unless the options set an indent
        """
        text = "".join(self.iter_json_chunks(value))
        self.logger.debug(f"Rendered {value.kind.value} value as {len(text)} characters of JSON")
        return text

    def iter_json_chunks(self, value: BencodexValue) -> Iterator[str]:
        """
        Yield the JSON text of ``value`` piece by piece.

        The text matches ``json.dumps`` of :meth:`to_json_object` with the
        configured indent; ``json.dumps`` itself is only used on scalars.
        """
        key_separator = ":" if self.options.indent is None else ": "
        # Entries are either (value, depth) pairs or literal text.
        pending: List[Union[str, Tuple[BencodexValue, int]]] = [(value, 0)]
        while pending:
            entry = pending.pop()
            if isinstance(entry, str):
                yield entry
                continue

            node, depth = entry
            if isinstance(node, BencodexList):
                if not node.value:
                    yield "[]"
                    continue
                yield "["
                pending.append(self._newline(depth) + "]")
                for index in range(len(node.value) - 1, -1, -1):
                    pending.append((node.value[index], depth + 1))
                    pending.append(self._item_prefix(index, depth + 1))
            elif isinstance(node, BencodexDictionary):
                if not node.entries:
                    yield "{}"
                    continue
                yield "{"
                pending.append(self._newline(depth) + "}")
                for index in range(len(node.entries) - 1, -1, -1):
                    key, item = node.entries[index]
                    pending.append((item, depth + 1))
                    pending.append(
                        self._item_prefix(index, depth + 1) + self._dumps(self.encode_key(key)) + key_separator
                    )
            else:
                yield self._dumps(self._scalar_to_json(node))

    def to_json_object(self, value: BencodexValue) -> Any:
        """Map ``value`` to the plain objects ``json.dumps`` serializes."""
        root: List[Any] = []
        pending = [(value, root, None)]
        while pending:
            node, parent, slot = pending.pop()
            if isinstance(node, BencodexList):
                converted = []
                pending.extend((item, converted, None) for item in reversed(node.value))
            elif isinstance(node, BencodexDictionary):
                converted = {}
                pending.extend((item, converted, self.encode_key(key)) for key, item in reversed(node.items()))
            else:
                converted = self._scalar_to_json(node)

            if slot is None:
                parent.append(converted)
            else:
                parent[slot] = converted
        return root[0]

    def encode_key(self, key: BencodexKey) -> str:
        """Spell a binary or text value as a marked JSON string."""
        if isinstance(key, BencodexText):
            return TEXT_PREFIX + key.value
        if self.options.binary_encoding == BinaryEncoding.HEX:
            return HEX_PREFIX + key.value.hex()
        return BASE64_PREFIX + base64.b64encode(key.value).decode("ascii")

    def _scalar_to_json(self, value: BencodexValue) -> Any:
        if isinstance(value, (BencodexBinary, BencodexText)):
            return self.encode_key(value)
        if isinstance(value, BencodexNumber):
            return number_to_digits(value.value)
        if isinstance(value, BencodexBoolean):
            return value.value
        if isinstance(value, BencodexNull):
            return None
        raise TypeError(f"Cannot convert object of type {type(value).__name__} to JSON")

    def _dumps(self, obj: Any) -> str:
        return json.dumps(obj, ensure_ascii=self.options.ensure_ascii)

    def _newline(self, depth: int) -> str:
        if self.options.indent is None:
            return ""
        return "\n" + " " * (self.options.indent * depth)

    def _item_prefix(self, index: int, depth: int) -> str:
        return ("," if index else "") + self._newline(depth)

    # --------------------------
    # JSON -> Value
    # --------------------------

    def parse_json(self, text: Union[str, bytes]) -> Any:
        """
        Parse JSON text without interpreting it.

        Numeric literals are kept as written so that :meth:`from_json` can
        reject them by location; ``NaN`` and the infinities are not JSON.

        Raises:
            JsonDecodeError: ``INVALID_JSON_STRING`` if the text is not JSON
                or nests too deeply to parse
        """
        try:
            return json.loads(
                text,
                parse_int=_NumericLiteral,
                parse_float=_NumericLiteral,
                parse_constant=_reject_constant,
            )
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise JsonDecodeError(
                JsonDecodeErrorReason.INVALID_JSON_STRING,
                f"Invalid JSON syntax: {e}",
            ) from e
        except RecursionError as e:
            raise JsonDecodeError(
                JsonDecodeErrorReason.INVALID_JSON_STRING,
                "Invalid JSON syntax: document nests too deeply to parse",
            ) from e

    def from_json_string(self, text: Union[str, bytes]) -> BencodexValue:
        """
        Parse JSON text and map it to a value.

        Raises:
            JsonDecodeError: ``INVALID_JSON_STRING`` if the text is not JSON,
                ``INVALID_JSON`` if the document has no Bencodex meaning
        """
        return self.from_json(self.parse_json(text))

    def from_json(self, data: Any) -> BencodexValue:
        """
        Map an already parsed JSON document to a value.

        Raises:
            JsonDecodeError: ``INVALID_JSON`` if the document has no Bencodex meaning
        """
        stack: List[Union[_ArrayFrame, _ObjectFrame]] = []
        result = self._enter(data, _Path(), stack)
        while stack:
            frame = stack[-1]
            if result is not None:
                frame.add(result)
                result = None
            child = frame.next_child()
            if child is None:
                stack.pop()
                result = frame.build()
            else:
                result = self._enter(child[0], child[1], stack)
        return result

    def _enter(self, data: Any, path: _Path,
               stack: List[Union[_ArrayFrame, _ObjectFrame]]) -> Optional[BencodexValue]:
        """Map a scalar, or open a frame for a container and return None."""
        if isinstance(data, list):
            stack.append(_ArrayFrame(data, path))
            return None
        if isinstance(data, dict):
            stack.append(_ObjectFrame(self, data, path))
            return None
        return self._scalar_from_json(data, path)

    def _scalar_from_json(self, data: Any, path: _Path) -> BencodexValue:
        if data is None:
            return BencodexNull()
        # bool before numbers: bool is an int subclass
        if isinstance(data, bool):
            return BencodexBoolean(data)
        if isinstance(data, _NumericLiteral):
            raise self._invalid(f"JSON numbers are not allowed, numbers must be strings: {data.text}", path)
        if isinstance(data, (int, float)):
            raise self._invalid(
                f"JSON numbers are not allowed, numbers must be strings: got {type(data).__name__}", path
            )
        if isinstance(data, str):
            return self._decode_string(data, path)
        raise self._invalid(f"Unsupported JSON type: {type(data).__name__}", path)

    def _decode_string(self, data: str, location: _Path) -> BencodexValue:
        key = self._decode_key(data, location)
        if key is not None:
            return key
        if data and all(character in _NUMBER_CHARACTERS for character in data):
            try:
                return BencodexNumber(digits_to_number(data))
            except ValueError:
                raise self._invalid(f"Malformed number string: {data!r}", location) from None
        raise self._invalid(f"String has no binary, text or number marker: {data!r}", location)

    def _decode_key(self, data: str, location: _Path) -> Optional[BencodexKey]:
        """Classify a marked string; None when it carries no binary/text marker."""
        if data.startswith(BASE64_PREFIX):
            try:
                return BencodexBinary(base64.b64decode(data[len(BASE64_PREFIX):], validate=True))
            except (binascii.Error, ValueError):
                raise self._invalid(f"Malformed base64 binary: {data!r}", location) from None
        if data.startswith(HEX_PREFIX):
            try:
                return BencodexBinary(binascii.unhexlify(data[len(HEX_PREFIX):]))
            except (binascii.Error, ValueError):
                raise self._invalid(f"Malformed hexadecimal binary: {data!r}", location) from None
        if data.startswith(TEXT_PREFIX):
            try:
                return BencodexText(data[len(TEXT_PREFIX):])
            except ValueError:
                raise self._invalid(f"Text is not valid Unicode: {data!r}", location) from None
        return None

    def _invalid(self, message: str, location: _Path) -> JsonDecodeError:
        self.logger.debug(f"JSON mapping failed at {location}: {message}")
        return JsonDecodeError(JsonDecodeErrorReason.INVALID_JSON, message, str(location))


def to_json(value: BencodexValue, options: Optional[JsonEncodeOptions] = None) -> str:
    """Convenience function to render a value as JSON text."""
    return JSONBridge(options).to_json(value)


def from_json(data: Any) -> BencodexValue:
    """Convenience function to map a parsed JSON document to a value."""
    return JSONBridge().from_json(data)


def from_json_string(text: Union[str, bytes]) -> BencodexValue:
    """Convenience function to parse JSON text into a value."""
    return JSONBridge().from_json_string(text)
