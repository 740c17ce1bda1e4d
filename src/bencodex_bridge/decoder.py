"""
Bencodex decoder.

Grammar, dispatched on the byte at the cursor:

    d  dictionary   {key value}* e
    l  list         {value}* e
    u  text         u DIGITS : <that many UTF-8 bytes>
    i  number       i [-] DIGITS e
    0-9 binary      DIGITS : <that many bytes>
    t / f           boolean
    n               null
"""

import logging
from typing import Dict, List, Optional, Union

from .models.key_order import canonical_key
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
    is_key,
)
from .types import DecodeError, DecodeErrorReason, DecodeOptions, DecodeResult, DecoderInterface

_DICTIONARY = ord("d")
_LIST = ord("l")
_TEXT = ord("u")
_NUMBER = ord("i")
_END = ord("e")
_COLON = ord(":")
_MINUS = ord("-")
_ZERO = ord("0")
_NINE = ord("9")
_TRUE = ord("t")
_FALSE = ord("f")
_NULL = ord("n")

Buffer = Union[bytes, bytearray, memoryview]


class _Frame:
    """An open container; ``start`` is the offset of its lead byte."""

    def __init__(self, start: int):
        self.start = start


class _ListFrame(_Frame):
    """An open list waiting for its items and terminator."""

    def __init__(self, start: int):
        super().__init__(start)
        self.items: List[BencodexValue] = []

    @property
    def accepts_end(self) -> bool:
        return True

    def add(self, value: BencodexValue, offset: int) -> None:
        self.items.append(value)

    def build(self) -> BencodexList:
        return BencodexList(tuple(self.items))


class _DictionaryFrame(_Frame):
    """An open dictionary alternating between key and value positions."""

    def __init__(self, start: int, strict: bool):
        super().__init__(start)
        self.strict = strict
        self.entries: Dict[BencodexKey, BencodexValue] = {}
        self.pending_key: Optional[BencodexKey] = None
        self.last_key: Optional[BencodexKey] = None

    @property
    def accepts_end(self) -> bool:
        # a dangling key must be followed by a value, not 'e'
        return self.pending_key is None

    def add(self, value: BencodexValue, offset: int) -> None:
        if self.pending_key is None:
            if not is_key(value):
                raise DecodeError(
                    DecodeErrorReason.INVALID_VALUE,
                    offset=offset,
                    message=f"dictionary key at offset {offset} must be binary or text, "
                            f"got {value.kind.value}",
                )
            if value in self.entries:
                raise DecodeError(
                    DecodeErrorReason.INVALID_VALUE,
                    offset=offset,
                    message=f"duplicate dictionary key at offset {offset}",
                )
            if (self.strict and self.last_key is not None
                    and canonical_key(value) < canonical_key(self.last_key)):
                raise DecodeError(
                    DecodeErrorReason.INVALID_VALUE,
                    offset=offset,
                    message=f"dictionary key at offset {offset} is out of canonical order",
                )
            self.pending_key = value
            return

        self.entries[self.pending_key] = value
        self.last_key = self.pending_key
        self.pending_key = None

    def build(self) -> BencodexDictionary:
        return BencodexDictionary(tuple(self.entries.items()))


class _Parser:
    """Cursor over one buffer. Created per decode call so decoders share no state."""

    def __init__(self, data: Buffer, options: DecodeOptions):
        self.data = bytes(data)
        self.length = len(self.data)
        self.options = options
        self.position = 0

    # --------------------------
    # Low-level utilities
    # --------------------------

    def _peek(self) -> int:
        if self.position >= self.length:
            raise self._truncated()
        return self.data[self.position]

    def _truncated(self) -> DecodeError:
        return DecodeError(
            DecodeErrorReason.INVALID_VALUE,
            offset=self.position,
            message=f"unexpected end of input at offset {self.position}",
        )

    def _unexpected(self, offset: int) -> DecodeError:
        return DecodeError(DecodeErrorReason.UNEXPECTED_TOKEN, token=self.data[offset], offset=offset)

    def _expect(self, token: int) -> None:
        if self._peek() != token:
            raise self._unexpected(self.position)
        self.position += 1

    def _read_integer(self) -> int:
        """Read ``[-]DIGITS`` at the cursor as an unbounded integer."""
        start = self.position
        if self._peek() == _MINUS:
            self.position += 1
            if self.position >= self.length:
                raise self._truncated()

        digits_start = self.position
        while self.position < self.length and _ZERO <= self.data[self.position] <= _NINE:
            self.position += 1

        if self.position == digits_start:
            if self.position >= self.length:
                raise self._truncated()
            raise self._unexpected(start)

        if self.options.strict:
            digits = self.data[digits_start:self.position]
            if len(digits) > 1 and digits[0] == _ZERO:
                raise self._unexpected(digits_start)
            if digits == b"0" and digits_start != start:
                raise self._unexpected(start)

        return digits_to_number(self.data[start:self.position].decode("ascii"))

    def _read_payload(self, length: int) -> bytes:
        end = self.position + length
        if end > self.length:
            raise DecodeError(
                DecodeErrorReason.INVALID_VALUE,
                offset=self.position,
                message=f"declared length {length} at offset {self.position} exceeds "
                        f"the {self.length - self.position} remaining bytes",
            )
        payload = self.data[self.position:end]
        self.position = end
        return payload

    # --------------------------
    # Parsing functions
    # --------------------------

    def parse(self, start: int) -> BencodexValue:
        if start < 0:
            raise ValueError(f"start offset must be non-negative, got {start}")
        self.position = start

        stack: List[_Frame] = []
        while True:
            if stack and stack[-1].accepts_end and self._peek() == _END:
                self.position += 1
                frame = stack.pop()
                value, offset = frame.build(), frame.start
            else:
                offset = self.position
                item = self._parse_item()
                if isinstance(item, _Frame):
                    stack.append(item)
                    continue
                value = item

            if not stack:
                return value
            stack[-1].add(value, offset)

    def _parse_item(self) -> Union[BencodexValue, _Frame]:
        start = self.position
        lead = self._peek()

        if lead == _DICTIONARY:
            self.position += 1
            return _DictionaryFrame(start, self.options.strict)
        if lead == _LIST:
            self.position += 1
            return _ListFrame(start)
        if lead == _TEXT:
            return self._parse_text()
        if lead == _NUMBER:
            return self._parse_number()
        if _ZERO <= lead <= _NINE:
            return self._parse_binary()
        if lead == _TRUE:
            self.position += 1
            return BencodexBoolean(True)
        if lead == _FALSE:
            self.position += 1
            return BencodexBoolean(False)
        if lead == _NULL:
            self.position += 1
            return BencodexNull()

        raise self._unexpected(start)

    def _parse_binary(self) -> BencodexBinary:
        length = self._read_integer()
        self._expect(_COLON)
        return BencodexBinary(self._read_payload(length))

    def _parse_text(self) -> BencodexText:
        self.position += 1  # skip 'u'
        sign = self.position
        length = self._read_integer()
        if length < 0:
            raise DecodeError(DecodeErrorReason.UNEXPECTED_TOKEN, token=_MINUS, offset=sign + 1)
        self._expect(_COLON)

        payload_start = self.position
        payload = self._read_payload(length)
        try:
            return BencodexText(payload.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise DecodeError(
                DecodeErrorReason.INVALID_VALUE,
                offset=payload_start + exc.start,
                message=f"text at offset {payload_start} is not valid UTF-8: {exc.reason}",
            ) from exc

    def _parse_number(self) -> BencodexNumber:
        self.position += 1  # skip 'i'
        number = self._read_integer()
        self._expect(_END)
        return BencodexNumber(number)


class BencodexDecoder(DecoderInterface):
    """
    Decodes Bencodex bytes into values.

    Decoding walks containers with an explicit stack, so nesting depth is
    bounded by memory rather than the interpreter's recursion limit. The
    first error aborts the decode and carries the offset of the fault.
    """

    def __init__(self, options: Optional[DecodeOptions] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the decoder.

        Args:
            options: Decoding options (lenient by default)
            logger: Optional logger instance
        """
        self.options = options or DecodeOptions()
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, data: Buffer) -> BencodexValue:
        """
        Decode the value at the start of ``data``.

        Bytes after the decoded value are ignored; use :meth:`decode_from`
        to learn how many bytes were consumed.

        Raises:
            DecodeError: If the bytes are not a valid Bencodex value
        """
        return self.decode_from(data, 0).value

    def decode_from(self, data: Buffer, start: int = 0) -> DecodeResult:
        """
        Decode one value beginning at ``start``.

        Args:
            data: Buffer holding the encoded value
            start: Offset of the value's lead byte

        Returns:
            DecodeResult with the value and the number of bytes it occupied

        Raises:
            DecodeError: If the bytes are not a valid Bencodex value
            ValueError: If ``start`` is negative
        """
        parser = _Parser(data, self.options)
        try:
            value = parser.parse(start)
        except DecodeError as exc:
            self.logger.debug(f"Decoding failed: {exc}")
            raise

        consumed = parser.position - start
        self.logger.debug(f"Decoded {value.kind.value} value from {consumed} bytes at offset {start}")
        if parser.position < parser.length:
            self.logger.debug(f"{parser.length - parser.position} trailing bytes left undecoded")
        return DecodeResult(value=value, consumed=consumed)


def decode(data: Buffer, strict: bool = False) -> BencodexValue:
    """Convenience function to decode Bencodex data."""
    return BencodexDecoder(DecodeOptions(strict=strict)).decode(data)


def decode_from(data: Buffer, start: int = 0, strict: bool = False) -> DecodeResult:
    """Convenience function to decode one value at ``start`` and report its length."""
    return BencodexDecoder(DecodeOptions(strict=strict)).decode_from(data, start)
