"""
Bencodex encoder.

Every value has exactly one encoding: lengths and numbers in plain decimal,
dictionary entries in canonical key order.
"""

import io
import logging
from typing import BinaryIO, Iterator, List, Optional, Union

from .models.value import (
    BencodexBinary,
    BencodexBoolean,
    BencodexDictionary,
    BencodexList,
    BencodexNull,
    BencodexNumber,
    BencodexText,
    BencodexValue,
    number_to_digits,
)
from .types import EncoderInterface

_END = object()


class BencodexEncoder(EncoderInterface):
    """
    Encodes values into canonical Bencodex bytes.

    Content never makes encoding fail. The only errors are those raised by
    the output sink, which propagate immediately and leave whatever was
    already written in place.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the encoder.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def encode(self, value: BencodexValue) -> bytes:
        """Encode ``value`` and return the bytes."""
        buffer = io.BytesIO()
        self.write(value, buffer)
        return buffer.getvalue()

    def write(self, value: BencodexValue, sink: BinaryIO) -> int:
        """
        Write the encoding of ``value`` to ``sink``.

        Args:
            value: Value to encode
            sink: Object with a ``write(bytes)`` method

        Returns:
            Number of bytes written

        Raises:
            TypeError: If ``value`` contains something that is not a Bencodex value
        """
        written = 0
        for chunk in self.iter_chunks(value):
            sink.write(chunk)
            written += len(chunk)

        self.logger.debug(f"Encoded {value.kind.value} value into {written} bytes")
        return written

    def iter_chunks(self, value: BencodexValue) -> Iterator[bytes]:
        """
        Yield the encoding of ``value`` piece by piece.

        Containers are walked with an explicit stack; ``_END`` on the stack
        marks where a container terminator is due.
        """
        pending: List[Union[BencodexValue, object]] = [value]
        while pending:
            item = pending.pop()

            if item is _END:
                yield b"e"
            elif isinstance(item, BencodexBinary):
                yield encode_length(item.value)
                yield item.value
            elif isinstance(item, BencodexText):
                payload = item.value.encode("utf-8")
                yield b"u" + encode_length(payload)
                yield payload
            elif isinstance(item, BencodexNumber):
                yield encode_number(item.value)
            elif isinstance(item, BencodexBoolean):
                yield b"t" if item.value else b"f"
            elif isinstance(item, BencodexNull):
                yield b"n"
            elif isinstance(item, BencodexList):
                yield b"l"
                pending.append(_END)
                pending.extend(reversed(item.value))
            elif isinstance(item, BencodexDictionary):
                # entries are held in canonical key order
                yield b"d"
                pending.append(_END)
                for key, entry in reversed(item.items()):
                    pending.append(entry)
                    pending.append(key)
            else:
                raise TypeError(f"Cannot encode object of type {type(item).__name__}")


# ------------------------------------------------------------
#   Encoding primitives
# ------------------------------------------------------------

def encode_length(payload: bytes) -> bytes:
    """Encodes the length prefix of a payload (e.g., 4:)."""
    return str(len(payload)).encode("ascii") + b":"


def encode_number(n: int) -> bytes:
    """Encodes an integer to Bencodex bytes (e.g., i-42e)."""
    return b"i" + number_to_digits(n).encode("ascii") + b"e"


def encode(value: BencodexValue) -> bytes:
    """Convenience function to encode a value to bytes."""
    return BencodexEncoder().encode(value)


def encode_to(value: BencodexValue, sink: BinaryIO) -> int:
    """Convenience function to write a value's encoding to ``sink``."""
    return BencodexEncoder().write(value, sink)
