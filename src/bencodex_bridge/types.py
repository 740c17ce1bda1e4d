"""Core type definitions for the Bencodex bridge."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, List, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .models.value import BencodexValue


class ValueKind(Enum):
    """Enumeration of Bencodex value kinds."""
    BINARY = "binary"
    TEXT = "text"
    BOOLEAN = "boolean"
    NUMBER = "number"
    LIST = "list"
    DICTIONARY = "dictionary"
    NULL = "null"


class BinaryEncoding(Enum):
    """How binary values are spelled inside JSON strings."""
    BASE64 = "base64"
    HEX = "hex"


class DecodeErrorReason(Enum):
    """Why decoding Bencodex bytes failed."""
    INVALID_VALUE = "invalid_value"
    UNEXPECTED_TOKEN = "unexpected_token"


class JsonDecodeErrorReason(Enum):
    """Why mapping JSON to a Bencodex value failed."""
    INVALID_JSON_STRING = "invalid_json_string"
    INVALID_JSON = "invalid_json"


class ErrorType(Enum):
    """Enumeration of error categories surfaced to the command line."""
    DECODE = "decode"
    JSON_SYNTAX = "json_syntax"
    JSON_STRUCTURE = "json_structure"
    IO = "io"
    USAGE = "usage"


@dataclass(frozen=True)
class DecodeOptions:
    """Options for the binary decoder.

    When ``strict`` is set, integer literals with leading zeros or a negative
    zero are rejected and dictionary keys must arrive in canonical order.
    """
    strict: bool = False


@dataclass(frozen=True)
class JsonEncodeOptions:
    """Options for encoding Bencodex values as JSON text."""
    binary_encoding: BinaryEncoding = BinaryEncoding.BASE64
    indent: Optional[int] = None
    ensure_ascii: bool = False


@dataclass(frozen=True)
class DecodeResult:
    """A decoded value together with the number of bytes it occupied."""
    value: 'BencodexValue'
    consumed: int


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]


@dataclass
class ErrorResponse:
    """How a failure should be reported to the caller of the CLI."""
    error_type: ErrorType
    exit_code: int
    message: str
    location: Optional[str] = None


class BencodexError(Exception):
    """Base class for all errors raised by the codec and the JSON bridge."""


class DecodeError(BencodexError):
    """Raised when bytes do not form a valid Bencodex value."""

    def __init__(self, reason: DecodeErrorReason, token: Optional[int] = None,
                 offset: Optional[int] = None, message: Optional[str] = None):
        self.reason = reason
        self.token = token
        self.offset = offset
        super().__init__(message or self._default_message())

    def _default_message(self) -> str:
        if self.reason == DecodeErrorReason.UNEXPECTED_TOKEN:
            return f"unexpected token {bytes([self.token])!r} at offset {self.offset}"
        if self.offset is not None:
            return f"invalid Bencodex value at offset {self.offset}"
        return "invalid Bencodex value"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DecodeError):
            return NotImplemented
        return (self.reason, self.token, self.offset) == (other.reason, other.token, other.offset)

    def __hash__(self) -> int:
        return hash((self.reason, self.token, self.offset))

    def __repr__(self) -> str:
        return (f"DecodeError(reason={self.reason.name}, token={self.token!r}, "
                f"offset={self.offset!r})")


class JsonDecodeError(BencodexError):
    """Raised when JSON cannot be mapped to a Bencodex value."""

    def __init__(self, reason: JsonDecodeErrorReason, message: str,
                 location: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.location = location


# Abstract base classes for interfaces

class DecoderInterface(ABC):
    """Abstract interface for binary decoders."""

    @abstractmethod
    def decode(self, data: Union[bytes, bytearray, memoryview]) -> 'BencodexValue':
        """Decode exactly one value starting at offset 0."""
        pass

    @abstractmethod
    def decode_from(self, data: Union[bytes, bytearray, memoryview],
                    start: int = 0) -> DecodeResult:
        """Decode one value at ``start`` and report how many bytes it used."""
        pass


class EncoderInterface(ABC):
    """Abstract interface for binary encoders."""

    @abstractmethod
    def encode(self, value: 'BencodexValue') -> bytes:
        """Encode a value to its canonical bytes."""
        pass

    @abstractmethod
    def write(self, value: 'BencodexValue', sink: BinaryIO) -> int:
        """Write the canonical bytes of a value to ``sink``."""
        pass


class JSONBridgeInterface(ABC):
    """Abstract interface for the JSON bridge."""

    @abstractmethod
    def to_json(self, value: 'BencodexValue') -> str:
        """Render a value as JSON text."""
        pass

    @abstractmethod
    def from_json(self, data: Any) -> 'BencodexValue':
        """Map an already parsed JSON document to a value."""
        pass

    @abstractmethod
    def from_json_string(self, text: Union[str, bytes]) -> 'BencodexValue':
        """Parse JSON text and map it to a value."""
        pass
