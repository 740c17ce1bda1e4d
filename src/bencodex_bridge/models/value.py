"""Value model: the typed tree a Bencodex document decodes to."""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, Iterator, Optional, Tuple, Union

from ..types import ValueKind
from .key_order import canonical_key


class BencodexType:
    """Base class for all Bencodex value types."""

    kind: ClassVar[ValueKind]


@dataclass(frozen=True)
class BencodexBinary(BencodexType):
    """An arbitrary byte sequence. Also usable as a dictionary key."""

    value: bytes
    kind: ClassVar[ValueKind] = ValueKind.BINARY

    def __post_init__(self):
        if isinstance(self.value, (bytearray, memoryview)):
            object.__setattr__(self, "value", bytes(self.value))
        elif not isinstance(self.value, bytes):
            raise TypeError(f"BencodexBinary requires bytes, got {type(self.value).__name__}")


@dataclass(frozen=True)
class BencodexText(BencodexType):
    """A Unicode string, transmitted as UTF-8. Also usable as a dictionary key."""

    value: str
    kind: ClassVar[ValueKind] = ValueKind.TEXT

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError(f"BencodexText requires str, got {type(self.value).__name__}")
        try:
            self.value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError("BencodexText must hold valid Unicode scalar values") from exc


@dataclass(frozen=True)
class BencodexBoolean(BencodexType):
    """A boolean."""

    value: bool
    kind: ClassVar[ValueKind] = ValueKind.BOOLEAN

    def __post_init__(self):
        if not isinstance(self.value, bool):
            raise TypeError(f"BencodexBoolean requires bool, got {type(self.value).__name__}")


@dataclass(frozen=True)
class BencodexNumber(BencodexType):
    """An arbitrary-precision signed integer."""

    value: int
    kind: ClassVar[ValueKind] = ValueKind.NUMBER

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"BencodexNumber requires int, got {type(self.value).__name__}")

    def __repr__(self) -> str:
        return f"BencodexNumber(value={number_to_digits(self.value)})"


@dataclass(frozen=True)
class BencodexNull(BencodexType):
    """The unit value."""

    kind: ClassVar[ValueKind] = ValueKind.NULL


@dataclass(frozen=True)
class BencodexList(BencodexType):
    """An ordered sequence of values."""

    value: Tuple['BencodexValue', ...] = ()
    kind: ClassVar[ValueKind] = ValueKind.LIST

    def __post_init__(self):
        if isinstance(self.value, (str, bytes, bytearray, Mapping)):
            raise TypeError(f"BencodexList requires a sequence of values, got {type(self.value).__name__}")
        items = tuple(self.value)
        for item in items:
            if not isinstance(item, BencodexType):
                raise TypeError(f"BencodexList items must be Bencodex values, got {type(item).__name__}")
        object.__setattr__(self, "value", items)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BencodexList):
            return NotImplemented
        return _structurally_equal(self, other)

    def __hash__(self) -> int:
        return _structural_hash(self)

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self) -> Iterator['BencodexValue']:
        return iter(self.value)

    def __getitem__(self, index):
        return self.value[index]


@dataclass(frozen=True)
class BencodexDictionary(BencodexType):
    """
    A mapping from keys to values.

    Entries are kept as a tuple of ``(key, value)`` pairs sorted in canonical
    key order, so two dictionaries built from the same pairs in any order
    are equal and encode identically. A key may appear only once.
    """

    entries: Tuple[Tuple['BencodexKey', 'BencodexValue'], ...] = ()
    kind: ClassVar[ValueKind] = ValueKind.DICTIONARY

    def __post_init__(self):
        source = self.entries
        pairs = list(source.items()) if isinstance(source, Mapping) else [tuple(pair) for pair in source]

        for pair in pairs:
            if len(pair) != 2:
                raise TypeError("BencodexDictionary entries must be (key, value) pairs")
            key, value = pair
            if not isinstance(key, (BencodexBinary, BencodexText)):
                raise TypeError(f"BencodexDictionary keys must be binary or text, got {type(key).__name__}")
            if not isinstance(value, BencodexType):
                raise TypeError(f"BencodexDictionary values must be Bencodex values, got {type(value).__name__}")

        pairs.sort(key=lambda pair: canonical_key(pair[0]))
        for previous, current in zip(pairs, pairs[1:]):
            if previous[0] == current[0]:
                raise ValueError(f"duplicate dictionary key: {current[0]!r}")

        object.__setattr__(self, "entries", tuple(pairs))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BencodexDictionary):
            return NotImplemented
        return _structurally_equal(self, other)

    def __hash__(self) -> int:
        return _structural_hash(self)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator['BencodexKey']:
        return (key for key, _ in self.entries)

    def __contains__(self, key: Any) -> bool:
        return any(existing == key for existing, _ in self.entries)

    def __getitem__(self, key: 'BencodexKey') -> 'BencodexValue':
        for existing, value in self.entries:
            if existing == key:
                return value
        raise KeyError(key)

    def get(self, key: 'BencodexKey', default: Optional['BencodexValue'] = None) -> Optional['BencodexValue']:
        try:
            return self[key]
        except KeyError:
            return default

    def keys(self) -> Tuple['BencodexKey', ...]:
        return tuple(key for key, _ in self.entries)

    def values(self) -> Tuple['BencodexValue', ...]:
        return tuple(value for _, value in self.entries)

    def items(self) -> Tuple[Tuple['BencodexKey', 'BencodexValue'], ...]:
        return self.entries


BencodexKey = Union[BencodexBinary, BencodexText]

BencodexValue = Union[
    BencodexBinary,
    BencodexText,
    BencodexBoolean,
    BencodexNumber,
    BencodexList,
    BencodexDictionary,
    BencodexNull,
]


def is_key(value: Any) -> bool:
    """Return True if ``value`` may be used as a dictionary key."""
    return isinstance(value, (BencodexBinary, BencodexText))


def number_to_digits(number: int) -> str:
    """
    Spell an integer in decimal, with a leading ``-`` when negative.

    Goes through :class:`decimal.Decimal`, which is not subject to the
    interpreter's limit on int/str conversion length.
    """
    return str(Decimal(number))


def digits_to_number(digits: str) -> int:
    """
    Parse ``[-]DIGITS`` of any length.

    Raises:
        ValueError: If ``digits`` is not an optional minus sign followed by
            at least one ASCII digit
    """
    body = digits[1:] if digits.startswith("-") else digits
    if not body or not body.isascii() or not body.isdigit():
        raise ValueError(f"invalid integer literal: {digits!r}")
    return int(Decimal(digits))


def _structurally_equal(left: BencodexType, right: BencodexType) -> bool:
    # Walks pairs with an explicit stack so nesting depth is unbounded.
    pending = [(left, right)]
    while pending:
        a, b = pending.pop()
        if a is b:
            continue
        if type(a) is not type(b):
            return False
        if isinstance(a, BencodexList):
            if len(a.value) != len(b.value):
                return False
            pending.extend(zip(a.value, b.value))
        elif isinstance(a, BencodexDictionary):
            if len(a.entries) != len(b.entries):
                return False
            for (key_a, item_a), (key_b, item_b) in zip(a.entries, b.entries):
                if key_a != key_b:
                    return False
                pending.append((item_a, item_b))
        elif a != b:
            return False
    return True


def _structural_hash(value: BencodexType) -> int:
    # Pre-order scalars plus container sizes identify the tree.
    parts = []
    pending = [value]
    while pending:
        node = pending.pop()
        if isinstance(node, BencodexList):
            parts.append((ValueKind.LIST, len(node.value)))
            pending.extend(reversed(node.value))
        elif isinstance(node, BencodexDictionary):
            parts.append((ValueKind.DICTIONARY, len(node.entries)))
            for key, item in reversed(node.entries):
                pending.append(item)
                pending.append(key)
        else:
            parts.append(node)
    return hash(tuple(parts))

