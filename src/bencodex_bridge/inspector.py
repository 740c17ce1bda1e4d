"""Human-readable rendering and structure statistics for value trees."""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .encoder import BencodexEncoder
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
from .types import ValueKind


@dataclass
class ValueStatistics:
    """Statistics about a value tree."""
    kind: str
    encoded_size: int
    max_depth: int = 0
    total_keys: int = 0
    total_items: int = 0
    kind_counts: Dict[str, int] = field(default_factory=lambda: {kind.value: 0 for kind in ValueKind})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ValueInspector:
    """
    Renders value trees for people and summarizes their shape.

    The rendering is meant for reading, not for parsing back; use the JSON
    bridge for a lossless text form.
    """

    def __init__(self, indent: str = "  ", logger: Optional[logging.Logger] = None):
        """
        Initialize the inspector.

        Args:
            indent: Indentation unit for nested containers
            logger: Optional logger instance
        """
        self.indent = indent
        self.logger = logger or logging.getLogger(__name__)
        self.encoder = BencodexEncoder(self.logger)

    def render(self, value: BencodexValue) -> str:
        """
        Render ``value`` as indented text.

        Binary appears as a bytes literal (``b'..'``), text as a quoted
        string, numbers in decimal and the rest as ``true``/``false``/``null``.
        """
        lines: List[str] = []
        # Entries are either pending (value, depth, prefix) triples or
        # closing lines already formatted.
        pending: List[Union[str, Tuple[BencodexValue, int, str]]] = [(value, 0, "")]
        while pending:
            entry = pending.pop()
            if isinstance(entry, str):
                lines.append(entry)
                continue

            node, depth, prefix = entry
            pad = self.indent * depth
            if isinstance(node, BencodexList):
                if not node.value:
                    lines.append(f"{pad}{prefix}[]")
                    continue
                lines.append(f"{pad}{prefix}[")
                pending.append(f"{pad}]")
                pending.extend((item, depth + 1, "") for item in reversed(node.value))
            elif isinstance(node, BencodexDictionary):
                if not node.entries:
                    lines.append(f"{pad}{prefix}{{}}")
                    continue
                lines.append(f"{pad}{prefix}{{")
                pending.append(f"{pad}}}")
                pending.extend(
                    (item, depth + 1, f"{self.render_scalar(key)}: ") for key, item in reversed(node.items())
                )
            else:
                lines.append(f"{pad}{prefix}{self.render_scalar(node)}")
        return "\n".join(lines)

    @staticmethod
    def render_scalar(value: BencodexValue) -> str:
        """Render a non-container value on a single line."""
        if isinstance(value, BencodexBinary):
            return repr(value.value)
        if isinstance(value, BencodexText):
            return json.dumps(value.value, ensure_ascii=False)
        if isinstance(value, BencodexNumber):
            return number_to_digits(value.value)
        if isinstance(value, BencodexBoolean):
            return "true" if value.value else "false"
        if isinstance(value, BencodexNull):
            return "null"
        raise TypeError(f"Not a scalar Bencodex value: {type(value).__name__}")

    def get_statistics(self, value: BencodexValue) -> ValueStatistics:
        """
        Get detailed statistics about the value tree.

        Args:
            value: Value to analyze

        Returns:
            ValueStatistics with per-kind counts, depth and encoded size
        """
        stats = ValueStatistics(
            kind=value.kind.value,
            encoded_size=len(self.encoder.encode(value)),
        )

        pending = [(value, 0)]
        while pending:
            node, depth = pending.pop()
            stats.kind_counts[node.kind.value] += 1
            stats.max_depth = max(stats.max_depth, depth)

            if isinstance(node, BencodexList):
                stats.total_items += len(node)
                pending.extend((item, depth + 1) for item in node)
            elif isinstance(node, BencodexDictionary):
                stats.total_keys += len(node)
                pending.extend((item, depth + 1) for item in node.values())

        self.logger.debug(f"Analyzed {sum(stats.kind_counts.values())} nodes, max depth {stats.max_depth}")
        return stats
