"""Column-oriented batches of (attribute, primary key) pairs for the tree index."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

_DASHES = "----------------------------------------\n"
_ENTRY_BYTES = 4 * 2


@dataclass
class GpuBTreeInput:
    keys: list[int] = field(default_factory=list)
    values: list[int] = field(default_factory=list)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, int]]) -> GpuBTreeInput:
        batch = cls()
        for key, value in pairs:
            batch.keys.append(key)
            batch.values.append(value)
        return batch

    def __len__(self) -> int:
        return len(self.keys)

    def describe(self, detailed: bool = False) -> str:
        """Return a listing of the pairs: all of them, or the first and last five."""
        size = len(self)
        pairs = list(zip(self.keys, self.values))
        lines = ["\n[GpuBTreeInput] Data statistics:\n", f"Total number of key-value pairs: {size}\n"]
        if detailed:
            lines.append("\nDetailed data:\n")
            lines.extend(f"  {k / 10000.0:.4f} -> {v}\n" for k, v in pairs)
        else:
            lines.append("\nFirst 5 key-value pairs:\n")
            lines.extend(f"  {k / 10000.0:g} -> {v}\n" for k, v in pairs[:5])
            if size > 10:
                lines.append("  ...\n")
                lines.append("Last 5 key-value pairs:\n")
                lines.extend(f"  {k / 10000.0:g} -> {v}\n" for k, v in pairs[size - 5:])
        lines.append("\n")
        return "".join(lines)

    def stats(self) -> str:
        """Return a report of the batch size, memory footprint and value ranges."""
        size = len(self)
        lines = [
            "\n[GpuBTreeInput] Detailed statistics:\n",
            _DASHES,
            "Data volume statistics:\n",
            f"  Total number of key-value pairs: {size}\n",
            f"  Memory usage: {size * _ENTRY_BYTES / 1024.0:g} KB\n",
        ]
        if size:
            min_key, max_key = self.key_range()
            min_val, max_val = self.value_range()
            lines.append("\nValue range:\n")
            lines.append(f"  Key range: [{min_key / 10000.0:g}, {max_key / 10000.0:g}]\n")
            lines.append(f"  Value range: [{min_val}, {max_val}]\n")
        lines.append(_DASHES)
        return "".join(lines)

    def key_range(self) -> tuple[int, int]:
        """Return (min, max) of the keys, or (0, 0) when empty."""
        if not self.keys:
            return (0, 0)
        return (min(self.keys), max(self.keys))

    def value_range(self) -> tuple[int, int]:
        """Return (min, max) of the values, or (0, 0) when empty."""
        if not self.keys:
            return (0, 0)
        return (min(self.values), max(self.values))

    def validate(self) -> bool:
        """Check that keys and values line up; warn on empty or unsorted data."""
        if len(self.keys) != len(self.values):
            log.error("keys and values size mismatch")
            return False
        if not self.keys:
            log.warning("data is empty")
            return True
        if any(later < earlier for earlier, later in zip(self.keys, self.keys[1:])):
            log.warning("keys are not sorted")
        return True