"""Ordered unique-key index that holds flushed (attribute, primary key) batches."""

from __future__ import annotations

import threading
from bisect import bisect_left, bisect_right
from collections.abc import Iterable

from secidx.gpu_input import GpuBTreeInput

_UINT32_MAX = 2**32 - 1
_ENTRY_BYTES = 4 * 2
_GIB = float(2**30)
_PREVIEW = 5


def _check_uint32(number: int, what: str) -> None:
    if not 0 <= number <= _UINT32_MAX:
        raise ValueError(f"{what} {number} is not an unsigned 32-bit integer")


class BTreeIndex:
    """Map from unsigned 32-bit keys to unsigned 32-bit values in key order.

    A later insert of an existing key replaces its value. A lookup of a
    missing key yields 0, so 0 is never a meaningful stored value.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: dict[int, int] = {}
        self._keys: list[int] = []

    def insert_from_input(self, batch: GpuBTreeInput) -> None:
        """Insert every pair of a column-oriented batch."""
        if len(batch.keys) != len(batch.values):
            raise ValueError("keys and values size mismatch")
        self.insert_batch(zip(batch.keys, batch.values))

    def insert_batch(self, entries: Iterable[tuple[int, int]]) -> None:
        """Insert pairs in order; for repeated keys the last value wins."""
        pairs = list(entries)
        for key, value in pairs:
            _check_uint32(key, "key")
            _check_uint32(value, "value")
        with self._lock:
            before = len(self._values)
            self._values.update(pairs)
            if len(self._values) != before:
                self._keys = sorted(self._values)

    def search(self, key: int) -> int:
        """Return the value stored under ``key``, or 0 when absent."""
        with self._lock:
            return self._values.get(key, 0)

    def range_query(self, lower: int, upper: int) -> list[tuple[int, int]]:
        """Return the (key, value) pairs with lower <= key <= upper, in key order."""
        with self._lock:
            if lower > upper:
                return []
            start = bisect_left(self._keys, lower)
            stop = bisect_right(self._keys, upper)
            return [(key, self._values[key]) for key in self._keys[start:stop]]

    def memory_usage(self) -> float:
        """Return the size of the stored pairs in GiB."""
        with self._lock:
            return len(self._values) * _ENTRY_BYTES / _GIB

    def reset(self) -> None:
        with self._lock:
            self._values.clear()
            self._keys = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def render(self, detailed: bool = False) -> str:
        """Return a listing of the tree: every pair, or the first and last few."""
        with self._lock:
            pairs = [(key, self._values[key]) for key in self._keys]
        lines = [f"\n[BTreeIndex] total = {len(pairs)}\n"]
        if detailed or len(pairs) <= 2 * _PREVIEW:
            lines.extend(f"  {key} -> {value}\n" for key, value in pairs)
        else:
            lines.extend(f"  {key} -> {value}\n" for key, value in pairs[:_PREVIEW])
            lines.append("  ...\n")
            lines.extend(f"  {key} -> {value}\n" for key, value in pairs[-_PREVIEW:])
        lines.append(f"Memory usage: {len(pairs) * _ENTRY_BYTES / _GIB:.3f} GiB\n")
        return "".join(lines)