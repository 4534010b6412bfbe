"""Immutable memtable built from the sorted contents of a flushed skip list."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from secidx.gpu_input import GpuBTreeInput

_FOOTER = "---------------------------------------\n"


class SecondaryReadOnlyMemTable:
    """Frozen sequence of (attribute, primary key) pairs in attribute order."""

    def __init__(self, data: Iterable[tuple[int, int]]) -> None:
        self._data: list[tuple[int, int]] = [(k, v) for k, v in data]

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self._data)

    def get(self, key: int) -> list[int]:
        """Return the primary keys stored under ``key``."""
        result: list[int] = []
        for attribute, value in self._data:
            if attribute == key:
                result.append(value)
            elif attribute > key:
                break
        return result

    def range_query(self, lower: int, upper: int) -> list[int]:
        """Return the primary keys whose attribute lies in [lower, upper]."""
        result: list[int] = []
        for attribute, value in self._data:
            if lower <= attribute <= upper:
                result.append(value)
            elif attribute > upper:
                break
        return result

    def flush(self) -> GpuBTreeInput:
        """Return the pairs as a column-oriented batch."""
        return GpuBTreeInput.from_pairs(self._data)

    def all_data(self) -> list[tuple[int, int]]:
        return list(self._data)

    def render(self) -> str:
        """Return a listing of all pairs, attributes scaled down by 10000."""
        lines = [f"\n[SecondaryReadOnlyMemTable] total = {len(self._data)}\n"]
        lines.extend(f"  {key / 10000.0:.4f}  ->  {value}\n" for key, value in self._data)
        lines.append(_FOOTER)
        return "".join(lines)