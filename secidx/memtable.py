"""Mutable skip-list memtable mapping attribute values to primary keys."""

from __future__ import annotations

import random
from collections.abc import Iterator

_FOOTER = "---------------------------------------\n"
_PROMOTE_PROBABILITY = 0.5


class _Node:
    __slots__ = ("key", "value", "forward")

    def __init__(self, key: int, value: int, level: int) -> None:
        self.key = key
        self.value = value
        self.forward: list[_Node | None] = [None] * level


class SecondaryMemTable:
    """Skip list of (attribute, primary key) pairs, kept in attribute order.

    Duplicate attributes are allowed; among equal attributes the most
    recently inserted pair comes first.
    """

    def __init__(self, max_level: int = 16, rng: random.Random | None = None) -> None:
        self.max_level = max_level
        self._rng = rng if rng is not None else random.Random()
        self._reset()

    def _reset(self) -> None:
        self._head = _Node(0, 0, self.max_level)
        self._level = 1
        self._count = 0

    def _random_level(self) -> int:
        level = 1
        while self._rng.random() < _PROMOTE_PROBABILITY and level < self.max_level:
            level += 1
        return level

    def put(self, attribute: int, primary_key: int) -> None:
        """Insert a pair, placing it before any existing pairs with the same attribute."""
        update: list[_Node] = [self._head] * self.max_level
        node = self._head
        for i in range(self._level - 1, -1, -1):
            nxt = node.forward[i]
            while nxt is not None and nxt.key < attribute:
                node = nxt
                nxt = node.forward[i]
            update[i] = node

        level = self._random_level()
        if level > self._level:
            self._level = level

        new_node = _Node(attribute, primary_key, level)
        for i in range(level):
            new_node.forward[i] = update[i].forward[i]
            update[i].forward[i] = new_node
        self._count += 1

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[tuple[int, int]]:
        node = self._head.forward[0]
        while node is not None:
            yield (node.key, node.value)
            node = node.forward[0]

    def get(self, key: int) -> list[int]:
        """Return the primary keys stored under ``key``."""
        result: list[int] = []
        for attribute, value in self:
            if attribute == key:
                result.append(value)
            elif attribute > key:
                break
        return result

    def range_query(self, lower: int, upper: int) -> list[int]:
        """Return the primary keys whose attribute lies in [lower, upper]."""
        result: list[int] = []
        for attribute, value in self:
            if lower <= attribute <= upper:
                result.append(value)
            elif attribute > upper:
                break
        return result

    def flush(self) -> list[tuple[int, int]]:
        """Return every pair in order, leaving the table unchanged."""
        return list(self)

    def clear(self) -> None:
        self._reset()

    def render(self) -> str:
        """Return a listing of all pairs, attributes scaled down by 10000."""
        lines = [f"\n[SecondaryMemTable] total = {self._count}\n"]
        lines.extend(f"  {key / 10000.0:.4f}  ->  {value}\n" for key, value in self)
        lines.append(_FOOTER)
        return "".join(lines)