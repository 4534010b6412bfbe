"""Secondary index engine: a primary store plus an attribute index over it."""

from __future__ import annotations

import logging
import sqlite3
import warnings
from dataclasses import dataclass, field
from pathlib import Path

from secidx.index_manager import HostSecondaryIndexManager
from secidx.storage import KVStore

log = logging.getLogger(__name__)


@dataclass
class Record:
    """A primary key with the attribute values read back from the store."""

    primary_key: int
    attributes: dict[str, int] = field(default_factory=dict)


class SecondaryIndexEngine:
    """Stores primary key -> attribute and indexes attribute -> primary keys."""

    def __init__(
        self,
        db_path: str | Path,
        indexed_attribute_name: str,
        flush_threshold: int = 5,
    ) -> None:
        self._name = indexed_attribute_name
        self._store = KVStore(db_path)
        self._manager = HostSecondaryIndexManager(flush_threshold)

    @property
    def indexed_attribute_name(self) -> str:
        return self._name

    def insert_temperature(self, primary_key: int, temperature: int) -> bool:
        """Store the record and index it; return False if either step fails."""
        try:
            self._store.put(str(primary_key), str(temperature))
            self._manager.insert(temperature, primary_key)
        except (sqlite3.Error, RuntimeError, ValueError, OSError):
            return False
        return True

    def insert(self, primary_key: int, attributes: dict[str, int]) -> bool:
        """Insert using the indexed attribute taken from ``attributes``."""
        warnings.warn(
            "insert() is deprecated; use insert_temperature() instead",
            DeprecationWarning,
            stacklevel=2,
        )
        if self._name not in attributes:
            return False
        return self.insert_temperature(primary_key, attributes[self._name])

    def _fetch_record(self, primary_key: int) -> Record:
        record = Record(primary_key)
        value = self._store.get(str(primary_key))
        if value:
            try:
                record.attributes[self._name] = int(value)
            except ValueError as exc:
                log.error("Error converting value: %s", exc)
        return record

    def query_by_attribute(self, attribute_value: int) -> list[Record]:
        """Return the records whose indexed attribute equals ``attribute_value``."""
        return [self._fetch_record(pkey) for pkey in self._manager.query(attribute_value)]

    def range_query_by_attribute(self, lower: int, upper: int) -> list[Record]:
        """Return the records whose indexed attribute lies in [lower, upper]."""
        return [
            self._fetch_record(pkey) for pkey in self._manager.range_query(lower, upper)
        ]

    def status_report(self) -> str:
        return (
            "\n[SecondaryIndexEngine Status]\n"
            f"Indexed attribute: {self._name}\n"
            + self._manager.status_report()
        )

    def close(self) -> None:
        """Finish background index work and close the store."""
        self._manager.close()
        self._store.close()

    def __enter__(self) -> SecondaryIndexEngine:
        return self

    def __exit__(self, *args) -> None:
        self.close()