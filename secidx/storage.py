"""An ordered, persistent key-value store and helpers to export its contents."""

from __future__ import annotations

import sqlite3
import sys
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from secidx.json_val import parse, to_text

_DB_FILE = "store.sqlite"
_SEPARATOR = "-----------------------------\n"


class KVStore:
    """String keys and values kept in bytewise key order under a directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(
            str(self.path / _DB_FILE), check_same_thread=False, isolation_level=None
        )
        with self._lock:
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=OFF")
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key BLOB PRIMARY KEY, value BLOB NOT NULL)"
            )

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (key.encode(), value.encode()),
            )

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None when absent."""
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key.encode(),)
            ).fetchone()
        return None if row is None else bytes(row[0]).decode()

    def _fetch(self, query: str, params: tuple = ()) -> list[tuple[str, str]]:
        with self._lock:
            rows = self._conn.execute(query, params).fetchall()
        return [(bytes(k).decode(), bytes(v).decode()) for k, v in rows]

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield all pairs from the first key to the last."""
        yield from self._fetch("SELECT key, value FROM kv ORDER BY key")

    def items_reversed(self, start_key: str | None = None) -> Iterator[tuple[str, str]]:
        """Yield pairs backwards, from the last key or from the first key >= ``start_key``."""
        if start_key is None:
            yield from self._fetch("SELECT key, value FROM kv ORDER BY key DESC")
            return
        with self._lock:
            row = self._conn.execute(
                "SELECT key FROM kv WHERE key >= ? ORDER BY key LIMIT 1",
                (start_key.encode(),),
            ).fetchone()
        if row is None:
            return
        yield from self._fetch(
            "SELECT key, value FROM kv WHERE key <= ? ORDER BY key DESC", (row[0],)
        )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> KVStore:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _field(document, name: str) -> str:
    if isinstance(document, dict) and name in document:
        return to_text(document[name])
    return ""


def print_parsed_json(value_str: str, out: TextIO | None = None) -> None:
    """Write the ``Temp`` and ``Press`` fields of a JSON document."""
    out = out if out is not None else sys.stdout
    document = parse(value_str)
    out.write(f"  Temp : {_field(document, 'Temp')}\n")
    out.write(f"  Press: {_field(document, 'Press')}\n")


def _write_entries(pairs, out: TextIO) -> None:
    for key, value in pairs:
        out.write(f"Key: {key}\n")
        out.write(f"Value (Raw): {value}\n")
        print_parsed_json(value, out)
        out.write(_SEPARATOR)


def export_all_forward(db: KVStore, out: TextIO | None = None) -> None:
    out = out if out is not None else sys.stdout
    out.write("=== Export Forward (Head to Tail) ===\n")
    _write_entries(db.items(), out)


def export_all_reverse(db: KVStore, out: TextIO | None = None) -> None:
    out = out if out is not None else sys.stdout
    out.write("=== Export Reverse (Tail to Head) ===\n")
    _write_entries(db.items_reversed(), out)


def export_from_key_reverse(db: KVStore, start_key: str, out: TextIO | None = None) -> None:
    out = out if out is not None else sys.stdout
    out.write(f'=== Export from Key "{start_key}" Reverse ===\n')
    _write_entries(db.items_reversed(start_key), out)


def count_entries(db: KVStore) -> int:
    return sum(1 for _ in db.items())