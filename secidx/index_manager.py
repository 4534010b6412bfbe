"""Secondary index over a mutable memtable, read-only tables and a tree index.

Inserts go into an active skip-list memtable. When it reaches the flush
threshold it is swapped for a fresh one and, on a worker pool, turned into a
read-only table, then into a column batch, then merged into the tree index.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from secidx.btree_index import BTreeIndex
from secidx.gpu_input import GpuBTreeInput
from secidx.memtable import SecondaryMemTable
from secidx.readonly_memtable import SecondaryReadOnlyMemTable

log = logging.getLogger(__name__)

_DASHES = "----------------------------------------\n"


def _prune(futures: list[Future]) -> None:
    futures[:] = [future for future in futures if not future.done()]


class HostSecondaryIndexManager:
    def __init__(self, threshold: int = 1000, workers: int = 4) -> None:
        self._pool = ThreadPoolExecutor(max_workers=workers)
        self._lock = threading.RLock()
        self._active = SecondaryMemTable()
        self._readonly_tables: list[SecondaryReadOnlyMemTable] = []
        self._threshold = threshold
        self._pending_flushes: list[Future] = []
        self._gpu_inputs: list[GpuBTreeInput] = []
        self._pending_conversions: list[Future] = []
        self._btree = BTreeIndex()
        self._pending_inserts: list[Future] = []
        self._closed = False

    # writes

    def insert(self, attr: int, pkey: int) -> None:
        """Index ``pkey`` under attribute value ``attr``."""
        with self._lock:
            self._active.put(attr, pkey)
            if len(self._active) >= self._threshold:
                self.force_flush()

    def force_flush(self) -> None:
        """Swap in a fresh memtable and move the old one down in the background."""
        with self._lock:
            old_table = self._active
            self._active = SecondaryMemTable()
            self._async_flush(old_table)

    def _submit(self, pending: list[Future], task) -> None:
        with self._lock:
            _prune(pending)
            if self._closed:
                raise RuntimeError("enqueue on stopped ThreadPool")
            pending.append(self._pool.submit(task))

    def _async_flush(self, old_table: SecondaryMemTable) -> None:
        def task() -> None:
            readonly = SecondaryReadOnlyMemTable(old_table.flush())
            with self._lock:
                self._readonly_tables.append(readonly)
                count = len(self._readonly_tables)
            log.info(
                "[Async Flush] Completed a SecondaryIndexMemtable→ReadonlyMemtable "
                "conversion, current number of readonly tables: %d",
                count,
            )
            old_table.clear()
            self._async_convert_to_gpu(readonly)

        self._submit(self._pending_flushes, task)

    def _async_convert_to_gpu(self, readonly: SecondaryReadOnlyMemTable) -> None:
        def task() -> None:
            batch = GpuBTreeInput.from_pairs(readonly.all_data())
            if not batch.validate():
                log.error("[GPU Conversion] Failed!")
                return
            with self._lock:
                self._gpu_inputs.append(batch)
                count = len(self._gpu_inputs)
                self._readonly_tables = [
                    table for table in self._readonly_tables if table is not readonly
                ]
            log.info(
                "[GPU Conversion] Completed a ReadOnlyMemTable→gpu_index_host "
                "conversion, current number of gpu_index_host data blocks: %d",
                count,
            )
            log.debug("%s", batch.stats())
            self._async_insert_to_btree(batch)

        self._submit(self._pending_conversions, task)

    def _async_insert_to_btree(self, batch: GpuBTreeInput) -> None:
        def task() -> None:
            log.info("[GPU B-tree] Start inserting data block, size: %d", len(batch))
            self._btree.insert_from_input(batch)
            log.info(
                "[GPU B-tree] Data block insertion completed, current memory usage: %.3f GiB",
                self._btree.memory_usage(),
            )
            with self._lock:
                self._gpu_inputs = [item for item in self._gpu_inputs if item != batch]

        self._submit(self._pending_inserts, task)

    # reads

    def _snapshot(self) -> tuple[SecondaryMemTable, list[SecondaryReadOnlyMemTable]]:
        with self._lock:
            return self._active, list(self._readonly_tables)

    def _wait(self, pending: list[Future]) -> None:
        with self._lock:
            futures = list(pending)
        for future in futures:
            future.result()

    def query(self, attr: int) -> list[int]:
        """Return primary keys indexed under ``attr`` across all tiers."""
        active, tables = self._snapshot()
        result = list(active.get(attr))
        for table in tables:
            result.extend(table.get(attr))
        self._wait(self._pending_inserts)
        found = self._btree.search(attr)
        if found != 0:
            result.append(found)
        return result

    def range_query(self, lower: int, upper: int) -> list[int]:
        """Return primary keys whose attribute lies in [lower, upper] across all tiers."""
        active, tables = self._snapshot()
        result = list(active.range_query(lower, upper))
        for table in tables:
            result.extend(table.range_query(lower, upper))
        self._wait(self._pending_inserts)
        result.extend(value for _, value in self._btree.range_query(lower, upper) if value != 0)
        return result

    def memtable_size(self) -> int:
        with self._lock:
            return len(self._active)

    def readonly_table_count(self) -> int:
        with self._lock:
            return len(self._readonly_tables)

    def gpu_inputs(self) -> list[GpuBTreeInput]:
        """Return the batches converted but not yet merged into the tree."""
        with self._lock:
            return list(self._gpu_inputs)

    def gpu_range_query(self, lower: int, upper: int) -> list[tuple[int, int]]:
        """Wait for background work, then range-query the tree index alone."""
        self.wait_for_pending_operations()
        return self._btree.range_query(lower, upper)

    def all_readonly_data(self) -> list[tuple[int, int]]:
        _, tables = self._snapshot()
        return [pair for table in tables for pair in table.all_data()]

    def wait_for_pending_operations(self) -> None:
        """Block until every flush, conversion and tree insert has finished."""
        self._wait(self._pending_flushes)
        self._wait(self._pending_conversions)
        self._wait(self._pending_inserts)

    # reporting

    def status_report(self) -> str:
        with self._lock:
            lines = [
                "\n[HostSecondaryIndexManager] Status Report:\n",
                _DASHES,
                f"SecondaryIndexMemtable size: {len(self._active)}/{self._threshold}\n",
                f"Number of ReadonlyMemtables: {len(self._readonly_tables)}\n",
                f"Pending flush tasks: {len(self._pending_flushes)}\n",
                f"Pending GPU conversion tasks: {len(self._pending_conversions)}\n",
                f"Pending GPU insert tasks: {len(self._pending_inserts)}\n",
            ]
        lines.append(f"GPU B-tree memory usage: {self._btree.memory_usage():.3f} GiB\n")
        lines.append(_DASHES)
        return "".join(lines)

    def render_all(self) -> str:
        active, tables = self._snapshot()
        parts = ["\n[HostSecondaryIndexManager] === SecondaryIndexMemtable ===\n", active.render()]
        for number, table in enumerate(tables):
            parts.append(f"\n[HostSecondaryIndexManager] === ReadonlyMemtable{number} ===\n")
            parts.append(table.render())
        return "".join(parts)

    # lifecycle

    def close(self) -> None:
        """Finish all background work and stop the worker pool."""
        if self._closed:
            return
        self.wait_for_pending_operations()
        with self._lock:
            self._closed = True
        self._pool.shutdown(wait=True)

    def __enter__(self) -> HostSecondaryIndexManager:
        return self

    def __exit__(self, *args) -> None:
        self.close()