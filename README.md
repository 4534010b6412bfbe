# secidx

`secidx` is a secondary index for a key-value store. Each record maps a primary key to one indexed attribute value, such as a temperature reading, and the package finds records by that value or by a range of values.

## How it is organised

Index entries move through three tiers:

1. **`SecondaryMemTable`** (`secidx.memtable`) is the writable tier: a skip list of `(attribute, primary key)` pairs in attribute order. Duplicate attributes are kept.
2. **`SecondaryReadOnlyMemTable`** (`secidx.readonly_memtable`) is a frozen, sorted snapshot of a memtable taken when it reaches the flush threshold.
3. **`BTreeIndex`** (`secidx.btree_index`) is an ordered in-memory map from attribute to primary key. Read-only tables are turned into `GpuBTreeInput` batches (`secidx.gpu_input`) and merged into it. It keeps one value per key: a later batch with the same attribute replaces the earlier primary key, and a lookup of a missing key returns 0.

`HostSecondaryIndexManager` (`secidx.index_manager`) owns the tiers and does the flush, conversion and merge steps on a thread pool. `SecondaryIndexEngine` (`secidx.engine`) pairs a manager with a `KVStore` (`secidx.storage`), a persistent primary key → attribute store kept in an SQLite file under a directory you choose.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Using the engine

```python
from secidx.engine import SecondaryIndexEngine

with SecondaryIndexEngine("/tmp/secidx-db", "Temperature", flush_threshold=1000) as engine:
    engine.insert_temperature(42, 215)
    engine.insert_temperature(43, 215)
    engine.insert_temperature(44, 300)

    for record in engine.query_by_attribute(215):
        print(record.primary_key, record.attributes["Temperature"])

    in_range = engine.range_query_by_attribute(200, 250)
    print(engine.status_report())
```

`insert_temperature` returns `False` if storing or indexing fails. Queries return `Record` objects whose `attributes` are read back from the store. `insert(primary_key, attributes)` is deprecated; it takes the indexed attribute from a mapping and returns `False` when the mapping lacks it.

## Working with the tiers directly

```python
from secidx.index_manager import HostSecondaryIndexManager

with HostSecondaryIndexManager(threshold=3, workers=4) as manager:
    for pkey, attr in enumerate([5, 1, 9, 5]):
        manager.insert(attr, pkey)
    manager.wait_for_pending_operations()
    print(manager.query(5))
    print(manager.range_query(1, 5))
    print(manager.render_all())
```

`force_flush()` moves the active memtable down at once. `gpu_range_query` waits for background work and then queries the tree tier alone. Background steps report their progress through the `logging` module.

## Inspecting a store

`secidx.storage` has helpers that walk a `KVStore` and write what it holds, to standard output or to a stream you pass:

- `export_all_forward` goes from the first key to the last.
- `export_all_reverse` goes from the last key to the first.
- `export_from_key_reverse` goes backwards from the first key at or after a given key.
- `count_entries` returns the number of entries.

Each value is also read as JSON with `secidx.json_val.parse`, and its `Temp` and `Press` fields are printed. `secidx.data_gen.generate_random_data` makes such documents with random readings.

## Benchmarks

```
secidx-bench-insert
secidx-bench-query
```

`secidx-bench-insert` writes random records through the engine and into a plain `KVStore`. It reports throughput, average latency and the P50/P90/P99 latencies of the engine's writes.

`secidx-bench-query` loads random records into both, then times point and range queries. On the engine these use the index. On the plain store they use a full scan.

Both commands accept these options:

- `--records`
- `--db-path`
- `--baseline-path`
- `--flush-threshold`
- `--distribution`, one of `uniform`, `poisson`, `skewed_normal` or `temporal_hotspot`.

The query benchmark also takes `--queries`, `--range-width` and `--print-results`.

The default paths are under `/opt/Leveldb_DB_DOC/`, so pass your own paths if that directory is not writable. The other distribution parameters can only be set from Python, through `DistributionConfig` (`secidx.distributions`) in `InsertBenchmarkConfig` or `QueryBenchmarkConfig`.

## What it does not do

- The index tiers live only in memory. The index is not saved to disk and is not rebuilt from the store when the engine is reopened; only the `KVStore` contents persist.
- There is no server or network interface. The package is a library plus the two benchmark commands.