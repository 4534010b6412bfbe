"""Query benchmark: the secondary index engine against a full scan of a key-value store."""

from __future__ import annotations

import argparse
import math
import random
import sys
import time
from dataclasses import dataclass, field
from typing import TextIO

from secidx.distributions import (
    DistributionConfig,
    DistributionType,
    KeyGenerator,
    describe_distribution,
)
from secidx.engine import SecondaryIndexEngine
from secidx.storage import KVStore

_ATTRIBUTE = "Temperature"
_DIVIDER = "----------------------------------------\n"
_PREVIEW = 5


@dataclass
class QueryBenchmarkConfig:
    total_records: int = 1_000_000
    query_count: int = 100
    db_path: str = "/opt/Leveldb_DB_DOC/leveldb_benchmark"
    baseline_path: str = "/opt/Leveldb_DB_DOC/leveldb_baseline"
    flush_threshold: int = 100_000
    range_width: int = 1000
    print_results: bool = False
    keys: DistributionConfig = field(default_factory=DistributionConfig)


@dataclass
class QueryBenchmarkResult:
    index_point_qps: float = 0.0
    index_point_latency: float = 0.0
    index_range_qps: float = 0.0
    index_range_latency: float = 0.0
    baseline_point_qps: float = 0.0
    baseline_point_latency: float = 0.0
    baseline_range_qps: float = 0.0
    baseline_range_latency: float = 0.0


def _divide(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    return math.nan if numerator == 0 else math.copysign(math.inf, numerator)


def _latency_ms(start_ns: int, end_ns: int) -> float:
    return ((end_ns - start_ns) // 1000) / 1000.0


def _whole_ms(start_ns: int, end_ns: int) -> int:
    return (end_ns - start_ns) // 1_000_000


class QueryBenchmark:
    """Loads random records into both stores, then times point and range queries."""

    def __init__(
        self,
        config: QueryBenchmarkConfig,
        out: TextIO | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self._out = out if out is not None else sys.stdout
        self._keys = KeyGenerator(config.keys, rng)
        self._engine: SecondaryIndexEngine | None = None
        self.point_queries: list[int] = []
        self.range_queries: list[tuple[int, int]] = []
        self._generate_query_parameters()

    def _generate_query_parameters(self) -> None:
        top = self.config.keys.secondary_key_space - 1
        for _ in range(self.config.query_count):
            _, secondary_key = self._keys.generate_key_value()
            self.point_queries.append(secondary_key)
        for _ in range(self.config.query_count):
            _, lower = self._keys.generate_key_value()
            self.range_queries.append((lower, min(top, lower + self.config.range_width)))

    def run(self) -> QueryBenchmarkResult:
        """Insert the test data, run all queries, print a report and return the figures."""
        result = QueryBenchmarkResult()
        self._print_config()
        self._out.write("Starting to insert test data...\n")
        self._engine = SecondaryIndexEngine(
            self.config.db_path, _ATTRIBUTE, self.config.flush_threshold
        )
        try:
            self._insert_test_data(self._engine)
            self._out.write("\nStarting secondary index engine query benchmark...\n")
            self._run_index_queries(self._engine, result)
            self._out.write("\nStarting baseline store scan query benchmark...\n")
            self._run_baseline_queries(result)
            self._print_results(result)
        finally:
            self._engine.close()
            self._engine = None
        return result

    def _print_config(self) -> None:
        cfg = self.config
        self._out.write(
            "============== Benchmark Configuration ==============\n"
            f"Total records: {cfg.total_records}\n"
            f"Query count: {cfg.query_count}\n"
            f"Primary key space: {cfg.keys.primary_key_space}\n"
            f"Secondary key space: {cfg.keys.secondary_key_space}\n"
            f"Flush threshold: {cfg.flush_threshold}\n"
            f"Range query width: {cfg.range_width}\n"
            f"Data distribution type: {describe_distribution(cfg.keys)}\n"
            "====================================================\n\n"
        )

    def _insert_test_data(self, engine: SecondaryIndexEngine) -> None:
        total = self.config.total_records
        interval = total // 10
        with KVStore(self.config.baseline_path) as store:
            self._out.write("Starting to insert data...\n")
            for done in range(1, total + 1):
                primary_key, secondary_key = self._keys.generate_key_value()
                engine.insert_temperature(primary_key, secondary_key)
                store.put(str(primary_key), str(secondary_key))
                if interval > 0 and done % interval == 0:
                    self._out.write(
                        f"Insert progress: {done * 100.0 / total:g}% ({done}/{total})\n"
                    )
        self._out.write("Data insertion completed\n")

    def _write_found(self, header: str, rows: list[tuple[int, int]], total: int,
                     latency: float, preview: bool) -> None:
        lines = [header, f"Found records: {total}\n"]
        if rows:
            lines.append("Record details (showing first 5):\n" if preview else "Record details:\n")
            lines.extend(f"  Primary key: {pk}, Temperature: {temp}\n" for pk, temp in rows)
            if preview and total > _PREVIEW:
                lines.append(f"  ... and {total - _PREVIEW} more records ...\n")
        lines.append(f"Query latency: {latency:g} ms\n")
        lines.append(_DIVIDER)
        self._out.write("".join(lines))

    def _run_index_queries(self, engine: SecondaryIndexEngine, result: QueryBenchmarkResult) -> None:
        verbose = self.config.print_results
        point_latencies: list[float] = []
        self._out.write("\nStarting secondary index point query test...\n")
        point_start = time.perf_counter_ns()
        for target in self.point_queries:
            op_start = time.perf_counter_ns()
            records = engine.query_by_attribute(target)
            latency = _latency_ms(op_start, time.perf_counter_ns())
            point_latencies.append(latency)
            if verbose:
                rows = [(r.primary_key, r.attributes[_ATTRIBUTE]) for r in records]
                self._write_found(
                    f"\nQuery temperature value: {target}\n", rows, len(records), latency, False
                )
        point_end = time.perf_counter_ns()

        range_latencies: list[float] = []
        self._out.write("\nStarting secondary index range query test...\n")
        range_start = time.perf_counter_ns()
        for lower, upper in self.range_queries:
            op_start = time.perf_counter_ns()
            records = engine.range_query_by_attribute(lower, upper)
            latency = _latency_ms(op_start, time.perf_counter_ns())
            range_latencies.append(latency)
            if verbose:
                rows = [(r.primary_key, r.attributes[_ATTRIBUTE]) for r in records[:_PREVIEW]]
                self._write_found(
                    f"\nRange query: [{lower}, {upper}]\n", rows, len(records), latency, True
                )
        range_end = time.perf_counter_ns()

        result.index_point_qps, result.index_point_latency = self._metrics(
            point_start, point_end, point_latencies
        )
        result.index_range_qps, result.index_range_latency = self._metrics(
            range_start, range_end, range_latencies
        )

    def _run_baseline_queries(self, result: QueryBenchmarkResult) -> None:
        verbose = self.config.print_results
        with KVStore(self.config.baseline_path) as store:
            point_latencies: list[float] = []
            self._out.write("\nStarting baseline store point query test...\n")
            point_start = time.perf_counter_ns()
            for target in self.point_queries:
                op_start = time.perf_counter_ns()
                found = [int(key) for key, value in store.items() if int(value) == target]
                latency = _latency_ms(op_start, time.perf_counter_ns())
                point_latencies.append(latency)
                if verbose:
                    rows = [(pk, target) for pk in found]
                    self._write_found(
                        f"\nQuery temperature value: {target}\n", rows, len(found), latency, False
                    )
            point_end = time.perf_counter_ns()

            range_latencies: list[float] = []
            self._out.write("\nStarting baseline store range query test...\n")
            range_start = time.perf_counter_ns()
            for lower, upper in self.range_queries:
                op_start = time.perf_counter_ns()
                found = [
                    int(key) for key, value in store.items() if lower <= int(value) <= upper
                ]
                latency = _latency_ms(op_start, time.perf_counter_ns())
                range_latencies.append(latency)
                if verbose:
                    rows = []
                    for pk in found[:_PREVIEW]:
                        stored = store.get(str(pk))
                        if stored is not None:
                            rows.append((pk, int(stored)))
                    self._write_found(
                        f"\nRange query: [{lower}, {upper}]\n", rows, len(found), latency, True
                    )
            range_end = time.perf_counter_ns()

        result.baseline_point_qps, result.baseline_point_latency = self._metrics(
            point_start, point_end, point_latencies
        )
        result.baseline_range_qps, result.baseline_range_latency = self._metrics(
            range_start, range_end, range_latencies
        )

    def _metrics(self, start_ns: int, end_ns: int, latencies: list[float]) -> tuple[float, float]:
        qps = _divide(self.config.query_count * 1000.0, _whole_ms(start_ns, end_ns))
        return qps, _divide(sum(latencies), len(latencies))

    def _print_results(self, result: QueryBenchmarkResult) -> None:
        cfg = self.config
        self._out.write(
            "\n============== Query Performance Test Results ==============\n"
            "Test Scale:\n"
            f"  Total records:     {cfg.total_records}\n"
            f"  Query count:       {cfg.query_count}\n"
            f"  Primary key space: {cfg.keys.primary_key_space}\n"
            f"  Secondary key space: {cfg.keys.secondary_key_space}\n"
            f"  Range width:       {cfg.range_width}\n\n"
            "Secondary Index Engine Performance:\n"
            f"  Point query QPS:   {result.index_point_qps:.2f} ops/s\n"
            f"  Point query latency: {result.index_point_latency:.2f} ms\n"
            f"  Range query QPS:   {result.index_range_qps:.2f} ops/s\n"
            f"  Range query latency: {result.index_range_latency:.2f} ms\n\n"
            "Baseline Store Scan Query Performance:\n"
            f"  Point query QPS:   {result.baseline_point_qps:.2f} ops/s\n"
            f"  Point query latency: {result.baseline_point_latency:.2f} ms\n"
            f"  Range query QPS:   {result.baseline_range_qps:.2f} ops/s\n"
            f"  Range query latency: {result.baseline_range_latency:.2f} ms\n\n"
            "Performance Comparison (Secondary Index/Baseline):\n"
            "  Point query QPS ratio: "
            f"{_divide(result.index_point_qps, result.baseline_point_qps):.2f}x\n"
            "  Point query latency ratio: "
            f"{_divide(result.index_point_latency, result.baseline_point_latency):.2f}x\n"
            "  Range query QPS ratio: "
            f"{_divide(result.index_range_qps, result.baseline_range_qps):.2f}x\n"
            "  Range query latency ratio: "
            f"{_divide(result.index_range_latency, result.baseline_range_latency):.2f}x\n"
            "==========================================\n\n"
        )


def main(argv: list[str] | None = None) -> int:
    defaults = QueryBenchmarkConfig()
    parser = argparse.ArgumentParser(description="Query benchmark for the secondary index.")
    parser.add_argument("--records", type=int, default=defaults.total_records)
    parser.add_argument("--queries", type=int, default=defaults.query_count)
    parser.add_argument("--db-path", default=defaults.db_path)
    parser.add_argument("--baseline-path", default=defaults.baseline_path)
    parser.add_argument("--flush-threshold", type=int, default=defaults.flush_threshold)
    parser.add_argument("--range-width", type=int, default=defaults.range_width)
    parser.add_argument("--print-results", action="store_true")
    parser.add_argument(
        "--distribution",
        choices=[kind.value for kind in DistributionType],
        default=DistributionType.UNIFORM.value,
    )
    args = parser.parse_args(argv)
    config = QueryBenchmarkConfig(
        total_records=args.records,
        query_count=args.queries,
        db_path=args.db_path,
        baseline_path=args.baseline_path,
        flush_threshold=args.flush_threshold,
        range_width=args.range_width,
        print_results=args.print_results,
        keys=DistributionConfig(distribution=DistributionType(args.distribution)),
    )
    QueryBenchmark(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())