"""Insert benchmark: the secondary index engine against a plain key-value store."""

from __future__ import annotations

import argparse
import math
import random
import sqlite3
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

_RULE = "====================================================\n\n"


@dataclass
class InsertBenchmarkConfig:
    total_records: int = 10_000
    db_path: str = "/opt/Leveldb_DB_DOC/leveldb_benchmark"
    baseline_path: str = "/opt/Leveldb_DB_DOC/leveldb_baseline"
    flush_threshold: int = 100_000
    keys: DistributionConfig = field(default_factory=DistributionConfig)


@dataclass
class InsertBenchmarkResult:
    index_write_qps: float = 0.0
    index_avg_latency: float = 0.0
    index_write_time: float = 0.0
    index_records_written: int = 0
    baseline_write_qps: float = 0.0
    baseline_avg_latency: float = 0.0
    baseline_write_time: float = 0.0
    baseline_records_written: int = 0


def _divide(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    return math.nan if numerator == 0 else math.copysign(math.inf, numerator)


def _latency_ms(start_ns: int, end_ns: int) -> float:
    return ((end_ns - start_ns) // 1000) / 1000.0


def _whole_ms(start_ns: int, end_ns: int) -> int:
    return (end_ns - start_ns) // 1_000_000


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class InsertBenchmark:
    def __init__(
        self,
        config: InsertBenchmarkConfig,
        out: TextIO | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self._out = out if out is not None else sys.stdout
        self._keys = KeyGenerator(config.keys, rng)
        self._write_latencies: list[float] = []

    def run(self) -> InsertBenchmarkResult:
        """Run both insert tests, print a report and return the figures."""
        result = InsertBenchmarkResult()
        self._print_config()
        self._out.write("Starting secondary index engine insert benchmark...\n")
        engine = SecondaryIndexEngine(
            self.config.db_path, "Temperature", self.config.flush_threshold
        )
        try:
            self._run_index_test(engine, result)
            self._out.write("\nStarting baseline store insert benchmark...\n")
            self._run_baseline_test(result)
            self._print_results(result)
        finally:
            engine.close()
        return result

    def _progress(self, label: str, done: int) -> None:
        interval = self.config.total_records // 10
        if interval > 0 and done % interval == 0:
            percent = done * 100.0 / self.config.total_records
            self._out.write(
                f"{label} write progress: {percent:.1f}% ({done}/{self.config.total_records})\n"
            )

    def _print_config(self) -> None:
        cfg = self.config
        self._out.write(
            "============== Benchmark Configuration ==============\n"
            f"Total records: {cfg.total_records}\n"
            f"Primary key space: {cfg.keys.primary_key_space}\n"
            f"Secondary key space: {cfg.keys.secondary_key_space}\n"
            f"Flush threshold: {cfg.flush_threshold}\n\n"
            f"Data distribution type: {describe_distribution(cfg.keys)}\n"
            + _RULE
        )

    def _run_index_test(self, engine: SecondaryIndexEngine, result: InsertBenchmarkResult) -> None:
        written = 0
        start = time.perf_counter_ns()
        for done in range(1, self.config.total_records + 1):
            primary_key, secondary_key = self._keys.generate_key_value()
            op_start = time.perf_counter_ns()
            ok = engine.insert_temperature(primary_key, secondary_key)
            self._write_latencies.append(_latency_ms(op_start, time.perf_counter_ns()))
            if ok:
                written += 1
            self._progress("Secondary index", done)
        self._out.write(f"Write finished, total records written: {written}\n")
        elapsed = _whole_ms(start, time.perf_counter_ns())
        result.index_records_written = written
        result.index_write_time = float(elapsed)
        result.index_write_qps = _divide(written * 1000.0, elapsed)
        result.index_avg_latency = _mean(self._write_latencies)

    def _run_baseline_test(self, result: InsertBenchmarkResult) -> None:
        try:
            store = KVStore(self.config.baseline_path)
        except (OSError, sqlite3.Error) as exc:
            sys.stderr.write(f"Cannot open baseline store: {exc}\n")
            return
        latencies: list[float] = []
        written = 0
        with store:
            start = time.perf_counter_ns()
            for done in range(1, self.config.total_records + 1):
                primary_key, secondary_key = self._keys.generate_key_value()
                op_start = time.perf_counter_ns()
                try:
                    store.put(str(primary_key), str(secondary_key))
                    ok = True
                except sqlite3.Error:
                    ok = False
                latencies.append(_latency_ms(op_start, time.perf_counter_ns()))
                if ok:
                    written += 1
                self._progress("Baseline", done)
            elapsed = _whole_ms(start, time.perf_counter_ns())
        result.baseline_records_written = written
        result.baseline_write_time = float(elapsed)
        result.baseline_write_qps = _divide(written * 1000.0, elapsed)
        result.baseline_avg_latency = _mean(latencies)

    def _print_results(self, result: InsertBenchmarkResult) -> None:
        cfg = self.config
        lines = [
            "============== Insert Benchmark Results ==============\n",
            "Scale:\n",
            f"  Total records:       {cfg.total_records}\n",
            f"  Primary key space:   {cfg.keys.primary_key_space}\n",
            f"  Secondary key space: {cfg.keys.secondary_key_space}\n",
            f"  Flush threshold:     {cfg.flush_threshold}\n\n",
            "Secondary Index Engine Performance:\n",
            f"  Total write time:    {result.index_write_time:.2f} ms\n",
            f"  Write throughput:    {result.index_write_qps:.2f} ops/s\n",
            f"  Avg write latency:   {result.index_avg_latency:.2f} ms\n",
            f"  Records written:     {result.index_records_written}\n\n",
            "Baseline Store Performance:\n",
            f"  Total write time:    {result.baseline_write_time:.2f} ms\n",
            f"  Write throughput:    {result.baseline_write_qps:.2f} ops/s\n",
            f"  Avg write latency:   {result.baseline_avg_latency:.2f} ms\n",
            f"  Records written:     {result.baseline_records_written}\n\n",
            "Performance Comparison (Secondary Index / Baseline):\n",
            f"  Write time ratio:    "
            f"{_divide(result.index_write_time, result.baseline_write_time):.2f}x\n",
            f"  Throughput ratio:    "
            f"{_divide(result.index_write_qps, result.baseline_write_qps):.2f}x\n",
            f"  Latency ratio:       "
            f"{_divide(result.index_avg_latency, result.baseline_avg_latency):.2f}x\n\n",
        ]
        if self._write_latencies:
            ordered = sorted(self._write_latencies)
            size = len(ordered)
            lines.append("Secondary index write latency distribution:\n")
            for name, fraction in (("P50", 0.5), ("P90", 0.9), ("P99", 0.99)):
                lines.append(f"  {name} latency:         {ordered[int(size * fraction)]:.2f} ms\n")
        lines.append(_RULE)
        self._out.write("".join(lines))


def main(argv: list[str] | None = None) -> int:
    defaults = InsertBenchmarkConfig()
    parser = argparse.ArgumentParser(description="Insert benchmark for the secondary index.")
    parser.add_argument("--records", type=int, default=defaults.total_records)
    parser.add_argument("--db-path", default=defaults.db_path)
    parser.add_argument("--baseline-path", default=defaults.baseline_path)
    parser.add_argument("--flush-threshold", type=int, default=defaults.flush_threshold)
    parser.add_argument(
        "--distribution",
        choices=[kind.value for kind in DistributionType],
        default=DistributionType.UNIFORM.value,
    )
    args = parser.parse_args(argv)
    config = InsertBenchmarkConfig(
        total_records=args.records,
        db_path=args.db_path,
        baseline_path=args.baseline_path,
        flush_threshold=args.flush_threshold,
        keys=DistributionConfig(distribution=DistributionType(args.distribution)),
    )
    InsertBenchmark(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())