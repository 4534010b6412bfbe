import io
import random

import pytest

from secidx.bench_insert import InsertBenchmark, InsertBenchmarkConfig, main
from secidx.distributions import DistributionConfig, DistributionType
from secidx.storage import KVStore, count_entries


def _config(tmp_path, records=20, **keys):
    return InsertBenchmarkConfig(
        total_records=records,
        db_path=str(tmp_path / "index"),
        baseline_path=str(tmp_path / "baseline"),
        flush_threshold=1000,
        keys=DistributionConfig(**keys),
    )


def test_run_writes_every_record(tmp_path):
    out = io.StringIO()
    config = _config(tmp_path, primary_key_space=1000, secondary_key_space=100)
    result = InsertBenchmark(config, out, random.Random(3)).run()
    assert result.index_records_written == 20
    assert result.baseline_records_written == 20
    assert result.index_avg_latency >= 0
    text = out.getvalue()
    assert "Insert Benchmark Results" in text
    assert "Write finished, total records written: 20" in text
    assert "P99 latency:" in text


def test_progress_lines_reach_hundred_percent(tmp_path):
    out = io.StringIO()
    InsertBenchmark(_config(tmp_path), out, random.Random(1)).run()
    text = out.getvalue()
    assert "Secondary index write progress: 100.0% (20/20)" in text
    assert text.count("Secondary index write progress:") == 10


def test_baseline_holds_distinct_primary_keys(tmp_path):
    config = _config(tmp_path, records=30, primary_key_space=5, secondary_key_space=10)
    InsertBenchmark(config, io.StringIO(), random.Random(2)).run()
    with KVStore(tmp_path / "baseline") as store:
        count = count_entries(store)
        keys = [int(k) for k, _ in store.items()]
    assert 1 <= count <= 5
    assert all(0 <= k < 5 for k in keys)


@pytest.mark.parametrize("kind", list(DistributionType))
def test_every_distribution_runs(tmp_path, kind):
    out = io.StringIO()
    config = _config(
        tmp_path,
        distribution=kind,
        primary_key_space=1000,
        secondary_key_space=100,
        poisson_lambda=50,
        skewed_mean=50,
        skewed_std=10,
    )
    result = InsertBenchmark(config, out, random.Random(4)).run()
    assert result.index_records_written == 20


def test_main_returns_zero(tmp_path, capsys):
    code = main([
        "--records", "10",
        "--db-path", str(tmp_path / "a"),
        "--baseline-path", str(tmp_path / "b"),
        "--flush-threshold", "100",
    ])
    assert code == 0
    assert "Data distribution type: Uniform" in capsys.readouterr().out