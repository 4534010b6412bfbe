import io
import math
import random
import re

import pytest

from secidx.bench_query import (
    QueryBenchmark,
    QueryBenchmarkConfig,
    QueryBenchmarkResult,
    main,
)
from secidx.distributions import DistributionConfig


def _config(tmp_path, **overrides):
    params = dict(
        total_records=40,
        query_count=6,
        db_path=str(tmp_path / "engine"),
        baseline_path=str(tmp_path / "baseline"),
        flush_threshold=10_000,
        range_width=5,
        keys=DistributionConfig(primary_key_space=100_000_000, secondary_key_space=20),
    )
    params.update(overrides)
    return QueryBenchmarkConfig(**params)


def test_default_config_matches_source():
    config = QueryBenchmarkConfig()
    assert config.total_records == 1_000_000
    assert config.query_count == 100
    assert config.flush_threshold == 100_000
    assert config.range_width == 1000
    assert config.print_results is False


def test_query_parameters_stay_in_key_space(tmp_path):
    config = _config(tmp_path, query_count=50)
    bench = QueryBenchmark(config, io.StringIO(), random.Random(3))
    top = config.keys.secondary_key_space - 1
    assert len(bench.point_queries) == 50
    assert len(bench.range_queries) == 50
    assert all(0 <= key <= top for key in bench.point_queries)
    for lower, upper in bench.range_queries:
        assert 0 <= lower <= upper <= top
        assert upper - lower <= config.range_width
        assert upper == min(top, lower + config.range_width)


def test_run_reports_and_returns_result(tmp_path):
    out = io.StringIO()
    result = QueryBenchmark(_config(tmp_path), out, random.Random(7)).run()
    text = out.getvalue()
    assert isinstance(result, QueryBenchmarkResult)
    assert "Range query width: 5\n" in text
    assert "Data insertion completed\n" in text
    assert "Insert progress: 100% (40/40)\n" in text
    assert "Query Performance Test Results" in text
    for latency in (
        result.index_point_latency,
        result.index_range_latency,
        result.baseline_point_latency,
        result.baseline_range_latency,
    ):
        assert latency >= 0.0
    assert result.index_point_qps > 0


def _found_counts(section):
    return [int(n) for n in re.findall(r"Found records: (\d+)", section)]


def test_index_and_baseline_agree_on_counts(tmp_path):
    out = io.StringIO()
    config = _config(tmp_path, print_results=True)
    QueryBenchmark(config, out, random.Random(11)).run()
    text = out.getvalue()
    index_part, baseline_part = text.split("Starting baseline store scan query benchmark...")
    index_counts = _found_counts(index_part)
    baseline_counts = _found_counts(baseline_part)
    assert len(index_counts) == 2 * config.query_count
    assert index_counts == baseline_counts
    assert sum(index_counts) > 0


def test_zero_queries_give_nan_latency(tmp_path):
    bench = QueryBenchmark(
        _config(tmp_path, query_count=0), io.StringIO(), random.Random(1)
    )
    result = bench.run()
    point_latency = result.index_point_latency
    range_latency = result.baseline_range_latency
    assert math.isnan(point_latency) is True
    assert math.isnan(range_latency) is True
    assert len(bench.point_queries) == 0


def test_few_records_skip_progress(tmp_path):
    out = io.StringIO()
    QueryBenchmark(_config(tmp_path, total_records=5), out, random.Random(2)).run()
    assert "Insert progress" not in out.getvalue()
    assert "Data insertion completed" in out.getvalue()


def test_main_runs_with_arguments(tmp_path, capsys):
    code = main([
        "--records", "20",
        "--queries", "3",
        "--db-path", str(tmp_path / "e"),
        "--baseline-path", str(tmp_path / "b"),
        "--range-width", "7",
    ])
    captured = capsys.readouterr().out
    assert code == 0
    assert "Query count: 3\n" in captured
    assert "Range query width: 7\n" in captured


def test_main_rejects_unknown_distribution(tmp_path):
    with pytest.raises(SystemExit):
        main(["--distribution", "bogus", "--db-path", str(tmp_path / "e")])