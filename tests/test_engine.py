import warnings

import pytest

from secidx.engine import Record, SecondaryIndexEngine
from secidx.storage import KVStore


@pytest.fixture
def engine(tmp_path):
    eng = SecondaryIndexEngine(tmp_path / "db", "Temperature", flush_threshold=1000)
    yield eng
    eng.close()


def test_point_query_returns_records(engine):
    assert engine.insert_temperature(1, 300)
    assert engine.insert_temperature(2, 300)
    assert engine.insert_temperature(3, 400)
    records = engine.query_by_attribute(300)
    assert sorted(r.primary_key for r in records) == [1, 2]
    assert all(r.attributes == {"Temperature": 300} for r in records)


def test_missing_attribute_gives_empty_result(engine):
    engine.insert_temperature(1, 300)
    assert engine.query_by_attribute(301) == []


def test_range_query_is_inclusive_and_ordered(engine):
    for pkey, temp in [(1, 10), (2, 20), (3, 30), (4, 40)]:
        engine.insert_temperature(pkey, temp)
    records = engine.range_query_by_attribute(20, 30)
    assert [r.primary_key for r in records] == [2, 3]
    assert [r.attributes["Temperature"] for r in records] == [20, 30]


def test_overwrite_reads_latest_value_from_store(engine):
    engine.insert_temperature(1, 10)
    engine.insert_temperature(1, 20)
    assert engine.query_by_attribute(10) == [Record(1, {"Temperature": 20})]


def test_deprecated_insert(engine):
    with pytest.warns(DeprecationWarning):
        assert engine.insert(5, {"Temperature": 77}) is True
    with pytest.warns(DeprecationWarning):
        assert engine.insert(6, {"Pressure": 1}) is False
    assert [r.primary_key for r in engine.query_by_attribute(77)] == [5]


def test_status_report_names_attribute(engine):
    report = engine.status_report()
    assert "Indexed attribute: Temperature" in report
    assert "Status Report" in report


def test_records_persist_in_store(tmp_path):
    path = tmp_path / "db"
    with SecondaryIndexEngine(path, "Temperature") as eng:
        eng.insert_temperature(7, 42)
        assert eng.indexed_attribute_name == "Temperature"
    with KVStore(path) as store:
        assert store.get("7") == "42"


def test_insert_after_close_fails(tmp_path):
    eng = SecondaryIndexEngine(tmp_path / "db", "Temperature")
    eng.close()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        assert eng.insert_temperature(1, 1) is False