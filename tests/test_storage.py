import io

import pytest

from secidx.storage import (
    KVStore,
    count_entries,
    export_all_forward,
    export_all_reverse,
    export_from_key_reverse,
    print_parsed_json,
)


@pytest.fixture
def store(tmp_path):
    with KVStore(tmp_path / "db") as db:
        yield db


def _fill(db, keys):
    for key in keys:
        db.put(key, f'{{"Temp":{key},"Press":1}}')


def test_put_and_get(store):
    store.put("k", "v")
    assert store.get("k") == "v"
    assert store.get("missing") is None


def test_overwrite_keeps_one_entry(store):
    store.put("k", "a")
    store.put("k", "b")
    assert store.get("k") == "b"
    assert count_entries(store) == 1


def test_items_in_bytewise_order(store):
    keys = ["10", "2", "1", "300"]
    _fill(store, keys)
    assert [k for k, _ in store.items()] == sorted(keys)


def test_items_reversed_from_end(store):
    keys = ["10", "2", "1"]
    _fill(store, keys)
    assert [k for k, _ in store.items_reversed()] == sorted(keys, reverse=True)


def test_items_reversed_from_seek_position(store):
    _fill(store, ["10", "2", "1"])
    assert [k for k, _ in store.items_reversed("15")] == ["2", "10", "1"]
    assert [k for k, _ in store.items_reversed("10")] == ["10", "1"]


def test_items_reversed_past_end_is_empty(store):
    _fill(store, ["1", "2"])
    assert list(store.items_reversed("9")) == []


def test_data_persists_after_reopen(tmp_path):
    path = tmp_path / "db"
    with KVStore(path) as db:
        db.put("a", "1")
    with KVStore(path) as db:
        assert db.get("a") == "1"
        assert count_entries(db) == 1


def test_print_parsed_json():
    out = io.StringIO()
    print_parsed_json('{"Temp":1.5,"Press":2}', out)
    assert out.getvalue() == "  Temp : 1.5\n  Press: 2\n"


def test_export_forward(store):
    store.put("a", '{"Temp":1,"Press":2}')
    out = io.StringIO()
    export_all_forward(store, out)
    text = out.getvalue()
    assert text.startswith("=== Export Forward (Head to Tail) ===\n")
    assert "Key: a\n" in text
    assert 'Value (Raw): {"Temp":1,"Press":2}\n' in text
    assert text.endswith("-----------------------------\n")


def test_count_entries(store):
    _fill(store, ["x", "y", "z"])
    assert count_entries(store) == 3