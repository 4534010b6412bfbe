import random

from secidx.memtable import SecondaryMemTable


def make_table(max_level=16):
    return SecondaryMemTable(max_level, random.Random(1234))


def test_empty_table():
    table = make_table()
    assert len(table) == 0
    assert list(table) == []
    assert table.get(5) == []
    assert table.range_query(0, 100) == []


def test_iteration_is_sorted_by_attribute():
    table = make_table()
    rng = random.Random(7)
    pairs = [(rng.randrange(1000), i) for i in range(500)]
    for attribute, pkey in pairs:
        table.put(attribute, pkey)
    assert len(table) == 500
    keys = [k for k, _ in table]
    assert keys == sorted(keys)
    assert sorted(table) == sorted(pairs)


def test_duplicates_newest_first():
    table = make_table()
    table.put(10, 1)
    table.put(10, 2)
    table.put(10, 3)
    table.put(5, 9)
    assert table.get(10) == [3, 2, 1]
    assert table.get(5) == [9]
    assert table.get(7) == []


def test_get_matches_filter():
    table = make_table()
    rng = random.Random(3)
    pairs = [(rng.randrange(50), i) for i in range(300)]
    for attribute, pkey in pairs:
        table.put(attribute, pkey)
    for key in range(55):
        assert sorted(table.get(key)) == sorted(v for k, v in pairs if k == key)


def test_range_query_inclusive():
    table = make_table()
    for attribute in range(20):
        table.put(attribute, attribute + 100)
    assert table.range_query(5, 8) == [105, 106, 107, 108]
    assert table.range_query(19, 30) == [119]
    assert table.range_query(8, 5) == []


def test_range_query_matches_filter():
    table = make_table()
    rng = random.Random(11)
    pairs = [(rng.randrange(200), i) for i in range(400)]
    for attribute, pkey in pairs:
        table.put(attribute, pkey)
    result = table.range_query(40, 90)
    assert sorted(result) == sorted(v for k, v in pairs if 40 <= k <= 90)


def test_flush_returns_pairs_and_keeps_table():
    table = make_table()
    table.put(3, 30)
    table.put(1, 10)
    table.put(2, 20)
    assert table.flush() == [(1, 10), (2, 20), (3, 30)]
    assert len(table) == 3


def test_clear_empties_table_and_allows_reuse():
    table = make_table()
    for attribute in range(10):
        table.put(attribute, attribute)
    table.clear()
    assert len(table) == 0
    assert table.flush() == []
    table.put(4, 40)
    assert table.flush() == [(4, 40)]


def test_single_level_still_ordered():
    table = make_table(max_level=1)
    for attribute in [5, 3, 9, 1, 3]:
        table.put(attribute, attribute * 2)
    assert [k for k, _ in table] == [1, 3, 3, 5, 9]


def test_render_format():
    table = make_table()
    table.put(12345, 7)
    text = table.render()
    assert text.startswith("\n[SecondaryMemTable] total = 1\n")
    assert "  1.2345  ->  7\n" in text
    assert text.endswith("---------------------------------------\n")