"""Secondary index over a key-value store, with memtable, read-only and ordered tree tiers, plus benchmarks."""

__version__ = "0.1.0"