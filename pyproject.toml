[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "secidx"
version = "0.1.0"
description = "A secondary index over a key-value store: skip-list memtables, read-only tables, an ordered tree tier and insert/query benchmarks"
requires-python = ">=3.10"
dependencies = []
keywords = ["secondary index", "memtable", "skip list", "key-value store", "benchmark"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
secidx-bench-insert = "secidx.bench_insert:main"
secidx-bench-query = "secidx.bench_query:main"

[tool.hatch.build.targets.wheel]
packages = ["secidx"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
