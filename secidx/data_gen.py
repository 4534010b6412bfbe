"""Random sensor readings used as sample documents."""

from __future__ import annotations

import random

_RAW_RANGE = 10_000_000
_SCALE = 10_000.0


def random_reading(rng: random.Random | None = None) -> float:
    """Return a reading in [0, 1000) with four decimal places."""
    source = rng if rng is not None else random
    return source.randrange(_RAW_RANGE) / _SCALE


def generate_random_data(rng: random.Random | None = None) -> dict[str, float]:
    """Return a document with random ``Temp`` and ``Press`` readings."""
    return {"Temp": random_reading(rng), "Press": random_reading(rng)}