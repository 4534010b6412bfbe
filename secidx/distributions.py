"""Random (primary key, secondary key) generators with several distributions."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum


class DistributionType(Enum):
    UNIFORM = "uniform"
    POISSON = "poisson"
    SKEWED_NORMAL = "skewed_normal"
    TEMPORAL_HOTSPOT = "temporal_hotspot"


@dataclass
class DistributionConfig:
    distribution: DistributionType = DistributionType.UNIFORM
    primary_key_space: int = 100_000_000
    secondary_key_space: int = 4_000_000
    poisson_lambda: float = 1_000_000
    skewed_mean: float = 2_000_000
    skewed_std: float = 800_000
    skewed_skewness: float = 2.0
    hotspot_ratio: float = 0.1


def _poisson(rng: random.Random, lam: float) -> int:
    """Draw a Poisson variate: multiplication for small means, PTRS otherwise."""
    if lam < 30:
        limit = math.exp(-lam)
        count = 0
        product = rng.random()
        while product > limit:
            count += 1
            product *= rng.random()
        return count
    slam = math.sqrt(lam)
    loglam = math.log(lam)
    b = 0.931 + 2.53 * slam
    a = -0.059 + 0.02483 * b
    invalpha = 1.1239 + 1.1328 / (b - 3.4)
    vr = 0.9277 - 3.6224 / (b - 2)
    while True:
        u = rng.random() - 0.5
        v = rng.random()
        us = 0.5 - abs(u)
        k = math.floor((2 * a / us + b) * u + lam + 0.43)
        if us >= 0.07 and v <= vr:
            return k
        if k < 0 or (us < 0.013 and v > us):
            continue
        if v <= 0:
            continue
        lhs = math.log(v) + math.log(invalpha) - math.log(a / (us * us) + b)
        if lhs <= -lam + k * loglam - math.lgamma(k + 1):
            return k


class KeyGenerator:
    """Draws key pairs from the distribution a config describes."""

    def __init__(self, config: DistributionConfig, rng: random.Random | None = None) -> None:
        if config.primary_key_space < 1 or config.secondary_key_space < 1:
            raise ValueError("key spaces must hold at least one key")
        self.config = config
        self._rng = rng if rng is not None else random.Random()
        self._hotspot_size = int(config.secondary_key_space * config.hotspot_ratio)
        self._hotspot_center = config.secondary_key_space // 2

    def generate_key_value(self) -> tuple[int, int]:
        """Return a (primary key, secondary key) pair."""
        return (
            self._key(self.config.primary_key_space),
            self._key(self.config.secondary_key_space),
        )

    def _key(self, key_space: int) -> int:
        kind = self.config.distribution
        if kind is DistributionType.POISSON:
            return min(_poisson(self._rng, self.config.poisson_lambda), key_space - 1)
        if kind is DistributionType.SKEWED_NORMAL:
            return self._skewed_normal_key(key_space)
        if kind is DistributionType.TEMPORAL_HOTSPOT:
            return self._hotspot_key(key_space)
        return self._rng.randrange(key_space)

    def _skewed_normal_key(self, key_space: int) -> int:
        u1 = 1.0 - self._rng.random()
        u2 = self._rng.random()
        z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        skewed = z0 + self.config.skewed_skewness * (z0 * z0 - 1.0) / 6.0
        value = skewed * self.config.skewed_std + self.config.skewed_mean
        return int(max(0.0, min(float(key_space - 1), value)))

    def _hotspot_key(self, key_space: int) -> int:
        half = self._hotspot_size // 2
        low = max(0, self._hotspot_center - half)
        high = min(key_space - 1, self._hotspot_center + half)
        if self._rng.random() < self.config.hotspot_ratio:
            if low > high:
                raise ValueError("hotspot lies outside the key space")
            return self._rng.randint(low, high)
        if low <= 0 and high >= key_space - 1:
            raise ValueError("hotspot covers the whole key space")
        while True:
            key = self._rng.randrange(key_space)
            if not low <= key <= high:
                return key


def describe_distribution(config: DistributionConfig) -> str:
    """Return a one-line description of the distribution and its parameters."""
    kind = config.distribution
    if kind is DistributionType.POISSON:
        return f"Poisson (lambda={config.poisson_lambda:g})"
    if kind is DistributionType.SKEWED_NORMAL:
        return (
            f"Skewed Normal (mean={config.skewed_mean:g}, std={config.skewed_std:g}, "
            f"skewness={config.skewed_skewness:g})"
        )
    if kind is DistributionType.TEMPORAL_HOTSPOT:
        return f"Temporal Hotspot (hotspot ratio={config.hotspot_ratio:g})"
    return "Uniform"