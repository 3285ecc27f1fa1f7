"""
Monte Carlo Simulation

Seeded random walk of property value used to put percentile bands
around a deterministic equity projection. The generator is owned by a
single simulation call so identical seeds reproduce identical bands.
"""

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42
PERCENTILES = (5, 50, 95)


class LinearCongruentialGenerator:
    """
    Linear congruential generator, state = (a * state + c) mod m.

    Each call returns state / (m - 1), a float in [0, 1]. A zero seed falls
    back to DEFAULT_SEED.
    """

    MULTIPLIER = 1103515245
    INCREMENT = 12345
    MODULUS = 2 ** 31

    def __init__(self, seed: int = DEFAULT_SEED):
        self.state = (int(seed) or DEFAULT_SEED) % self.MODULUS

    def __call__(self) -> float:
        self.state = (self.MULTIPLIER * self.state + self.INCREMENT) % self.MODULUS
        return self.state / (self.MODULUS - 1)


def random_normal(
    rng: LinearCongruentialGenerator, mean: float = 0.0, std_dev: float = 1.0
) -> float:
    """Box-Muller draw from N(mean, std_dev) using two uniforms from rng."""
    u1 = max(rng(), 1e-12)
    u2 = rng()
    z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return z0 * std_dev + mean


def percentile_bands(
    paths: Sequence[Sequence[float]], percentiles: Iterable[int] = PERCENTILES
) -> Dict[str, List[float]]:
    """
    Per-period percentile values across simulated paths.

    Values in each period are sorted and indexed at floor(p/100 * N),
    clamped to the valid range, so lower percentiles never exceed higher
    ones.

    Args:
        paths: N paths of equal length
        percentiles: Percentile ranks to extract

    Returns:
        Dict keyed "p5", "p50", ... with one value per period
    """
    matrix = np.sort(np.vstack([np.asarray(p, dtype=float) for p in paths]), axis=0)
    n = matrix.shape[0]

    bands = {}
    for p in percentiles:
        idx = max(0, min(n - 1, int(math.floor(p / 100 * n))))
        bands[f"p{p}"] = matrix[idx].tolist()
    return bands


def simulate_value_paths(
    start_value: float,
    months: int,
    monthly_mean: float,
    monthly_volatility: float,
    runs: int,
    seed: int = DEFAULT_SEED,
    uplift_by_month: Optional[Dict[int, float]] = None,
) -> List[List[float]]:
    """
    Simulate property value paths under a normal monthly return.

    Paths are drawn one after another from a single generator, month by
    month within a path. Scheduled uplift factors (e.g. 1.10 for +10%) are
    applied after that month's return.

    Returns:
        runs lists of months values
    """
    rng = LinearCongruentialGenerator(seed)
    uplift_by_month = uplift_by_month or {}
    logger.debug("Simulating %d value paths over %d months", runs, months)

    paths = []
    for _ in range(runs):
        value = start_value
        path = []
        for month in range(months):
            value *= 1 + random_normal(rng, monthly_mean, monthly_volatility)
            if month in uplift_by_month:
                value *= uplift_by_month[month]
            path.append(value)
        paths.append(path)
    return paths
