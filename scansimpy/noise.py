"""
Pluggable random perturbations for the motion and laser models.

A noise strategy is any callable taking a sample count and returning that many additive
perturbations as an ndarray. The simulator never assumes a distribution: pass
`DistributionNoise` with any frozen `scipy.stats` distribution, or your own callable.
"""
from typing import Callable, Optional

import numpy as np
from scipy import stats

NoiseModel = Callable[[int], np.ndarray]


class NoNoise:
    """Always returns zeros. Used when no noise is configured."""

    def __call__(self, size: int) -> np.ndarray:
        return np.zeros(size)

    def __repr__(self):
        return "NoNoise()"


class DistributionNoise:
    def __init__(self, distribution, seed=None):
        """
        Draws perturbations from a frozen scipy.stats distribution.

        Parameters
        ----------
        distribution
            Frozen distribution, e.g. ``scipy.stats.norm(scale=0.5)``.
        seed : int, numpy.random.Generator or None
            Seed for reproducible draws.
        """
        if not hasattr(distribution, "rvs"):
            raise TypeError(f"{distribution!r} is not a scipy.stats distribution")
        self.distribution = distribution
        self.rng = np.random.default_rng(seed)

    def __call__(self, size: int) -> np.ndarray:
        return np.atleast_1d(self.distribution.rvs(size=size, random_state=self.rng))

    def __repr__(self):
        return f"DistributionNoise({self.distribution.dist.name})"


def gaussian(sigma: float, seed=None) -> DistributionNoise:
    """Zero mean normal noise with standard deviation `sigma`."""
    return DistributionNoise(stats.norm(loc=0.0, scale=sigma), seed=seed)


def uniform(limit: float, seed=None) -> DistributionNoise:
    """Noise drawn uniformly from [-limit, limit]."""
    return DistributionNoise(stats.uniform(loc=-limit, scale=2.0 * limit), seed=seed)


def resolve(noise: Optional[NoiseModel]) -> NoiseModel:
    return NoNoise() if noise is None else noise


def draw(noise: NoiseModel, size: int) -> np.ndarray:
    """Calls a noise strategy and checks the shape of its result."""
    sample = np.asarray(noise(size), dtype=np.float64).reshape(-1)
    if sample.shape[0] != size:
        raise ValueError(f"noise model {noise!r} returned {sample.shape[0]} samples, expected {size}")
    return sample
