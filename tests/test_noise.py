"""
Tests for the noise strategies.
"""
import numpy as np
import pytest
from scipy import stats

from scansimpy.noise import DistributionNoise, NoNoise, draw, gaussian, resolve, uniform


def test_no_noise_is_zero():
    np.testing.assert_array_equal(NoNoise()(4), np.zeros(4))


def test_resolve_defaults_to_no_noise():
    assert isinstance(resolve(None), NoNoise)
    custom = lambda size: np.ones(size)  # noqa: E731
    assert resolve(custom) is custom


def test_gaussian_is_reproducible():
    np.testing.assert_array_equal(gaussian(2.0, seed=5)(10), gaussian(2.0, seed=5)(10))


def test_uniform_bounds():
    samples = uniform(0.5, seed=1)(1000)
    assert samples.min() >= -0.5
    assert samples.max() <= 0.5


def test_any_frozen_distribution():
    noise = DistributionNoise(stats.laplace(scale=0.1), seed=3)
    assert noise(7).shape == (7,)


def test_rejects_non_distribution():
    with pytest.raises(TypeError):
        DistributionNoise(0.5)


def test_draw_checks_size():
    assert draw(NoNoise(), 0).shape == (0,)
    with pytest.raises(ValueError):
        draw(lambda size: np.zeros(3), 2)
