"""Tests for the normalized difference snow index and snow mask."""
import numpy as np
import pytest

from snowroute.snow.index import normalized_difference, snow_mask


def test_normalized_difference_values():
    index = normalized_difference([[0.8, 0.2]], [[0.1, 0.3]])
    assert index[0, 0] == pytest.approx(0.7 / 0.9)
    assert index[0, 1] == pytest.approx(-0.2)


def test_zero_denominator_is_undefined():
    index = normalized_difference([[0.0, 0.5, np.nan]], [[0.0, -0.5, 0.2]])
    assert np.all(np.isnan(index))
    assert not np.any(np.isinf(index))


def test_index_stays_in_range():
    rng = np.random.default_rng(0)
    a = rng.random((20, 20))
    b = rng.random((20, 20))
    index = normalized_difference(a, b)
    assert np.nanmin(index) >= -1 and np.nanmax(index) <= 1


def test_threshold_is_strictly_greater():
    mask = snow_mask(np.array([0.44, 0.45, 0.46, np.nan], dtype=np.float32), 0.45)
    assert mask[0] == 0.0
    assert mask[1] == 0.0
    assert mask[2] == 1.0
    assert np.isnan(mask[3])
