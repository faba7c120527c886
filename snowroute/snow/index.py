"""
Normalized difference snow index and binary snow mask
"""
import numpy as np


def normalized_difference(a, b):
    """
    ``(a - b) / (a + b)``, NaN where the sum is zero or an input is NaN.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    total = a + b
    with np.errstate(divide="ignore", invalid="ignore"):
        index = np.where(total != 0, (a - b) / total, np.nan)
    index[~np.isfinite(index)] = np.nan
    return index.astype(np.float32)


def snow_index(composite, bands):
    green, swir = bands
    return normalized_difference(composite.band(green), composite.band(swir))


def snow_mask(index, threshold):
    """1.0 where ``index > threshold``, 0.0 elsewhere, NaN where undefined."""
    index = np.asarray(index)
    with np.errstate(invalid="ignore"):
        mask = (index > threshold).astype(np.float32)
    mask[np.isnan(index)] = np.nan
    return mask
