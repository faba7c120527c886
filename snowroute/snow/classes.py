"""
Local snow percentage and ordinal hazard classes
"""
import logging
from enum import IntEnum

import numpy as np
from scipy import ndimage

from ..config import CLASS_BREAKPOINTS

logger = logging.getLogger(__name__)


class SnowClass(IntEnum):
    LOW = 1
    MODERATE = 2
    CONSIDERABLE = 3
    HIGH = 4


def _window_counts(values, size):
    # uniform_filter returns the window mean; scale back to integer counts
    mean = ndimage.uniform_filter(values.astype(np.float64), size=size,
                                  mode="constant", cval=0.0)
    return np.rint(mean * size * size)


def snow_fraction(mask, radius):
    """
    Percentage of snow pixels in the square window around each pixel

    Args:
        mask: Snow mask (1.0 snow, 0.0 not snow, NaN undefined)
        radius: Window half-width in pixels, window side is ``2*radius + 1``

    The window must lie fully inside the raster and contain no undefined
    pixel, otherwise the result is NaN. There is no partial-window
    averaging.
    """
    mask = np.asarray(mask)
    size = 2 * radius + 1
    valid = ~np.isnan(mask)

    valid_counts = _window_counts(valid, size)
    snow_counts = _window_counts(np.where(valid, mask, 0.0), size)

    fraction = 100.0 * snow_counts / (size * size)
    fraction[valid_counts < size * size] = np.nan
    return fraction.astype(np.float32)


def classify_fraction(fraction, breakpoints=CLASS_BREAKPOINTS):
    """
    Bin snow percentages into classes 1-4

    Each breakpoint is the exclusive upper bound of its class:
    ``<25 -> 1``, ``<50 -> 2``, ``<75 -> 3``, anything else ``-> 4``.
    Works on scalars and arrays; NaN stays NaN.
    """
    values = np.asarray(fraction, dtype=np.float64)
    classes = np.searchsorted(np.asarray(breakpoints, dtype=np.float64),
                              values, side="right") + 1
    classes = np.where(np.isnan(values), np.nan, classes).astype(np.float32)
    if classes.ndim == 0:
        return float(classes)
    return classes


def class_counts(class_raster):
    """Pixel count per class over a whole class raster."""
    return {cls: int(np.count_nonzero(class_raster == cls)) for cls in SnowClass}
