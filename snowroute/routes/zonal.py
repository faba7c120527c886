"""
Zonal class histograms inside buffered routes
"""
import logging
import math

import numpy as np
from affine import Affine
from rasterio.features import geometry_mask
from shapely.geometry import mapping

from ..exceptions import ConfigurationError
from ..snow.classes import SnowClass

logger = logging.getLogger(__name__)


def empty_histogram():
    return {cls: 0 for cls in SnowClass}


def sampling_factor(grid, scale):
    """
    Number of sub-pixels per grid pixel side at sampling resolution ``scale``.

    Only scales equal to, or an integer fraction of, the grid resolution
    are accepted; coarser sampling would skip classified pixels.
    """
    ratio = grid.resolution / scale
    factor = int(round(ratio))
    if factor < 1 or not math.isclose(ratio, factor, rel_tol=1e-9):
        raise ConfigurationError(
            f"Zonal scale {scale} must equal or evenly divide the grid resolution "
            f"{grid.resolution}"
        )
    return factor


def _window(grid, geometry):
    # pixel window (row0, row1, col0, col1) covering the geometry bounds
    minx, miny, maxx, maxy = geometry.bounds
    inverse = ~grid.transform
    c0, r0 = inverse @ (minx, maxy)
    c1, r1 = inverse @ (maxx, miny)
    col0 = max(int(math.floor(min(c0, c1))), 0)
    col1 = min(int(math.ceil(max(c0, c1))), grid.width)
    row0 = max(int(math.floor(min(r0, r1))), 0)
    row1 = min(int(math.ceil(max(r0, r1))), grid.height)
    return row0, row1, col0, col1


def zonal_histogram(class_raster, grid, geometry, scale):
    """
    Count class pixels whose centre lies inside ``geometry``

    Args:
        class_raster: Class raster (1-4, NaN undefined) on ``grid``
        grid: RasterGrid of the class raster
        geometry: Buffered route geometry in the grid CRS
        scale: Sampling resolution in grid units

    Undefined pixels are not counted. Every class is present in the
    result, absent classes with a count of 0.
    """
    factor = sampling_factor(grid, scale)
    histogram = empty_histogram()

    if geometry is None or geometry.is_empty:
        return histogram

    row0, row1, col0, col1 = _window(grid, geometry)
    if row0 >= row1 or col0 >= col1:
        return histogram

    window = class_raster[row0:row1, col0:col1]
    transform = grid.transform @ Affine.translation(col0, row0)
    if factor > 1:
        window = np.repeat(np.repeat(window, factor, axis=0), factor, axis=1)
        transform = transform @ Affine.scale(1.0 / factor)

    inside = geometry_mask(
        [mapping(geometry)],
        out_shape=window.shape,
        transform=transform,
        invert=True
    )
    values = window[inside]
    for cls in SnowClass:
        histogram[cls] = int(np.count_nonzero(values == cls))

    return histogram
