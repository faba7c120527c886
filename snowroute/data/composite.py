"""
Median compositing of a masked scene series
"""
import logging
import warnings
from dataclasses import dataclass
from typing import Dict

import numpy as np
from rasterio.features import geometry_mask
from shapely.geometry import mapping

from .scenes import RasterGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Composite:
    bands: Dict[str, np.ndarray]
    grid: RasterGrid
    scene_ids: tuple = ()

    def band(self, name):
        if name not in self.bands:
            raise KeyError(f"Composite has no band '{name}'. Available: {sorted(self.bands)}")
        return self.bands[name]


def clip_to_area(array, grid, area):
    """Set pixels whose centre lies outside ``area`` to NaN."""
    outside = geometry_mask(
        [mapping(area)],
        out_shape=grid.shape,
        transform=grid.transform
    )
    return np.where(outside, np.nan, array).astype(array.dtype)


def median_composite(scenes, grid, area, bands):
    """
    Per-pixel, per-band median over ``scenes`` ignoring NaN

    A pixel stays NaN only when every scene is NaN there. An empty
    scene list gives an all-NaN composite. The result is clipped to
    ``area``.
    """
    out = {}
    for name in bands:
        if not scenes:
            out[name] = grid.empty()
            continue

        stack = np.stack([scene.band(name) for scene in scenes])
        with warnings.catch_warnings():
            # all-NaN columns are expected where every scene was masked
            warnings.simplefilter("ignore", category=RuntimeWarning)
            median = np.nanmedian(stack, axis=0)
        out[name] = clip_to_area(median.astype(np.float32), grid, area)

    if not scenes:
        logger.warning("No scenes to composite, composite is entirely undefined")
    else:
        logger.info(f"Composited {len(scenes)} scenes over bands {list(bands)}")

    return Composite(bands=out, grid=grid, scene_ids=tuple(s.scene_id for s in scenes))
