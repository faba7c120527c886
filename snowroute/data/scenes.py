"""
Scene loading and filtering
Reads multispectral scenes onto the common study grid and selects the
ones matching the study bound, date range and cloud threshold
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional

import geopandas as gpd
import numpy as np
import rasterio
from affine import Affine
from rasterio.transform import from_origin
from rasterio.warp import reproject, transform_bounds, Resampling
from shapely.geometry import Point, box
from shapely.geometry.base import BaseGeometry

from ..config import DATE_TAG, CLOUD_TAG

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterGrid:
    """Pixel grid shared by every raster of one run."""
    transform: Affine
    width: int
    height: int
    crs: str

    @classmethod
    def from_geometry(cls, geometry, resolution, crs):
        """Grid covering ``geometry`` with bounds snapped outward to ``resolution``."""
        minx, miny, maxx, maxy = geometry.bounds
        left = math.floor(minx / resolution) * resolution
        bottom = math.floor(miny / resolution) * resolution
        right = math.ceil(maxx / resolution) * resolution
        top = math.ceil(maxy / resolution) * resolution
        width = max(int(round((right - left) / resolution)), 1)
        height = max(int(round((top - bottom) / resolution)), 1)
        return cls(from_origin(left, top, resolution, resolution), width, height, str(crs))

    @property
    def shape(self):
        return (self.height, self.width)

    @property
    def resolution(self):
        return abs(self.transform.a)

    @property
    def bounds(self):
        left, top = self.transform @ (0, 0)
        right, bottom = self.transform @ (self.width, self.height)
        return (min(left, right), min(bottom, top), max(left, right), max(bottom, top))

    def empty(self, dtype=np.float32):
        """All-undefined array on this grid."""
        return np.full(self.shape, np.nan, dtype=dtype)


@dataclass(frozen=True)
class SceneInfo:
    """Catalog entry for a scene file, read from metadata only."""
    path: Path
    scene_id: str
    acquired: date
    cloud_percentage: float
    footprint: BaseGeometry


@dataclass(frozen=True)
class Scene:
    """
    One acquisition resampled onto the study grid.

    Bands are float32 arrays with ``NaN`` marking no data.
    """
    scene_id: str
    acquired: date
    cloud_percentage: float
    footprint: BaseGeometry
    bands: Dict[str, np.ndarray]
    grid: RasterGrid

    def __post_init__(self):
        for name, band in self.bands.items():
            if band.shape != self.grid.shape:
                raise ValueError(
                    f"Band {name} of scene {self.scene_id} has shape {band.shape}, "
                    f"grid is {self.grid.shape}"
                )

    def band(self, name):
        if name not in self.bands:
            raise KeyError(f"Scene {self.scene_id} has no band '{name}'. "
                           f"Available: {sorted(self.bands)}")
        return self.bands[name]


def study_area_from_point(lon, lat, radius, crs):
    """Buffer a WGS84 point by ``radius`` meters, returned in ``crs``."""
    point = gpd.GeoSeries([Point(lon, lat)], crs="EPSG:4326").to_crs(crs)
    return point.buffer(radius).iloc[0]


def _parse_date(value):
    return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()


def scan_scene_catalog(scene_dir, crs):
    """
    List scene GeoTIFFs in a directory without reading pixels

    Args:
        scene_dir: Directory holding one GeoTIFF per acquisition
        crs: CRS the footprints are expressed in (the grid CRS)
    """
    scene_dir = Path(scene_dir)
    catalog = []

    for path in sorted(scene_dir.glob("*.tif")):
        with rasterio.open(path) as src:
            tags = src.tags()
            if DATE_TAG not in tags or CLOUD_TAG not in tags:
                logger.warning(f"Skipping {path.name}: missing {DATE_TAG} or {CLOUD_TAG} tag")
                continue

            if src.crs is None:
                logger.warning(f"Skipping {path.name}: no CRS")
                continue

            footprint = box(*transform_bounds(src.crs, crs, *src.bounds))
            catalog.append(SceneInfo(
                path=path,
                scene_id=path.stem,
                acquired=_parse_date(tags[DATE_TAG]),
                cloud_percentage=float(tags[CLOUD_TAG]),
                footprint=footprint
            ))

    logger.info(f"Found {len(catalog)} scenes in {scene_dir}")
    return catalog


def filter_scenes(scenes, bound, start, end, max_cloud_percentage):
    """
    Keep scenes whose footprint intersects ``bound``, acquired in
    ``[start, end)`` and with cloud percentage below the threshold.

    Works on ``Scene`` and ``SceneInfo`` alike. Result is ordered by
    acquisition date, then id. An empty result is not an error.
    """
    selected = [
        scene for scene in scenes
        if scene.footprint.intersects(bound)
        and start <= scene.acquired < end
        and scene.cloud_percentage < max_cloud_percentage
    ]
    selected.sort(key=lambda scene: (scene.acquired, scene.scene_id))

    if not selected:
        logger.warning(
            f"No scenes match {start} -> {end} with cloud < {max_cloud_percentage}%"
        )
    else:
        logger.info(f"Selected {len(selected)} of {len(scenes)} scenes")

    return selected


def read_scene(info, grid, bands: Optional[List[str]] = None):
    """
    Read a scene file onto ``grid`` with nearest-neighbour resampling

    Band names come from the band descriptions, falling back to
    ``band_<n>``. Source nodata becomes ``NaN``.
    """
    with rasterio.open(info.path) as src:
        names = [
            desc if desc else f"band_{idx}"
            for idx, desc in enumerate(src.descriptions, start=1)
        ]
        if bands is None:
            wanted = names
        else:
            missing = [b for b in bands if b not in names]
            if missing:
                logger.error(f"Scene {info.scene_id} bands available: {names}")
                raise ValueError(f"Scene {info.scene_id} is missing bands {missing}")
            wanted = list(bands)

        out = {}
        for name in wanted:
            idx = names.index(name) + 1
            source = src.read(idx).astype(np.float32)
            if src.nodata is not None:
                source[source == src.nodata] = np.nan

            destination = grid.empty()
            reproject(
                source=source,
                destination=destination,
                src_transform=src.transform,
                src_crs=src.crs,
                src_nodata=np.nan,
                dst_transform=grid.transform,
                dst_crs=grid.crs,
                dst_nodata=np.nan,
                resampling=Resampling.nearest
            )
            out[name] = destination

    logger.debug(f"Read {info.scene_id}: bands {list(out)}")
    return Scene(
        scene_id=info.scene_id,
        acquired=info.acquired,
        cloud_percentage=info.cloud_percentage,
        footprint=info.footprint,
        bands=out,
        grid=grid
    )
