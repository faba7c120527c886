"""Shared builders for synthetic grids, scenes and routes."""
from datetime import date

import geopandas as gpd
import numpy as np
import pytest
from rasterio.transform import from_origin
from shapely.geometry import box

from snowroute.data.scenes import RasterGrid, Scene

TEST_CRS = "EPSG:32645"


def make_grid(width=100, height=100, resolution=1.0, left=0.0, top=None):
    top = height * resolution if top is None else top
    return RasterGrid(from_origin(left, top, resolution, resolution), width, height, TEST_CRS)


def make_scene(grid, bands, scene_id="s1", acquired=date(2023, 2, 1), cloud=5.0, footprint=None):
    bands = {name: np.asarray(value, dtype=np.float32) for name, value in bands.items()}
    return Scene(
        scene_id=scene_id,
        acquired=acquired,
        cloud_percentage=cloud,
        footprint=footprint if footprint is not None else box(*grid.bounds),
        bands=bands,
        grid=grid
    )


def make_routes(records, crs=TEST_CRS, name_field="NAME"):
    names, geoms = zip(*records)
    return gpd.GeoDataFrame({name_field: list(names)}, geometry=list(geoms), crs=crs)


@pytest.fixture
def grid():
    return make_grid()


@pytest.fixture
def half_snow_bands(grid):
    """Left half reads as snow (NDSI 0.78), right half as rock (NDSI -0.2)."""
    height, width = grid.shape
    b3 = np.full(grid.shape, 0.2, dtype=np.float32)
    b11 = np.full(grid.shape, 0.3, dtype=np.float32)
    b3[:, : width // 2] = 0.8
    b11[:, : width // 2] = 0.1
    scl = np.full(grid.shape, 4, dtype=np.float32)
    return {"B3": b3, "B11": b11, "SCL": scl}
