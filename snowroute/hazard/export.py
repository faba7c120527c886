"""
Output writers: class raster GeoTIFF, route Parquet table, run metadata
"""
import json
import logging
from dataclasses import asdict
from datetime import date

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq
import rasterio
from rasterio.enums import ColorInterp

from ..config import (
    CLASS_NODATA,
    CLASS_PALETTE,
    COMPRESSION,
    PREDICTOR,
    TILED,
    BLOCKSIZE
)

logger = logging.getLogger(__name__)

ROUTE_SCHEMA = pa.schema([
    ('name', pa.string()),
    ('danger_index', pa.float64()),
    ('is_safest', pa.bool_()),
    ('style_color', pa.string()),
    ('class_1', pa.int64()),
    ('class_2', pa.int64()),
    ('class_3', pa.int64()),
    ('class_4', pa.int64()),
    ('geometry_wkb', pa.binary())
])


def _hex_to_rgba(color):
    color = color.lstrip("#")
    return tuple(int(color[i:i + 2], 16) for i in (0, 2, 4)) + (255,)


def write_class_raster(path, class_raster, grid):
    """
    Write the class raster as uint8 with a palette

    Undefined pixels are stored as CLASS_NODATA so that 0 never appears.
    """
    data = np.where(np.isnan(class_raster), CLASS_NODATA, class_raster).astype(np.uint8)

    profile = {
        "driver": "GTiff",
        "height": grid.height,
        "width": grid.width,
        "count": 1,
        "dtype": "uint8",
        "crs": grid.crs,
        "transform": grid.transform,
        "nodata": CLASS_NODATA,
        "compress": COMPRESSION,
        "predictor": PREDICTOR,
    }
    # GTiff blocks must be multiples of 16 and no larger than the image
    if TILED and grid.width >= BLOCKSIZE and grid.height >= BLOCKSIZE:
        profile.update({"tiled": True, "blockxsize": BLOCKSIZE, "blockysize": BLOCKSIZE})

    with rasterio.open(path, "w", **profile) as dest:
        dest.write(data, 1)
        dest.write_colormap(1, {cls: _hex_to_rgba(color) for cls, color in CLASS_PALETTE.items()})
        dest.colorinterp = [ColorInterp.palette]
        dest.set_band_description(1, "snowClass")

    logger.info(f"✓ Created {path}")
    logger.info(f"  Dimensions: {grid.width} x {grid.height} pixels")
    return path


def route_table(routes):
    """Arrow table of ranked routes, geometry stored as WKB."""
    def _name(value):
        return None if value is None or (isinstance(value, float) and np.isnan(value)) else str(value)

    arrays = [
        pa.array([_name(v) for v in routes["name"]], type=pa.string()),
        pa.array(routes["danger_index"].astype(float).tolist(), type=pa.float64()),
        pa.array(routes["is_safest"].astype(bool).tolist(), type=pa.bool_()),
        pa.array(routes["style_color"].tolist(), type=pa.string()),
    ]
    for cls in (1, 2, 3, 4):
        arrays.append(pa.array(routes[f"class_{cls}"].astype(int).tolist(), type=pa.int64()))
    arrays.append(pa.array([geom.wkb if geom is not None else None for geom in routes.geometry],
                           type=pa.binary()))

    return pa.Table.from_arrays(arrays, schema=ROUTE_SCHEMA)


def write_route_table(path, routes):
    table = route_table(routes)
    pq.write_table(table, path, compression='snappy')
    logger.info(f"✓ Created {path} ({table.num_rows} routes)")
    return path


def _json_default(value):
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Cannot serialise {type(value).__name__}")


def write_run_metadata(path, result, settings):
    """Grid, settings, scenes used and safest route as JSON."""
    grid = result.grid
    with open(path, 'w') as f:
        json.dump({
            "width": grid.width,
            "height": grid.height,
            "transform": list(grid.transform)[:6],
            "crs": grid.crs,
            "settings": asdict(settings),
            "scenes": list(result.classification.composite.scene_ids),
            "safest_route": None if result.safest_name is None else str(result.safest_name)
        }, f, indent=2, default=_json_default)

    logger.info(f"✓ Created {path}")
    return path
