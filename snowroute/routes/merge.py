"""
Route fragment loading and merging
"""
import logging

import geopandas as gpd

logger = logging.getLogger(__name__)


def load_route_fragments(path, name_field, crs):
    """Read route fragments and reproject them into ``crs``."""
    logger.info(f"Loading route fragments from {path}")
    gdf = gpd.read_file(path)

    if gdf.crs is None:
        logger.warning("No CRS found in route file. Assuming WGS84 (EPSG:4326)")
        gdf = gdf.set_crs("EPSG:4326")

    if name_field not in gdf.columns:
        logger.error(f"Field {name_field} not found. Available: {gdf.columns.tolist()}")
        raise ValueError(f"Route name field '{name_field}' not found in {path}")

    if gdf.crs != crs:
        logger.info(f"Reprojecting routes from {gdf.crs} to {crs}")
        gdf = gdf.to_crs(crs)

    logger.info(f"Loaded {len(gdf)} route fragments")
    return gdf


def merge_routes(fragments, name_field):
    """
    One geometry per route name, the union of all its fragments

    Fragments without a name are kept together under a missing name so
    that no fragment is dropped.
    """
    if name_field not in fragments.columns:
        raise ValueError(f"Route name field '{name_field}' not found. "
                         f"Available: {fragments.columns.tolist()}")

    geom_col = fragments.geometry.name
    merged = fragments[[name_field, geom_col]].dissolve(
        by=name_field, dropna=False, as_index=False
    )
    merged = merged.rename(columns={name_field: "name"})
    if geom_col != "geometry":
        merged = merged.rename_geometry("geometry")

    logger.info(f"Merged {len(fragments)} fragments into {len(merged)} routes")
    return merged[["name", "geometry"]].reset_index(drop=True)


def buffer_routes(routes, distance):
    """Copy of ``routes`` with every geometry buffered outward by ``distance``."""
    buffered = routes.copy()
    buffered["geometry"] = routes.geometry.buffer(distance)
    return buffered
