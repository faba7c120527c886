"""
Snow hazard pipeline
Scenes -> cloud mask -> median composite -> NDSI -> snow percentage ->
classes -> per-route danger index
"""
import logging
from dataclasses import dataclass
from typing import Optional

import geopandas as gpd
import numpy as np
import pandas as pd

from ..config import PipelineSettings, NO_COVERAGE_DANGER_INDEX
from ..data.cloud_mask import mask_clouds
from ..data.composite import Composite, clip_to_area, median_composite
from ..data.scenes import (
    RasterGrid,
    filter_scenes,
    read_scene,
    scan_scene_catalog,
    study_area_from_point
)
from ..routes.danger import danger_index, rank_routes, safest_route
from ..routes.merge import buffer_routes, merge_routes
from ..routes.zonal import sampling_factor, zonal_histogram
from ..snow.classes import SnowClass, class_counts, classify_fraction, snow_fraction
from ..snow.index import snow_index, snow_mask

logger = logging.getLogger(__name__)


@dataclass
class ClassificationResult:
    composite: Composite
    ndsi: np.ndarray
    snow_mask: np.ndarray
    snow_percentage: np.ndarray
    class_raster: np.ndarray


@dataclass
class HazardResult:
    grid: RasterGrid
    classification: ClassificationResult
    routes: gpd.GeoDataFrame
    safest: Optional[pd.Series]

    @property
    def class_raster(self):
        return self.classification.class_raster

    @property
    def safest_name(self):
        return None if self.safest is None else self.safest["name"]


class SnowHazardPipeline:
    """
    One configured run of the snow hazard pipeline.

    Settings are validated on construction, before any raster work.
    ``study_area`` and ``grid`` default to the buffered study point and a
    grid snapped around it.
    """

    def __init__(self, settings=None, study_area=None, grid=None):
        self.settings = settings if settings is not None else PipelineSettings()
        s = self.settings

        if study_area is None:
            study_area = study_area_from_point(
                s.study_area_lon, s.study_area_lat, s.study_area_radius, s.grid_crs
            )
        self.study_area = study_area

        if grid is None:
            grid = RasterGrid.from_geometry(study_area, s.grid_resolution, s.grid_crs)
        self.grid = grid

        # fail fast on a sampling scale the grid cannot honour
        sampling_factor(self.grid, s.zonal_scale)

    def select_scenes(self, scenes):
        s = self.settings
        return filter_scenes(scenes, self.study_area, s.start_date, s.end_date,
                             s.max_cloud_percentage)

    def load_scenes(self, scene_dir):
        """Scan a directory, filter on metadata, then read matching scenes."""
        s = self.settings
        catalog = scan_scene_catalog(scene_dir, self.grid.crs)
        wanted = list(dict.fromkeys(s.composite_bands + (s.qa_band,)))
        return [read_scene(info, self.grid, wanted) for info in self.select_scenes(catalog)]

    def classify(self, scenes):
        """Mask, composite and classify an already filtered scene list."""
        s = self.settings

        masked = [mask_clouds(scene, s.qa_band, s.excluded_qa_codes) for scene in scenes]
        composite = median_composite(masked, self.grid, self.study_area, s.composite_bands)

        ndsi = snow_index(composite, s.index_bands)
        mask = snow_mask(ndsi, s.ndsi_threshold)
        percentage = snow_fraction(mask, s.kernel_radius)
        classes = clip_to_area(classify_fraction(percentage, s.class_breakpoints),
                               self.grid, self.study_area)

        counts = class_counts(classes)
        for cls in SnowClass:
            logger.info(f"  Class {int(cls)} ({cls.name.lower()}): {counts[cls]} pixels")
        undefined = int(np.count_nonzero(np.isnan(classes)))
        logger.info(f"  Undefined: {undefined} pixels")

        return ClassificationResult(
            composite=composite,
            ndsi=ndsi,
            snow_mask=mask,
            snow_percentage=percentage,
            class_raster=classes
        )

    def score_routes(self, fragments, class_raster):
        """Merge, buffer, histogram and rank the route fragments."""
        s = self.settings

        if fragments.crs is not None and fragments.crs != self.grid.crs:
            logger.info(f"Reprojecting routes from {fragments.crs} to {self.grid.crs}")
            fragments = fragments.to_crs(self.grid.crs)

        merged = merge_routes(fragments, s.route_name_field)
        buffered = buffer_routes(merged, s.route_buffer)

        records = []
        for name, zone in zip(buffered["name"], buffered.geometry):
            histogram = zonal_histogram(class_raster, self.grid, zone, s.zonal_scale)
            index = danger_index(histogram)
            if index == NO_COVERAGE_DANGER_INDEX:
                logger.warning(f"Route {name}: no classified pixels within {s.route_buffer} m")
            record = {f"class_{int(cls)}": histogram[cls] for cls in SnowClass}
            record["danger_index"] = index
            records.append(record)

        columns = [f"class_{int(cls)}" for cls in SnowClass] + ["danger_index"]
        scores = pd.DataFrame(records, columns=columns, index=merged.index)
        table = merged.join(scores)
        return rank_routes(table, s.tie_tolerance)

    def run(self, scenes, fragments):
        """Full run on in-memory scenes and route fragments."""
        logger.info(f"Grid: {self.grid.width} x {self.grid.height} pixels "
                    f"at {self.grid.resolution} m ({self.grid.crs})")

        selected = self.select_scenes(scenes)
        classification = self.classify(selected)
        ranked = self.score_routes(fragments, classification.class_raster)
        safest = safest_route(ranked)

        if safest is not None:
            logger.info(f"Safest route: {safest['name']} "
                        f"(danger index {safest['danger_index']:.4f})")

        return HazardResult(
            grid=self.grid,
            classification=classification,
            routes=ranked,
            safest=safest
        )
