"""
Configuration for the snow hazard pipeline
"""
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Tuple

from .exceptions import ConfigurationError

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Input data paths
SCENE_DIR = PROJECT_ROOT / "data" / "raw" / "scenes"
ROUTES_FILE = PROJECT_ROOT / "data" / "raw" / "routes" / "routes.geojson"

# Output directory
RESULTS_DIR = PROJECT_ROOT / "data" / "results"
CLASS_RASTER_NAME = "snow_classes.tif"
ROUTE_TABLE_NAME = "routes.parquet"
METADATA_NAME = "metadata.json"

# Study area: buffered point around the summit of Mount Everest
STUDY_AREA_LON = 86.9250
STUDY_AREA_LAT = 27.9881
STUDY_AREA_RADIUS = 15000.0  # meters
GRID_CRS = "EPSG:32645"  # UTM 45N, linear unit is the meter
GRID_RESOLUTION = 10.0  # meters (native Sentinel-2 visible/NIR)

# Scene filter
START_DATE = date(2023, 1, 1)  # inclusive
END_DATE = date(2023, 3, 31)  # exclusive
MAX_CLOUD_PERCENTAGE = 20.0
DATE_TAG = "ACQUISITION_DATE"
CLOUD_TAG = "CLOUDY_PIXEL_PERCENTAGE"

# Cloud masking on the Sentinel-2 scene classification band
QA_BAND = "SCL"
EXCLUDED_QA_CODES = (3, 8, 9)  # cloud shadow, cloud medium, cloud high

# Snow index
INDEX_BANDS = ("B3", "B11")  # green, SWIR
COMPOSITE_BANDS = INDEX_BANDS
NDSI_THRESHOLD = 0.45
KERNEL_RADIUS = 10  # pixels, 21 x 21 window
CLASS_BREAKPOINTS = (25.0, 50.0, 75.0)

# Routes
ROUTE_NAME_FIELD = "NAME"
ROUTE_BUFFER = 50.0  # meters
ZONAL_SCALE = 10.0  # meters
TIE_TOLERANCE = 1e-6

# Routes whose buffer holds no classified pixel get this index.
# Must stay above the highest class label.
NO_COVERAGE_DANGER_INDEX = 999.0

# Processing parameters
COMPRESSION = "LZW"  # Compression method for output GeoTIFF
PREDICTOR = 2  # Horizontal differencing, helps on large uniform class areas
TILED = True  # Use tiled format for better performance
BLOCKSIZE = 512  # Tile size
CLASS_NODATA = 255

# Class names for logging and the legend
CLASS_LABELS = {
    1: "0-25% snow",
    2: "25-50% snow",
    3: "50-75% snow",
    4: "75-100% snow"
}
CLASS_PALETTE = {
    1: "#D3D3D3",
    2: "#CCCCFF",
    3: "#4169E1",
    4: "#E0FFFF"
}


@dataclass(frozen=True)
class PipelineSettings:
    """
    Every tunable of one pipeline run.

    Defaults come from the module constants above. The settings validate
    themselves on construction so a bad value fails before any raster
    is read.
    """
    start_date: date = START_DATE
    end_date: date = END_DATE
    max_cloud_percentage: float = MAX_CLOUD_PERCENTAGE
    qa_band: str = QA_BAND
    excluded_qa_codes: Tuple[int, ...] = EXCLUDED_QA_CODES
    composite_bands: Tuple[str, ...] = COMPOSITE_BANDS
    index_bands: Tuple[str, str] = INDEX_BANDS
    ndsi_threshold: float = NDSI_THRESHOLD
    kernel_radius: int = KERNEL_RADIUS
    class_breakpoints: Tuple[float, ...] = CLASS_BREAKPOINTS
    route_name_field: str = ROUTE_NAME_FIELD
    route_buffer: float = ROUTE_BUFFER
    zonal_scale: float = ZONAL_SCALE
    tie_tolerance: float = TIE_TOLERANCE
    study_area_lon: float = STUDY_AREA_LON
    study_area_lat: float = STUDY_AREA_LAT
    study_area_radius: float = STUDY_AREA_RADIUS
    grid_crs: str = GRID_CRS
    grid_resolution: float = GRID_RESOLUTION

    def __post_init__(self):
        # CLI and JSON callers hand in lists
        for name in ("excluded_qa_codes", "composite_bands", "index_bands", "class_breakpoints"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        self.validate()

    def validate(self):
        """Raise ConfigurationError on the first invalid value."""
        if self.start_date >= self.end_date:
            raise ConfigurationError(
                f"Date range is empty or inverted: {self.start_date} -> {self.end_date}"
            )
        if not 0 < self.max_cloud_percentage <= 100:
            raise ConfigurationError(
                f"Cloud threshold must be in (0, 100], got {self.max_cloud_percentage}"
            )
        if not self.excluded_qa_codes:
            raise ConfigurationError("At least one QA code must be excluded")
        if len(self.index_bands) != 2 or self.index_bands[0] == self.index_bands[1]:
            raise ConfigurationError(f"Index needs two distinct bands, got {self.index_bands}")
        missing = [b for b in self.index_bands if b not in self.composite_bands]
        if missing:
            raise ConfigurationError(f"Index bands {missing} are not composited")
        if not -1 <= self.ndsi_threshold <= 1:
            raise ConfigurationError(f"NDSI threshold must be in [-1, 1], got {self.ndsi_threshold}")
        if self.kernel_radius < 1:
            raise ConfigurationError(f"Kernel radius must be positive, got {self.kernel_radius}")

        breaks = tuple(self.class_breakpoints)
        if len(breaks) != len(CLASS_LABELS) - 1:
            raise ConfigurationError(
                f"Expected {len(CLASS_LABELS) - 1} class breakpoints, got {len(breaks)}"
            )
        if any(lo >= hi for lo, hi in zip(breaks, breaks[1:])):
            raise ConfigurationError(f"Class breakpoints must be increasing: {breaks}")
        if breaks[0] <= 0 or breaks[-1] >= 100:
            raise ConfigurationError(f"Class breakpoints must lie inside (0, 100): {breaks}")

        if self.route_buffer < 0:
            raise ConfigurationError(f"Route buffer cannot be negative, got {self.route_buffer}")
        if self.zonal_scale <= 0:
            raise ConfigurationError(f"Zonal scale must be positive, got {self.zonal_scale}")
        if self.grid_resolution <= 0:
            raise ConfigurationError(f"Grid resolution must be positive, got {self.grid_resolution}")
        if self.zonal_scale > self.grid_resolution:
            raise ConfigurationError(
                f"Zonal scale {self.zonal_scale} is coarser than the grid resolution "
                f"{self.grid_resolution} and would undercount pixels"
            )
        if self.tie_tolerance <= 0:
            raise ConfigurationError(f"Tie tolerance must be positive, got {self.tie_tolerance}")
        if self.study_area_radius <= 0:
            raise ConfigurationError(
                f"Study area radius must be positive, got {self.study_area_radius}"
            )
        if NO_COVERAGE_DANGER_INDEX <= max(CLASS_LABELS):
            raise ConfigurationError("No-coverage sentinel must exceed the highest class")

    def with_overrides(self, **overrides):
        """Return a validated copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)
