#!/usr/bin/env python3
"""
Snow Hazard Orchestrator
Classifies snow cover around the study area and ranks climbing routes
"""
import argparse
import logging
import sys
import time
from datetime import date
from pathlib import Path

from ..config import (
    SCENE_DIR,
    ROUTES_FILE,
    RESULTS_DIR,
    CLASS_RASTER_NAME,
    ROUTE_TABLE_NAME,
    METADATA_NAME,
    NO_COVERAGE_DANGER_INDEX,
    PipelineSettings
)
from ..routes.merge import load_route_fragments
from .export import write_class_raster, write_route_table, write_run_metadata
from .pipeline import SnowHazardPipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def validate_inputs(scene_dir, routes_file):
    """Validate that all required inputs exist"""
    if not scene_dir.is_dir():
        raise FileNotFoundError(f"Scene directory not found: {scene_dir}")

    if not routes_file.exists():
        raise FileNotFoundError(f"Route file not found: {routes_file}")

    logger.info("✓ Input files validated")


def _iso_date(value):
    return date.fromisoformat(value)


def build_parser():
    parser = argparse.ArgumentParser(description="Rank climbing routes by snow hazard")
    parser.add_argument("--scenes", type=Path, default=SCENE_DIR, help="Directory of scene GeoTIFFs")
    parser.add_argument("--routes", type=Path, default=ROUTES_FILE, help="Route fragment vector file")
    parser.add_argument("--output-dir", type=Path, default=RESULTS_DIR, help="Where outputs are written")
    parser.add_argument("--start", type=_iso_date, help="First acquisition date (inclusive)")
    parser.add_argument("--end", type=_iso_date, help="Last acquisition date (exclusive)")
    parser.add_argument("--max-cloud", type=float, help="Maximum scene cloud percentage")
    parser.add_argument("--threshold", type=float, help="NDSI snow threshold")
    parser.add_argument("--radius", type=int, help="Neighborhood radius in pixels")
    parser.add_argument("--breakpoints", type=float, nargs=3, help="Class breakpoints in percent")
    parser.add_argument("--buffer", type=float, help="Route buffer distance")
    parser.add_argument("--scale", type=float, help="Zonal statistics sampling scale")
    parser.add_argument("--tolerance", type=float, help="Tie tolerance for the safest route")
    parser.add_argument("--name-field", type=str, help="Route name column")
    parser.add_argument("--study-radius", type=float, help="Study area radius around the centre point")
    parser.add_argument("--resolution", type=float, help="Grid resolution in meters")
    return parser


def settings_from_args(args):
    return PipelineSettings().with_overrides(
        start_date=args.start,
        end_date=args.end,
        max_cloud_percentage=args.max_cloud,
        ndsi_threshold=args.threshold,
        kernel_radius=args.radius,
        class_breakpoints=args.breakpoints,
        route_buffer=args.buffer,
        zonal_scale=args.scale,
        tie_tolerance=args.tolerance,
        route_name_field=args.name_field,
        study_area_radius=args.study_radius,
        grid_resolution=args.resolution
    )


def main(argv=None):
    """Main processing function"""
    args = build_parser().parse_args(argv)

    try:
        logger.info("=" * 60)
        logger.info("Snow Hazard Classification and Route Ranking")
        logger.info("=" * 60)

        # Settings fail before any raster is read
        settings = settings_from_args(args)
        pipeline = SnowHazardPipeline(settings)

        validate_inputs(args.scenes, args.routes)

        args.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Output directory: {args.output_dir}")

        logger.info(f"Period: {settings.start_date} -> {settings.end_date}")
        logger.info(f"Max cloud: {settings.max_cloud_percentage}%")
        logger.info(f"NDSI threshold: {settings.ndsi_threshold}")
        logger.info("=" * 60)

        start_time = time.time()

        scenes = pipeline.load_scenes(args.scenes)
        fragments = load_route_fragments(args.routes, settings.route_name_field, pipeline.grid.crs)
        result = pipeline.run(scenes, fragments)

        write_class_raster(args.output_dir / CLASS_RASTER_NAME, result.class_raster, result.grid)
        write_route_table(args.output_dir / ROUTE_TABLE_NAME, result.routes)
        write_run_metadata(args.output_dir / METADATA_NAME, result, settings)

        duration = time.time() - start_time

        # Summary
        logger.info("=" * 60)
        logger.info("ROUTE SUMMARY")
        logger.info("=" * 60)
        for _, route in result.routes.iterrows():
            marker = "✓" if route["is_safest"] else " "
            if route["danger_index"] >= NO_COVERAGE_DANGER_INDEX:
                score = "no coverage"
            else:
                score = f"{route['danger_index']:.3f}"
            logger.info(f"  {marker} {route['name']}: {score}")

        logger.info(f"\nScenes used: {len(scenes)}")
        logger.info(f"Safest route: {result.safest_name}")
        logger.info(f"Total time: {duration:.2f} seconds")
        logger.info("=" * 60)

        return 0

    except Exception as e:
        logger.error(f"Processing failed: {e}")
        raise


if __name__ == "__main__":
    sys.exit(main())
