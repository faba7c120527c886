"""End-to-end tests of the snow hazard pipeline on synthetic scenes."""
from datetime import date

import numpy as np
import pytest
from shapely.geometry import LineString, box

from snowroute.config import NO_COVERAGE_DANGER_INDEX, PipelineSettings
from snowroute.exceptions import ConfigurationError
from snowroute.hazard.pipeline import SnowHazardPipeline

from conftest import make_routes, make_scene


def _settings(**overrides):
    values = dict(
        composite_bands=("B3", "B11"),
        kernel_radius=2,
        route_buffer=3.0,
        zonal_scale=1.0,
        grid_resolution=1.0,
    )
    values.update(overrides)
    return PipelineSettings(**values)


def _pipeline(grid, **overrides):
    return SnowHazardPipeline(_settings(**overrides), study_area=box(*grid.bounds), grid=grid)


def _routes():
    return make_routes([
        ("Snowfield", LineString([(10, 20), (10, 50)])),
        ("Snowfield", LineString([(10, 50), (10, 80)])),
        ("Rock Rib", LineString([(90, 20), (90, 80)])),
        ("Off Map", LineString([(500, 500), (520, 520)])),
    ])


def test_classification_of_half_snow_scene(grid, half_snow_bands):
    pipeline = _pipeline(grid)
    result = pipeline.classify([make_scene(grid, half_snow_bands)])
    classes = result.class_raster
    assert classes[50, 10] == 4
    assert classes[50, 90] == 1
    # edge windows are undefined
    assert np.all(np.isnan(classes[:2, :]))
    assert np.all(np.isnan(classes[:, -2:]))
    values = set(np.unique(classes[~np.isnan(classes)]))
    assert values <= {1.0, 2.0, 3.0, 4.0}


def test_routes_are_scored_and_safest_picked(grid, half_snow_bands):
    scenes = [
        make_scene(grid, half_snow_bands, "a"),
        make_scene(grid, half_snow_bands, "b", acquired=date(2023, 3, 1)),
    ]
    result = _pipeline(grid).run(scenes, _routes())
    routes = result.routes.set_index("name")

    assert len(routes) == 3
    assert routes.loc["Rock Rib", "danger_index"] == 1.0
    assert routes.loc["Snowfield", "danger_index"] == 4.0
    assert routes.loc["Off Map", "danger_index"] == NO_COVERAGE_DANGER_INDEX
    assert routes.loc["Rock Rib", "is_safest"]
    assert not routes.loc["Snowfield", "is_safest"]
    assert not routes.loc["Off Map", "is_safest"]
    assert result.safest_name == "Rock Rib"
    assert result.routes["name"].tolist() == ["Rock Rib", "Snowfield", "Off Map"]


def test_histogram_columns_match_index(grid, half_snow_bands):
    result = _pipeline(grid).run([make_scene(grid, half_snow_bands)], _routes())
    for _, route in result.routes.iterrows():
        counts = [route[f"class_{cls}"] for cls in (1, 2, 3, 4)]
        total = sum(counts)
        if total:
            weighted = sum(cls * n for cls, n in zip((1, 2, 3, 4), counts)) / total
            assert route["danger_index"] == pytest.approx(weighted)
        else:
            assert route["danger_index"] == NO_COVERAGE_DANGER_INDEX


def test_cloudy_scene_does_not_bias_composite(grid, half_snow_bands):
    cloud = dict(half_snow_bands)
    cloud["B3"] = np.zeros(grid.shape, dtype=np.float32)
    cloud["B11"] = np.ones(grid.shape, dtype=np.float32)
    cloud["SCL"] = np.full(grid.shape, 9, dtype=np.float32)
    scenes = [make_scene(grid, half_snow_bands, "clear"), make_scene(grid, cloud, "cloud")]
    result = _pipeline(grid).classify(scenes)
    np.testing.assert_array_equal(result.composite.band("B3"), half_snow_bands["B3"])


def test_no_matching_scenes_gives_no_coverage(grid, half_snow_bands):
    late = make_scene(grid, half_snow_bands, acquired=date(2024, 1, 1))
    result = _pipeline(grid).run([late], _routes())
    assert np.all(np.isnan(result.class_raster))
    assert (result.routes["danger_index"] == NO_COVERAGE_DANGER_INDEX).all()
    assert not result.routes["is_safest"].any()
    assert result.safest is None


def test_bad_zonal_scale_fails_before_raster_work(grid):
    with pytest.raises(ConfigurationError):
        _pipeline(grid, zonal_scale=0.3)


def test_default_pipeline_grid_covers_study_area():
    pipeline = SnowHazardPipeline()
    assert pipeline.grid.resolution == 10.0
    minx, miny, maxx, maxy = pipeline.grid.bounds
    sminx, sminy, smaxx, smaxy = pipeline.study_area.bounds
    assert minx <= sminx and miny <= sminy and maxx >= smaxx and maxy >= smaxy


def test_default_bands_run_on_index_and_qa_bands_only(grid, half_snow_bands):
    settings = PipelineSettings(kernel_radius=2, route_buffer=3.0,
                                zonal_scale=1.0, grid_resolution=1.0)
    assert set(settings.composite_bands) <= set(half_snow_bands)
    pipeline = SnowHazardPipeline(settings, study_area=box(*grid.bounds), grid=grid)
    routes = make_routes([("Rock Rib", LineString([(90, 20), (90, 80)]))])
    result = pipeline.run([make_scene(grid, half_snow_bands)], routes)
    assert result.class_raster[50, 90] == 1
    assert result.safest_name == "Rock Rib"
