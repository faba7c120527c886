"""Tests for pipeline settings validation."""
from datetime import date

import pytest

from snowroute.config import CLASS_BREAKPOINTS, NO_COVERAGE_DANGER_INDEX, PipelineSettings
from snowroute.exceptions import ConfigurationError


def test_defaults_are_valid():
    settings = PipelineSettings()
    assert settings.ndsi_threshold == 0.45
    assert settings.kernel_radius == 10
    assert settings.class_breakpoints == CLASS_BREAKPOINTS
    assert settings.route_buffer == 50.0
    assert settings.tie_tolerance == 1e-6


def test_sentinel_is_above_every_class():
    assert NO_COVERAGE_DANGER_INDEX > 4


@pytest.mark.parametrize("overrides", [
    {"route_buffer": -1.0},
    {"class_breakpoints": (50.0, 25.0, 75.0)},
    {"class_breakpoints": (25.0, 25.0, 75.0)},
    {"class_breakpoints": (25.0, 50.0)},
    {"start_date": date(2023, 4, 1), "end_date": date(2023, 1, 1)},
    {"start_date": date(2023, 1, 1), "end_date": date(2023, 1, 1)},
    {"kernel_radius": 0},
    {"zonal_scale": 20.0},
    {"zonal_scale": 0.0},
    {"tie_tolerance": 0.0},
    {"max_cloud_percentage": 0.0},
    {"excluded_qa_codes": ()},
    {"index_bands": ("B3", "B3")},
    {"index_bands": ("B3", "B8")},
    {"study_area_radius": -5.0},
])
def test_invalid_settings_fail_fast(overrides):
    with pytest.raises(ConfigurationError):
        PipelineSettings(**overrides)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        PipelineSettings(route_buffer=-10)


def test_with_overrides_skips_none_and_coerces_lists():
    settings = PipelineSettings().with_overrides(
        class_breakpoints=[20, 40, 60], route_buffer=None, kernel_radius=3
    )
    assert settings.class_breakpoints == (20, 40, 60)
    assert settings.route_buffer == 50.0
    assert settings.kernel_radius == 3


def test_with_overrides_validates():
    with pytest.raises(ConfigurationError):
        PipelineSettings().with_overrides(route_buffer=-1)
