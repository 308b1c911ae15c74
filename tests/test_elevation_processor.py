"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Tests for elevation smoothing and gain/loss statistics.
"""

from __future__ import annotations

import pytest

from services.pacer.elevation_processor import (
    ElevationProcessor,
    gain_for_range,
    smooth_and_gain,
)
from services.pacer.errors import ValidationError
from services.pacer.models import ElevationProfile, ElevationStats


@pytest.fixture
def processor() -> ElevationProcessor:
    return ElevationProcessor()


@pytest.fixture
def raw_processor() -> ElevationProcessor:
    """Window of one sample: no smoothing, only run detection."""
    return ElevationProcessor(window=1)


def test_smooth_truncates_window_at_boundaries(processor: ElevationProcessor):
    smoothed = processor.smooth([1, 2, 3, 4, 5, 6])
    assert smoothed == pytest.approx([2.0, 2.5, 3.0, 4.0, 4.5, 5.0])


def test_smooth_short_series_unchanged(processor: ElevationProcessor):
    assert processor.smooth([100, 120, 90]) == [100.0, 120.0, 90.0]
    assert processor.smooth([]) == []


def test_golden_gain_after_smoothing(processor: ElevationProcessor):
    elevations = [100, 102, 105, 103, 108, 110]
    # Smoothed: 102.33, 102.5, 103.6, 105.6, 106.5, 107.0 -> one climbing run
    assert processor.smooth(elevations) == pytest.approx(
        [307 / 3, 102.5, 103.6, 105.6, 106.5, 107.0]
    )
    assert processor.compute_gain(elevations) == pytest.approx(14 / 3)
    assert processor.compute_loss(elevations) == 0.0


def test_run_below_threshold_is_discarded(raw_processor: ElevationProcessor):
    assert raw_processor.compute_gain([0, 2.9, 0]) == 0.0
    assert raw_processor.compute_loss([0, 2.9, 0]) == 0.0


def test_run_at_threshold_is_counted(raw_processor: ElevationProcessor):
    assert raw_processor.compute_gain([0, 3, 0]) == pytest.approx(3.0)
    assert raw_processor.compute_loss([0, 3, 0]) == pytest.approx(3.0)


def test_noise_on_flat_terrain_gives_no_gain(raw_processor: ElevationProcessor):
    noisy = [100, 101, 100, 102, 100, 101, 99, 100]
    assert raw_processor.compute_gain(noisy) == 0.0
    assert raw_processor.compute_loss(noisy) == 0.0


def test_plateau_does_not_split_climb(raw_processor: ElevationProcessor):
    # Two 2 m steps separated by a flat sample form one 4 m climb.
    assert raw_processor.compute_gain([0, 2, 2, 4]) == pytest.approx(4.0)


def test_descent_then_climb(raw_processor: ElevationProcessor):
    stats = raw_processor.compute_stats([50, 40, 30, 35, 45])
    assert stats.total_loss_m == pytest.approx(20.0)
    assert stats.total_gain_m == pytest.approx(15.0)
    assert stats.min_m == 30.0
    assert stats.max_m == 50.0


def test_stats_empty_and_single_sample(processor: ElevationProcessor):
    assert processor.compute_stats([]) == ElevationStats(0.0, 0.0, 0.0, 0.0)
    single = processor.compute_stats([42.0])
    assert single == ElevationStats(min_m=42.0, max_m=42.0, total_gain_m=0.0, total_loss_m=0.0)


def test_custom_threshold():
    processor = ElevationProcessor(threshold_m=10.0, window=1)
    assert processor.compute_gain([0, 5, 0, 12]) == pytest.approx(12.0)


def test_gain_for_range_restarts_on_subset(processor: ElevationProcessor):
    elevations = [100, 100, 100, 100, 100, 110, 120, 130, 140, 150, 150]
    profile = ElevationProfile.from_elevations(elevations, total_distance_km=10.0)

    assert processor.gain_for_range(0.0, 4.0, profile) == 0.0
    # Subset 100..150 smoothed from 110 to 146.67
    assert processor.gain_for_range(4.0, 10.0, profile) == pytest.approx(110 / 3)


def test_gain_for_range_rejects_reversed_range(processor: ElevationProcessor):
    profile = ElevationProfile.from_elevations([1, 2, 3], total_distance_km=2.0)
    with pytest.raises(ValidationError):
        processor.gain_for_range(2.0, 1.0, profile)


def test_module_level_entry_points():
    elevations = [100, 100, 100, 100, 100, 110, 120, 130, 140, 150, 150]
    distances = [float(i) for i in range(len(elevations))]
    assert gain_for_range(elevations, distances, 4.0, 10.0) == pytest.approx(110 / 3)

    stats = smooth_and_gain([100, 102, 105, 103, 108, 110])
    assert stats.total_gain_m == pytest.approx(14 / 3)
    assert stats.min_m == pytest.approx(307 / 3)
    assert stats.max_m == pytest.approx(107.0)


def test_smooth_and_gain_rejects_inconsistent_distances():
    with pytest.raises(ValidationError):
        smooth_and_gain([1, 2, 3], distances_km=[0.0, 1.0])
    with pytest.raises(ValidationError):
        smooth_and_gain([1, 2, 3], distances_km=[0.0, 2.0, 1.0])


def test_profile_synthesizes_even_distances():
    profile = ElevationProfile.from_elevations([10, 20, 30], total_distance_km=10.0)
    assert profile.distances_km == pytest.approx((0.0, 5.0, 10.0))
    assert profile.total_distance_km == pytest.approx(10.0)
    assert [s.elevation_m for s in profile.samples()] == [10.0, 20.0, 30.0]


def test_average_grade_rules():
    assert ElevationProcessor.average_grade(100, 10, 2.0) == pytest.approx(0.05)
    assert ElevationProcessor.average_grade(10, 100, 2.0) == pytest.approx(-0.05)
    assert ElevationProcessor.average_grade(60, 40, 2.0) == pytest.approx(0.01)
    assert ElevationProcessor.average_grade(60, 40, 0.0) == 0.0
