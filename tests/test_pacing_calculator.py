"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Tests for overall pacing (finish time and required speed).
"""

from __future__ import annotations

import datetime as dt

import pytest

from services.pacer.errors import DurationExceededError, ValidationError
from services.pacer.pacing_calculator import PacingCalculator, calculate_pacing


def test_no_stops(race_start: dt.datetime):
    result = PacingCalculator().calculate(315.0, race_start, 36000, 0)
    assert result.finish_datetime == dt.datetime(2026, 6, 12, 16, 0)
    assert result.required_speed_kmh == pytest.approx(31.5)
    assert result.moving_seconds == 36000


def test_stops_excluded_from_moving_time(race_start: dt.datetime):
    result = calculate_pacing(315.0, race_start, 36000, 1800)
    # Finish still uses the total duration, speed uses moving time only
    assert result.finish_datetime == dt.datetime(2026, 6, 12, 16, 0)
    assert result.required_speed_kmh == pytest.approx(33.158, abs=1e-3)
    assert result.moving_seconds == 34200


@pytest.mark.parametrize("duration, stops", [(3600, 600), (7200, 0), (50000, 49999)])
def test_speed_formula(race_start: dt.datetime, duration: int, stops: int):
    result = calculate_pacing(100.0, race_start, duration, stops)
    assert result.required_speed_kmh == pytest.approx(100.0 / ((duration - stops) / 3600))
    assert result.finish_datetime == race_start + dt.timedelta(seconds=duration)


def test_longer_duration_means_slower_speed(race_start: dt.datetime):
    speeds = [calculate_pacing(315.0, race_start, d, 1800).required_speed_kmh for d in (30000, 36000, 42000)]
    assert speeds[0] > speeds[1] > speeds[2]


@pytest.mark.parametrize("stops", [36000, 40000])
def test_stops_consuming_duration_raise(race_start: dt.datetime, stops: int):
    with pytest.raises(DurationExceededError) as exc_info:
        calculate_pacing(315.0, race_start, 36000, stops)
    assert exc_info.value.code == "DURATION_EXCEEDED"
    assert exc_info.value.total_stop_seconds == stops


def test_keeps_timezone(race_start: dt.datetime):
    start = race_start.replace(tzinfo=dt.timezone(dt.timedelta(hours=2)))
    result = calculate_pacing(315.0, start, 36000)
    assert result.finish_datetime.tzinfo == start.tzinfo
    assert result.finish_datetime.hour == 16


@pytest.mark.parametrize("distance, duration", [(0.0, 3600), (100.0, -60), (float("inf"), 3600)])
def test_invalid_input_rejected(race_start: dt.datetime, distance: float, duration: int):
    with pytest.raises(ValidationError):
        calculate_pacing(distance, race_start, duration)
