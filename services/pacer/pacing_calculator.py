"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Finish time and required average speed of a race plan.
"""

from __future__ import annotations

import datetime as dt

from streamlit.logger import get_logger

from services.pacer.errors import DurationExceededError
from services.pacer.models import PacingResult
from services.pacer.validators import validate_distance, validate_duration

logger = get_logger(__name__)


class PacingCalculator:
    """Overall pacing: finish time from total duration, speed from moving time."""

    def calculate(
        self,
        total_distance_km: float,
        start_datetime: dt.datetime,
        total_duration_seconds: float,
        total_stop_seconds: float = 0,
    ) -> PacingResult:
        """Compute finish time and required moving speed.

        Args:
            total_distance_km: Race distance in kilometers
            start_datetime: Planned start
            total_duration_seconds: Start to finish, stops included
            total_stop_seconds: Sum of planned stop durations

        Returns:
            PacingResult with finish datetime, required speed (km/h) and moving seconds

        Raises:
            ValidationError: on a non-positive distance or a negative duration
            DurationExceededError: if stops leave no moving time
        """
        validate_distance(total_distance_km)
        validate_duration(total_duration_seconds)
        validate_duration(total_stop_seconds, "total stop duration")

        finish_datetime = start_datetime + dt.timedelta(seconds=total_duration_seconds)
        moving_seconds = total_duration_seconds - total_stop_seconds
        if moving_seconds <= 0:
            raise DurationExceededError(total_duration_seconds, total_stop_seconds)

        required_speed_kmh = total_distance_km / (moving_seconds / 3600.0)
        logger.debug(
            "Pacing %.1f km in %ss (%ss moving): %.2f km/h, finish %s",
            total_distance_km,
            total_duration_seconds,
            moving_seconds,
            required_speed_kmh,
            finish_datetime.isoformat(),
        )
        return PacingResult(
            finish_datetime=finish_datetime,
            required_speed_kmh=required_speed_kmh,
            moving_seconds=moving_seconds,
        )


def calculate_pacing(
    total_distance_km: float,
    start_datetime: dt.datetime,
    total_duration_seconds: float,
    total_stop_seconds: float = 0,
) -> PacingResult:
    return PacingCalculator().calculate(
        total_distance_km, start_datetime, total_duration_seconds, total_stop_seconds
    )
