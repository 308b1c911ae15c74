"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Per-segment timetable between start, checkpoints and finish.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional, Sequence, Union

import pandas as pd
from streamlit.logger import get_logger

from services.pacer.errors import ParseFallbackWarning
from services.pacer.models import (
    Calculated,
    Checkpoint,
    PacingResult,
    Pinned,
    SegmentResult,
    TimeField,
)
from services.pacer.validators import validate_checkpoints, validate_distance

logger = get_logger(__name__)

_CLOCK_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_clock(value: Union[dt.datetime, dt.time, str, None]) -> Optional[dt.time]:
    """Wall-clock time of a pinned value.

    Accepts ``datetime.time``, ``datetime`` (clock part only), ``"HH:MM"``,
    ``"HH:MM:SS"`` or an ISO datetime string. Blank strings and None mean
    "not pinned" and return None.

    Raises:
        ValueError: if the value cannot be read as a time of day
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.time()
    if isinstance(value, dt.time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str):
        raise ValueError(f"unsupported pinned time type {type(value).__name__}")

    text = value.strip()
    if not text:
        return None
    for fmt in _CLOCK_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    # ISO datetime as kept in saved plan records; needs both a date and a time
    ts = pd.NaT
    if "T" in text or " " in text:
        ts = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if pd.isna(ts):
        raise ValueError(f"not a time of day: {text!r}")
    return ts.time()


def resolve_clock(reference: dt.datetime, clock: dt.time) -> dt.datetime:
    """Place a wall-clock time on the reference's date, rolling to the next day if earlier.

    Only meaningful for races finishing within about a day where each
    checkpoint is visited once.
    """
    candidate = dt.datetime.combine(reference.date(), clock, tzinfo=reference.tzinfo)
    if candidate < reference:
        candidate += dt.timedelta(days=1)
    return candidate


def _speed_kmh(distance_km: float, start: dt.datetime, end: dt.datetime) -> Optional[float]:
    hours = (end - start).total_seconds() / 3600.0
    if hours <= 0:
        return None
    return distance_km / hours


class SegmentPlanner:
    """Single pass over checkpoints in distance order.

    Each checkpoint's times depend only on the previous effective departure, so
    one ordered pass recomputes every derived field while keeping pinned ones.
    """

    def __init__(self, start_label: str = "Start", finish_label: str = "Finish") -> None:
        self.start_label = start_label
        self.finish_label = finish_label

    def plan(
        self,
        total_distance_km: float,
        start_datetime: dt.datetime,
        pacing: PacingResult,
        checkpoints: Sequence[Checkpoint],
    ) -> tuple[list[SegmentResult], list[ParseFallbackWarning]]:
        """Build the timetable.

        Args:
            total_distance_km: Race distance in kilometers
            start_datetime: Planned start
            pacing: Overall result from PacingCalculator
            checkpoints: Checkpoints sorted by strictly ascending distance

        Returns:
            (segments, warnings): one segment per checkpoint plus one to the
            finish, and the pinned values that could not be parsed

        Raises:
            ValidationError: on out-of-range or unsorted checkpoints
        """
        validate_distance(total_distance_km)
        validate_checkpoints(total_distance_km, checkpoints)

        segments: list[SegmentResult] = []
        warnings: list[ParseFallbackWarning] = []
        previous_time = start_datetime
        previous_km = 0.0
        previous_label = self.start_label
        speed_kmh = pacing.required_speed_kmh

        for cp in checkpoints:
            distance_km = cp.distance_from_start_km - previous_km
            calculated_arrival = previous_time + dt.timedelta(hours=distance_km / speed_kmh)

            arrival = self._effective(
                cp, "arrival", cp.pinned_arrival, previous_time, calculated_arrival, warnings
            )
            calculated_departure = arrival.value + dt.timedelta(seconds=cp.stop_duration_seconds)
            departure = self._effective(
                cp, "departure", cp.pinned_departure, arrival.value, calculated_departure, warnings
            )

            segments.append(
                SegmentResult(
                    from_label=previous_label,
                    to_label=cp.name,
                    start_km=previous_km,
                    end_km=cp.distance_from_start_km,
                    distance_km=distance_km,
                    arrival=arrival,
                    departure=departure,
                    required_speed_kmh=_speed_kmh(distance_km, previous_time, arrival.value),
                    checkpoint_id=cp.id,
                )
            )
            previous_time = departure.value
            previous_km = cp.distance_from_start_km
            previous_label = cp.name

        finish = Calculated(pacing.finish_datetime)
        remaining_km = total_distance_km - previous_km
        segments.append(
            SegmentResult(
                from_label=previous_label,
                to_label=self.finish_label,
                start_km=previous_km,
                end_km=total_distance_km,
                distance_km=remaining_km,
                arrival=finish,
                departure=finish,
                required_speed_kmh=_speed_kmh(remaining_km, previous_time, finish.value),
            )
        )
        return segments, warnings

    def _effective(
        self,
        cp: Checkpoint,
        field: str,
        pinned_value: Union[dt.datetime, dt.time, str, None],
        reference: dt.datetime,
        calculated: dt.datetime,
        warnings: list[ParseFallbackWarning],
    ) -> TimeField:
        """Pinned time resolved against the reference, else the calculated one."""
        try:
            clock = parse_clock(pinned_value)
        except ValueError:
            warning = ParseFallbackWarning(cp.id, field, pinned_value)
            logger.warning("%s", warning)
            warnings.append(warning)
            clock = None
        if clock is None:
            return Calculated(calculated)
        return Pinned(resolve_clock(reference, clock))
