"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Value types for race plans, timetables and elevation profiles.

Every type is immutable and built fresh for each recomputation.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from services.pacer.errors import ValidationError


@dataclass(frozen=True)
class Pinned:
    """Time typed in by the user; never overwritten by a recomputation.

    In input the value is a wall-clock time: ``datetime.time``, a ``datetime``
    (only its clock time is used) or a string such as ``"14:30"``.
    In results it is the resolved ``datetime``.
    """

    value: Union[dt.datetime, dt.time, str]
    is_pinned: ClassVar[bool] = True


@dataclass(frozen=True)
class Calculated:
    """Time computed by the engine; always recomputed from the other inputs."""

    value: dt.datetime
    is_pinned: ClassVar[bool] = False


TimeField = Union[Pinned, Calculated]


@dataclass(frozen=True)
class ElevationSample:
    distance_km: float
    elevation_m: float


@dataclass(frozen=True)
class ElevationStats:
    min_m: float = 0.0
    max_m: float = 0.0
    total_gain_m: float = 0.0
    total_loss_m: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {
            "minElevationM": self.min_m,
            "maxElevationM": self.max_m,
            "elevGainM": self.total_gain_m,
            "elevLossM": self.total_loss_m,
        }


@dataclass(frozen=True)
class ElevationProfile:
    """Distance-referenced elevation series of a route."""

    distances_km: tuple[float, ...]
    elevations_m: tuple[float, ...]

    def __post_init__(self) -> None:
        distances = tuple(float(d) for d in self.distances_km)
        elevations = tuple(float(e) for e in self.elevations_m)
        if len(distances) != len(elevations):
            raise ValidationError(
                "INVALID_PROFILE",
                [f"{len(distances)} distances for {len(elevations)} elevations"],
            )
        if any(b < a for a, b in zip(distances, distances[1:])):
            raise ValidationError("INVALID_PROFILE", ["distances must be non-decreasing"])
        object.__setattr__(self, "distances_km", distances)
        object.__setattr__(self, "elevations_m", elevations)

    @classmethod
    def from_elevations(
        cls,
        elevations_m: Sequence[float],
        total_distance_km: Optional[float] = None,
        distances_km: Optional[Sequence[float]] = None,
    ) -> "ElevationProfile":
        """Build a profile, spacing samples evenly over the route when distances are omitted."""
        if distances_km is None:
            if total_distance_km is None:
                raise ValidationError(
                    "INVALID_PROFILE", ["either distances or the total distance is required"]
                )
            distances_km = np.linspace(0.0, float(total_distance_km), num=len(elevations_m))
        return cls(tuple(distances_km), tuple(elevations_m))

    @classmethod
    def from_samples(cls, samples: Iterable[ElevationSample]) -> "ElevationProfile":
        samples = list(samples)
        return cls(
            tuple(s.distance_km for s in samples),
            tuple(s.elevation_m for s in samples),
        )

    def samples(self) -> list[ElevationSample]:
        return [ElevationSample(d, e) for d, e in zip(self.distances_km, self.elevations_m)]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"distanceKm": list(self.distances_km), "elevationM": list(self.elevations_m)}
        )

    @property
    def total_distance_km(self) -> float:
        return self.distances_km[-1] if self.distances_km else 0.0

    def __len__(self) -> int:
        return len(self.elevations_m)


@dataclass(frozen=True)
class Checkpoint:
    """Named point along the route (feed zone, aid station), optionally with a stop."""

    id: str
    name: str
    distance_from_start_km: float
    stop_duration_seconds: float = 0
    arrival: Optional[TimeField] = None
    departure: Optional[TimeField] = None

    @property
    def pinned_arrival(self) -> Optional[Union[dt.datetime, dt.time, str]]:
        return self.arrival.value if isinstance(self.arrival, Pinned) else None

    @property
    def pinned_departure(self) -> Optional[Union[dt.datetime, dt.time, str]]:
        return self.departure.value if isinstance(self.departure, Pinned) else None


@dataclass(frozen=True)
class RacePlanInput:
    total_distance_km: float
    start_datetime: dt.datetime
    total_duration_seconds: float
    checkpoints: tuple[Checkpoint, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "checkpoints", tuple(self.checkpoints))

    @property
    def total_stop_seconds(self) -> float:
        return sum(cp.stop_duration_seconds for cp in self.checkpoints)


@dataclass(frozen=True)
class PacingResult:
    finish_datetime: dt.datetime
    required_speed_kmh: float
    moving_seconds: float


@dataclass(frozen=True)
class SegmentResult:
    """Stretch between two consecutive timetable events (start, checkpoint, finish).

    ``arrival`` and ``departure`` refer to the ``to`` end of the segment.
    """

    from_label: str
    to_label: str
    start_km: float
    end_km: float
    distance_km: float
    arrival: TimeField
    departure: TimeField
    required_speed_kmh: Optional[float]
    checkpoint_id: Optional[str] = None
    elev_gain_m: Optional[float] = None
    elev_loss_m: Optional[float] = None
    avg_grade: Optional[float] = None

    @property
    def arrival_datetime(self) -> dt.datetime:
        return self.arrival.value

    @property
    def departure_datetime(self) -> dt.datetime:
        return self.departure.value

    @property
    def is_finish(self) -> bool:
        return self.checkpoint_id is None


@dataclass(frozen=True)
class PlanResult:
    finish_datetime: dt.datetime
    overall_required_speed_kmh: float
    segments: tuple[SegmentResult, ...]
    warnings: tuple[Any, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(self.segments))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    def as_input(self, plan_input: RacePlanInput) -> RacePlanInput:
        """Feed this result back as input: pins stay pinned, everything else becomes Calculated."""
        by_checkpoint = {seg.checkpoint_id: seg for seg in self.segments if not seg.is_finish}
        checkpoints = []
        for cp in plan_input.checkpoints:
            seg = by_checkpoint.get(cp.id)
            if seg is None:
                checkpoints.append(cp)
                continue
            checkpoints.append(dataclasses.replace(cp, arrival=seg.arrival, departure=seg.departure))
        return dataclasses.replace(plan_input, checkpoints=tuple(checkpoints))

    def to_frame(self) -> pd.DataFrame:
        """Timetable as a DataFrame, one row per segment."""
        rows = [
            {
                "fromLabel": seg.from_label,
                "toLabel": seg.to_label,
                "startKm": seg.start_km,
                "endKm": seg.end_km,
                "distanceKm": seg.distance_km,
                "arrival": seg.arrival_datetime,
                "arrivalPinned": seg.arrival.is_pinned,
                "departure": seg.departure_datetime,
                "departurePinned": seg.departure.is_pinned,
                "requiredSpeedKmh": seg.required_speed_kmh,
                "elevGainM": seg.elev_gain_m,
                "elevLossM": seg.elev_loss_m,
                "avgGrade": seg.avg_grade,
            }
            for seg in self.segments
        ]
        columns = [
            "fromLabel",
            "toLabel",
            "startKm",
            "endKm",
            "distanceKm",
            "arrival",
            "arrivalPinned",
            "departure",
            "departurePinned",
            "requiredSpeedKmh",
            "elevGainM",
            "elevLossM",
            "avgGrade",
        ]
        return pd.DataFrame(rows, columns=columns)
