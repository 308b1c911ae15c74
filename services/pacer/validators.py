"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Input validation for the pacing engine.

Validators raise ValidationError and never coerce or reorder their input.
"""

from __future__ import annotations

import math
import numbers
from typing import Sequence

from services.pacer.errors import ValidationError
from services.pacer.models import Checkpoint, RacePlanInput


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def validate_distance(total_distance_km: float) -> None:
    if not _is_number(total_distance_km) or total_distance_km <= 0:
        raise ValidationError(
            "INVALID_DISTANCE", [f"total distance must be > 0 km, got {total_distance_km!r}"]
        )


def validate_duration(seconds: float, label: str = "total duration") -> None:
    if not _is_number(seconds) or seconds < 0:
        raise ValidationError("INVALID_DURATION", [f"{label} must be >= 0 s, got {seconds!r}"])


def validate_checkpoints(total_distance_km: float, checkpoints: Sequence[Checkpoint]) -> None:
    """Check range, stop durations, strict ascending order and unique ids of checkpoints."""
    out_of_range = []
    for cp in checkpoints:
        km = cp.distance_from_start_km
        if not _is_number(km) or km < 0 or km > total_distance_km:
            out_of_range.append(f"{cp.name!r} at {km!r} km not in [0, {total_distance_km:g}]")
        validate_duration(cp.stop_duration_seconds, f"stop duration of {cp.name!r}")
    if out_of_range:
        raise ValidationError("CHECKPOINT_OUT_OF_RANGE", out_of_range)

    unsorted = [
        f"{cur.name!r} ({cur.distance_from_start_km:g} km) after "
        f"{prev.name!r} ({prev.distance_from_start_km:g} km)"
        for prev, cur in zip(checkpoints, checkpoints[1:])
        if cur.distance_from_start_km <= prev.distance_from_start_km
    ]
    if unsorted:
        raise ValidationError("CHECKPOINTS_NOT_SORTED", unsorted)

    seen: set[str] = set()
    duplicates = []
    for cp in checkpoints:
        if cp.id in seen and cp.id not in duplicates:
            duplicates.append(cp.id)
        seen.add(cp.id)
    if duplicates:
        raise ValidationError(
            "DUPLICATE_CHECKPOINT_ID", [f"checkpoint id {cp_id!r} used more than once" for cp_id in duplicates]
        )


def validate_plan_input(plan_input: RacePlanInput) -> None:
    validate_distance(plan_input.total_distance_km)
    validate_duration(plan_input.total_duration_seconds)
    validate_checkpoints(plan_input.total_distance_km, plan_input.checkpoints)
