"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Pacing & elevation analysis engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from services.pacer.elevation_processor import ElevationProcessor, gain_for_range, smooth_and_gain
from services.pacer.errors import DurationExceededError, ParseFallbackWarning, ValidationError
from services.pacer.models import (
    Calculated,
    Checkpoint,
    ElevationProfile,
    ElevationSample,
    ElevationStats,
    PacingResult,
    Pinned,
    PlanResult,
    RacePlanInput,
    SegmentResult,
)
from services.pacer.pacing_calculator import PacingCalculator, calculate_pacing
from services.pacer.segment_planner import SegmentPlanner

if TYPE_CHECKING:
    from services.pacer_service import PlanOrchestrator as PlanOrchestrator
    from services.pacer_service import recalculate_plan as recalculate_plan


def __getattr__(name: str) -> object:
    if name in ("PlanOrchestrator", "recalculate_plan"):
        from services import pacer_service

        return getattr(pacer_service, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Calculated",
    "Checkpoint",
    "DurationExceededError",
    "ElevationProcessor",
    "ElevationProfile",
    "ElevationSample",
    "ElevationStats",
    "PacingCalculator",
    "PacingResult",
    "ParseFallbackWarning",
    "Pinned",
    "PlanOrchestrator",
    "PlanResult",
    "RacePlanInput",
    "SegmentPlanner",
    "SegmentResult",
    "ValidationError",
    "calculate_pacing",
    "gain_for_range",
    "recalculate_plan",
    "smooth_and_gain",
]
