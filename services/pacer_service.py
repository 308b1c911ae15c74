"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Plan recomputation entry point.

Called after every edit (duration, start, checkpoint added/removed, pin
toggled). Pure: the same input always gives the same PlanResult.
"""

from __future__ import annotations

import dataclasses
from typing import Optional

from streamlit.logger import get_logger

from services.pacer.elevation_processor import ElevationProcessor
from services.pacer.models import ElevationProfile, PlanResult, RacePlanInput, SegmentResult
from services.pacer.pacing_calculator import PacingCalculator
from services.pacer.segment_planner import SegmentPlanner
from services.pacer.validators import validate_plan_input
from utils.config import Config

logger = get_logger(__name__)


class PlanOrchestrator:
    """Compose pacing, segment planning and elevation statistics into a PlanResult."""

    def __init__(
        self,
        config: Optional[Config] = None,
        processor: Optional[ElevationProcessor] = None,
        start_label: str = "Start",
        finish_label: str = "Finish",
    ) -> None:
        if processor is None:
            if config is not None:
                processor = ElevationProcessor(
                    threshold_m=config.elevation_threshold_m, window=config.smoothing_window
                )
            else:
                processor = ElevationProcessor()
        self.processor = processor
        self.calculator = PacingCalculator()
        self.planner = SegmentPlanner(start_label=start_label, finish_label=finish_label)

    def recalculate(
        self, plan_input: RacePlanInput, profile: Optional[ElevationProfile] = None
    ) -> PlanResult:
        """Recompute the whole plan from its current input.

        Pinned arrival/departure times are kept; every other time is derived
        again. When a profile is given, segments carry gain/loss and grade.

        Raises:
            ValidationError: malformed input, detected before any arithmetic
            DurationExceededError: stops consume the whole duration
        """
        validate_plan_input(plan_input)

        pacing = self.calculator.calculate(
            plan_input.total_distance_km,
            plan_input.start_datetime,
            plan_input.total_duration_seconds,
            plan_input.total_stop_seconds,
        )
        segments, warnings = self.planner.plan(
            plan_input.total_distance_km,
            plan_input.start_datetime,
            pacing,
            plan_input.checkpoints,
        )
        if profile is not None:
            segments = [self._with_elevation(seg, profile) for seg in segments]

        logger.debug(
            "Recalculated plan: %d segments, %.2f km/h, %d warnings",
            len(segments),
            pacing.required_speed_kmh,
            len(warnings),
        )
        return PlanResult(
            finish_datetime=pacing.finish_datetime,
            overall_required_speed_kmh=pacing.required_speed_kmh,
            segments=tuple(segments),
            warnings=tuple(warnings),
        )

    def _with_elevation(self, segment: SegmentResult, profile: ElevationProfile) -> SegmentResult:
        stats = self.processor.stats_for_range(segment.start_km, segment.end_km, profile)
        return dataclasses.replace(
            segment,
            elev_gain_m=stats.total_gain_m,
            elev_loss_m=stats.total_loss_m,
            avg_grade=self.processor.average_grade(
                stats.total_gain_m, stats.total_loss_m, segment.distance_km
            ),
        )


def recalculate_plan(
    plan_input: RacePlanInput, profile: Optional[ElevationProfile] = None
) -> PlanResult:
    return PlanOrchestrator().recalculate(plan_input, profile)
