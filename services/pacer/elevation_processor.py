"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Elevation smoothing and gain/loss statistics.

Raw elevation samples carry GPS/barometric noise. The series is first smoothed
with a centered moving average, then cut into monotonic runs; only runs whose
height reaches the threshold are counted as gain or loss.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from streamlit.logger import get_logger

from services.pacer.errors import ValidationError
from services.pacer.models import ElevationProfile, ElevationStats

logger = get_logger(__name__)

DEFAULT_THRESHOLD_M = 3.0
DEFAULT_SMOOTHING_WINDOW = 5


class ElevationProcessor:
    """Gain/loss statistics over a whole profile or a distance sub-range."""

    def __init__(
        self,
        threshold_m: float = DEFAULT_THRESHOLD_M,
        window: int = DEFAULT_SMOOTHING_WINDOW,
    ) -> None:
        if window < 1:
            raise ValidationError("INVALID_PROFILE", [f"smoothing window must be >= 1, got {window}"])
        self.threshold_m = float(threshold_m)
        self.window = int(window)

    def smooth(self, elevations: Sequence[float]) -> list[float]:
        """Centered moving average, truncated at the series boundaries.

        Each point averages the samples in [i - w//2, i + w//2] that exist, so
        boundary points average fewer samples. Series shorter than the window
        are returned unchanged.
        """
        values = np.asarray(elevations, dtype=float)
        if len(values) < self.window:
            return values.tolist()
        kernel = np.ones(self.window)
        sums = np.convolve(values, kernel, mode="same")
        counts = np.convolve(np.ones_like(values), kernel, mode="same")
        return (sums / counts).tolist()

    def compute_gain(self, elevations: Sequence[float]) -> float:
        gain, _ = self._gain_and_loss(self.smooth(elevations))
        return gain

    def compute_loss(self, elevations: Sequence[float]) -> float:
        _, loss = self._gain_and_loss(self.smooth(elevations))
        return loss

    def compute_stats(self, elevations: Sequence[float]) -> ElevationStats:
        """Min/max of the smoothed series plus thresholded gain and loss."""
        if len(elevations) == 0:
            return ElevationStats()
        smoothed = self.smooth(elevations)
        gain, loss = self._gain_and_loss(smoothed)
        return ElevationStats(
            min_m=min(smoothed),
            max_m=max(smoothed),
            total_gain_m=gain,
            total_loss_m=loss,
        )

    def gain_for_range(self, start_km: float, end_km: float, profile: ElevationProfile) -> float:
        """Gain of the samples whose distance lies in [start_km, end_km].

        Smoothing and run detection restart on the subset, so a climb straddling
        a range boundary can be split or undercounted.
        """
        return self.stats_for_range(start_km, end_km, profile).total_gain_m

    def loss_for_range(self, start_km: float, end_km: float, profile: ElevationProfile) -> float:
        return self.stats_for_range(start_km, end_km, profile).total_loss_m

    def stats_for_range(
        self, start_km: float, end_km: float, profile: ElevationProfile
    ) -> ElevationStats:
        if start_km > end_km:
            raise ValidationError(
                "INVALID_RANGE", [f"range start {start_km:g} km is after end {end_km:g} km"]
            )
        df = profile.to_frame()
        subset = df[df["distanceKm"].between(start_km, end_km, inclusive="both")]
        return self.compute_stats(subset["elevationM"].tolist())

    @staticmethod
    def average_grade(gain_m: float, loss_m: float, distance_km: float) -> float:
        """Representative grade of a stretch (decimal, not percentage).

        The dominant direction wins when it is at least twice the other one,
        otherwise the net change is used.
        """
        if distance_km <= 0:
            return 0.0
        distance_m = distance_km * 1000
        if gain_m >= 2 * loss_m:
            return gain_m / distance_m
        if loss_m >= 2 * gain_m:
            return -loss_m / distance_m
        return (gain_m - loss_m) / distance_m

    def _kept(self, height: float) -> float:
        return height if height >= self.threshold_m else 0.0

    def _gain_and_loss(self, smoothed: Sequence[float]) -> tuple[float, float]:
        """Accumulate climbing and descending runs that reach the threshold.

        A run starts on the point before its first rising (falling) difference and
        closes on a direction flip or at the end of the series. Flat differences
        keep the current run open.
        """
        gain = 0.0
        loss = 0.0
        run_start = 0
        direction = 0  # 1 climbing, -1 descending, 0 not started

        for i in range(1, len(smoothed)):
            diff = smoothed[i] - smoothed[i - 1]
            if diff > 0 and direction != 1:
                if direction == -1:
                    loss += self._kept(smoothed[run_start] - smoothed[i - 1])
                run_start = i - 1
                direction = 1
            elif diff < 0 and direction != -1:
                if direction == 1:
                    gain += self._kept(smoothed[i - 1] - smoothed[run_start])
                run_start = i - 1
                direction = -1

        if direction == 1:
            gain += self._kept(smoothed[-1] - smoothed[run_start])
        elif direction == -1:
            loss += self._kept(smoothed[run_start] - smoothed[-1])
        return gain, loss


def smooth_and_gain(
    elevations_m: Sequence[float],
    distances_km: Optional[Sequence[float]] = None,
    threshold_m: float = DEFAULT_THRESHOLD_M,
) -> ElevationStats:
    """Overall elevation statistics of a route."""
    if distances_km is not None:
        # Only checks the series are consistent; distances do not change the stats.
        ElevationProfile(tuple(distances_km), tuple(elevations_m))
    stats = ElevationProcessor(threshold_m=threshold_m).compute_stats(elevations_m)
    logger.debug(
        "Elevation stats over %d samples: +%.1f m / -%.1f m",
        len(elevations_m),
        stats.total_gain_m,
        stats.total_loss_m,
    )
    return stats


def gain_for_range(
    elevations_m: Sequence[float],
    distances_km: Sequence[float],
    start_km: float,
    end_km: float,
    threshold_m: float = DEFAULT_THRESHOLD_M,
) -> float:
    profile = ElevationProfile(tuple(distances_km), tuple(elevations_m))
    return ElevationProcessor(threshold_m=threshold_m).gain_for_range(start_km, end_km, profile)
