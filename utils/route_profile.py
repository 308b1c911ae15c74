"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Route track to elevation profile adapter.

Works on an already decoded track (lat, lon, elevationM per point); file
decoding is done elsewhere.
"""

from __future__ import annotations

import pandas as pd
from haversine import haversine
from streamlit.logger import get_logger

from services.pacer.models import ElevationProfile

logger = get_logger(__name__)


def _has_coordinates(track_df: pd.DataFrame) -> bool:
    if track_df.empty or "lat" not in track_df.columns or "lon" not in track_df.columns:
        return False
    return not (track_df["lat"].isna().all() or track_df["lon"].isna().all())


def with_cumulated_distance(track_df: pd.DataFrame) -> pd.DataFrame:
    """Add ``distance`` (km from the previous point) and ``cumulated_distance`` (km from start)."""
    df = track_df.dropna(subset=["lat", "lon"]).reset_index(drop=True)
    df["distance"] = [
        haversine((lat1, lon1), (lat2, lon2)) if pd.notna(lat1) else 0.0
        for lat1, lon1, lat2, lon2 in zip(
            df["lat"].shift(), df["lon"].shift(), df["lat"], df["lon"]
        )
    ]
    df["cumulated_distance"] = df["distance"].cumsum()
    return df


def total_distance_km(track_df: pd.DataFrame) -> float:
    if not _has_coordinates(track_df):
        return 0.0
    return float(with_cumulated_distance(track_df)["cumulated_distance"].iloc[-1])


def track_to_profile(track_df: pd.DataFrame) -> ElevationProfile:
    """Distance-referenced elevation profile of a track.

    Missing elevations are interpolated from their neighbours. A track without
    coordinates or elevations gives an empty profile.
    """
    if not _has_coordinates(track_df) or "elevationM" not in track_df.columns:
        logger.warning("Track has no usable coordinates or elevation")
        return ElevationProfile((), ())

    df = with_cumulated_distance(track_df)
    elevations = pd.to_numeric(df["elevationM"], errors="coerce")
    if elevations.isna().all():
        logger.warning("Track has no elevation values")
        return ElevationProfile((), ())
    elevations = elevations.interpolate(method="linear", limit_direction="both")
    return ElevationProfile(
        tuple(df["cumulated_distance"].tolist()), tuple(elevations.tolist())
    )


def closest_distance_km(track_df: pd.DataFrame, lat: float, lon: float) -> float:
    """Distance from start of the track point closest to (lat, lon)."""
    if not _has_coordinates(track_df):
        return 0.0
    df = with_cumulated_distance(track_df)
    offsets = [haversine((lat, lon), (p_lat, p_lon)) for p_lat, p_lon in zip(df["lat"], df["lon"])]
    closest = min(range(len(offsets)), key=offsets.__getitem__)
    return float(df.loc[closest, "cumulated_distance"])
