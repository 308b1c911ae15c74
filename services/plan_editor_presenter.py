"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Pure helpers between the checkpoint editor table and plan checkpoints.
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Union

import pandas as pd

from services.pacer.models import Checkpoint, Pinned, RacePlanInput

CHECKPOINT_EDITOR_COLUMNS = [
    "checkpointId",
    "name",
    "distanceKm",
    "stopMin",
    "pinnedArrival",
    "pinnedDeparture",
]
DEFAULT_CHECKPOINT_NAME = "Ravitaillement"


def _pin_text(value: Union[dt.datetime, dt.time, str, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, dt.datetime):
        value = value.time()
    if isinstance(value, dt.time):
        return value.strftime("%H:%M:%S" if value.second else "%H:%M")
    return str(value)


def _cell_text(row: pd.Series, column: str) -> str:
    # Empty editor cells come back as None or NaN
    value = row.get(column)
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def _cell_number(row: pd.Series, column: str) -> float:
    value = row.get(column)
    if value is None or pd.isna(value):
        return 0.0
    return float(value)


def checkpoints_to_frame(plan_input: RacePlanInput) -> pd.DataFrame:
    rows = [
        {
            "checkpointId": cp.id,
            "name": cp.name,
            "distanceKm": cp.distance_from_start_km,
            "stopMin": cp.stop_duration_seconds / 60.0,
            "pinnedArrival": _pin_text(cp.pinned_arrival),
            "pinnedDeparture": _pin_text(cp.pinned_departure),
        }
        for cp in plan_input.checkpoints
    ]
    return pd.DataFrame(rows, columns=CHECKPOINT_EDITOR_COLUMNS)


def frame_to_checkpoints(df: pd.DataFrame) -> tuple[Checkpoint, ...]:
    """Checkpoints from editor rows; rows without a distance are skipped."""
    checkpoints = []
    for _, row in df.iterrows():
        if pd.isna(row.get("distanceKm")):
            continue
        arrival = _cell_text(row, "pinnedArrival")
        departure = _cell_text(row, "pinnedDeparture")
        checkpoints.append(
            Checkpoint(
                id=_cell_text(row, "checkpointId") or str(uuid.uuid4()),
                name=_cell_text(row, "name") or DEFAULT_CHECKPOINT_NAME,
                distance_from_start_km=float(row["distanceKm"]),
                stop_duration_seconds=_cell_number(row, "stopMin") * 60.0,
                arrival=Pinned(arrival) if arrival else None,
                departure=Pinned(departure) if departure else None,
            )
        )
    return tuple(checkpoints)
