"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

CSV-backed store for race plans and their checkpoints.

Only user input is persisted: pinned arrival/departure times are kept as
wall-clock strings, calculated times are recomputed after loading.
"""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass
from typing import Optional, Union

import pandas as pd
from streamlit.logger import get_logger

from persistence.csv_storage import CsvStorage
from services.pacer.models import Checkpoint, Pinned, RacePlanInput

logger = get_logger(__name__)

PLANS_FILE = "plans.csv"
CHECKPOINTS_FILE = "plan_checkpoints.csv"

PLAN_COLUMNS = [
    "planId",
    "label",
    "totalDistanceKm",
    "startDateTime",
    "totalDurationSec",
    "createdAt",
    "updatedAt",
]
CHECKPOINT_COLUMNS = [
    "planId",
    "orderIndex",
    "checkpointId",
    "name",
    "distanceFromStartKm",
    "stopDurationSec",
    "pinnedArrival",
    "pinnedDeparture",
]


def _clock_to_storage(value: Union[dt.datetime, dt.time, str, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, dt.datetime):
        value = value.time()
    if isinstance(value, dt.time):
        return value.strftime("%H:%M:%S" if value.second else "%H:%M")
    return str(value).strip()


def _now() -> str:
    return dt.datetime.now().isoformat(timespec="seconds")


@dataclass
class PlanRepository:
    storage: CsvStorage

    def save(self, plan_input: RacePlanInput, label: str, plan_id: Optional[str] = None) -> str:
        """Insert or update a plan and replace its checkpoints."""
        plan_id = plan_id or str(uuid.uuid4())
        plans = self.storage.read_csv(PLANS_FILE, PLAN_COLUMNS)
        existing = plans[plans["planId"] == plan_id]
        created_at = existing.iloc[0]["createdAt"] if not existing.empty else _now()

        row = {
            "planId": plan_id,
            "label": label,
            "totalDistanceKm": repr(float(plan_input.total_distance_km)),
            "startDateTime": plan_input.start_datetime.isoformat(),
            "totalDurationSec": repr(float(plan_input.total_duration_seconds)),
            "createdAt": created_at,
            "updatedAt": _now(),
        }
        self.storage.replace_rows(PLANS_FILE, "planId", plan_id, [row], PLAN_COLUMNS)

        checkpoint_rows = [
            {
                "planId": plan_id,
                "orderIndex": str(index),
                "checkpointId": cp.id,
                "name": cp.name,
                "distanceFromStartKm": repr(float(cp.distance_from_start_km)),
                "stopDurationSec": repr(float(cp.stop_duration_seconds)),
                "pinnedArrival": _clock_to_storage(cp.pinned_arrival),
                "pinnedDeparture": _clock_to_storage(cp.pinned_departure),
            }
            for index, cp in enumerate(plan_input.checkpoints)
        ]
        self.storage.replace_rows(
            CHECKPOINTS_FILE, "planId", plan_id, checkpoint_rows, CHECKPOINT_COLUMNS
        )
        logger.info("Saved plan %s: %s (%d checkpoints)", plan_id, label, len(checkpoint_rows))
        return plan_id

    def load(self, plan_id: str) -> Optional[RacePlanInput]:
        plans = self.storage.read_csv(PLANS_FILE, PLAN_COLUMNS)
        hit = plans[plans["planId"] == str(plan_id)]
        if hit.empty:
            return None
        plan_row = hit.iloc[0]

        rows = self.storage.read_csv(CHECKPOINTS_FILE, CHECKPOINT_COLUMNS)
        rows = rows[rows["planId"] == str(plan_id)].copy()
        rows["orderIndex"] = pd.to_numeric(rows["orderIndex"], errors="coerce")
        rows = rows.sort_values("orderIndex")

        checkpoints = [
            Checkpoint(
                id=str(row["checkpointId"]),
                name=str(row["name"]),
                distance_from_start_km=float(row["distanceFromStartKm"]),
                stop_duration_seconds=float(row["stopDurationSec"] or 0),
                arrival=Pinned(row["pinnedArrival"]) if row["pinnedArrival"] else None,
                departure=Pinned(row["pinnedDeparture"]) if row["pinnedDeparture"] else None,
            )
            for _, row in rows.iterrows()
        ]
        return RacePlanInput(
            total_distance_km=float(plan_row["totalDistanceKm"]),
            start_datetime=pd.Timestamp(plan_row["startDateTime"]).to_pydatetime(),
            total_duration_seconds=float(plan_row["totalDurationSec"]),
            checkpoints=tuple(checkpoints),
        )

    def list(self) -> pd.DataFrame:
        plans = self.storage.read_csv(PLANS_FILE, PLAN_COLUMNS)
        return plans[["planId", "label", "totalDistanceKm", "startDateTime", "createdAt"]].copy()

    def delete(self, plan_id: str) -> bool:
        removed = self.storage.delete_rows(PLANS_FILE, "planId", plan_id)
        self.storage.delete_rows(CHECKPOINTS_FILE, "planId", plan_id)
        if removed:
            logger.info("Deleted plan %s", plan_id)
        return bool(removed)
