"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Race plan page: start, target duration, checkpoints with pinned times, and the
resulting timetable. The plan is recomputed on every rerun.
"""

from __future__ import annotations

import datetime as dt

import pandas as pd
import streamlit as st
from streamlit.logger import get_logger

from persistence.csv_storage import CsvStorage
from persistence.plan_repository import PlanRepository
from services.pacer.errors import DurationExceededError, ValidationError
from services.pacer.models import ElevationProfile, RacePlanInput
from services.pacer_service import PlanOrchestrator
from services.plan_editor_presenter import (
    CHECKPOINT_EDITOR_COLUMNS,
    checkpoints_to_frame,
    frame_to_checkpoints,
)
from utils.config import load_config
from utils.route_profile import total_distance_km, track_to_profile
from utils.formatting import (
    fmt_clock,
    fmt_datetime,
    fmt_duration,
    fmt_km,
    fmt_m,
    fmt_speed_kmh,
    set_locale,
)

logger = get_logger(__name__)

st.set_page_config(page_title="Race Pacer - Plan", layout="wide")
st.title("Plan de course")

cfg = load_config()
set_locale(cfg.locale)
repository = PlanRepository(CsvStorage(base_dir=cfg.plans_dir))
orchestrator = PlanOrchestrator(config=cfg, start_label="Départ", finish_label="Arrivée")

if "race_plan_id" not in st.session_state:
    st.session_state["race_plan_id"] = None
if "race_plan_checkpoints" not in st.session_state:
    st.session_state["race_plan_checkpoints"] = pd.DataFrame(columns=CHECKPOINT_EDITOR_COLUMNS)
if "race_plan_input" not in st.session_state:
    st.session_state["race_plan_input"] = None


# Load an existing plan
plans_df = repository.list()
if not plans_df.empty:
    options = ["--- Nouveau plan ---"] + [
        f"{row['label']} ({row['planId']})" for _, row in plans_df.iterrows()
    ]
    selected_idx = st.selectbox(
        "Charger un plan existant", range(len(options)), format_func=lambda x: options[x]
    )
    if selected_idx > 0:
        plan_id = options[selected_idx].split("(")[-1].rstrip(")")
        if plan_id != st.session_state.get("race_plan_id"):
            loaded = repository.load(plan_id)
            if loaded is not None:
                st.session_state["race_plan_id"] = plan_id
                st.session_state["race_plan_input"] = loaded
                st.session_state["race_plan_checkpoints"] = checkpoints_to_frame(loaded)
                st.rerun()

loaded_input: RacePlanInput | None = st.session_state.get("race_plan_input")
default_start = loaded_input.start_datetime if loaded_input else dt.datetime(2026, 6, 12, 6, 0)
default_duration = int(loaded_input.total_duration_seconds) if loaded_input else 10 * 3600

label = st.text_input("Nom du plan", value="")
col1, col2, col3 = st.columns(3)
with col1:
    distance_km = st.number_input(
        "Distance (km)",
        min_value=0.0,
        value=float(loaded_input.total_distance_km) if loaded_input else 315.0,
        step=1.0,
    )
with col2:
    start_date = st.date_input("Date de départ", value=default_start.date())
    start_time = st.time_input("Heure de départ", value=default_start.time())
with col3:
    duration_h = st.number_input("Durée (h)", min_value=0, value=default_duration // 3600, step=1)
    duration_min = st.number_input(
        "Durée (min)", min_value=0, max_value=59, value=(default_duration % 3600) // 60, step=5
    )

st.subheader("Ravitaillements")
st.caption(
    "Triés par distance croissante. Heures figées au format HH:MM ; "
    f"arrêt par défaut {cfg.default_stop_seconds // 60} min."
)
edited = st.data_editor(
    st.session_state["race_plan_checkpoints"],
    num_rows="dynamic",
    hide_index=True,
    column_config={
        "checkpointId": None,
        "name": st.column_config.TextColumn("Nom"),
        "distanceKm": st.column_config.NumberColumn("Distance (km)", min_value=0.0),
        "stopMin": st.column_config.NumberColumn(
            "Arrêt (min)", min_value=0.0, default=cfg.default_stop_seconds / 60.0
        ),
        "pinnedArrival": st.column_config.TextColumn("Arrivée figée"),
        "pinnedDeparture": st.column_config.TextColumn("Départ figé"),
    },
    key="race_plan_checkpoint_editor",
)

profile_file = st.file_uploader(
    "Profil altimétrique (CSV distanceKm, elevationM ou trace lat, lon, elevationM)", type=["csv"]
)
profile = None
if profile_file is not None:
    try:
        profile_df = pd.read_csv(profile_file)
        if {"lat", "lon"}.issubset(profile_df.columns):
            profile = track_to_profile(profile_df)
            st.caption(f"Trace de {fmt_km(total_distance_km(profile_df))}")
        else:
            profile = ElevationProfile(
                tuple(profile_df["distanceKm"].tolist()), tuple(profile_df["elevationM"].tolist())
            )
        stats = orchestrator.processor.compute_stats(profile.elevations_m)
        st.write(
            f"D+ {fmt_m(stats.total_gain_m)} | D- {fmt_m(stats.total_loss_m)} | "
            f"min {fmt_m(stats.min_m)} | max {fmt_m(stats.max_m)}"
        )
    except (KeyError, ValueError) as e:
        logger.warning("Unusable elevation profile: %s", e, exc_info=True)
        st.error("Profil altimétrique invalide.")
        profile = None

plan_input = RacePlanInput(
    total_distance_km=float(distance_km),
    start_datetime=dt.datetime.combine(start_date, start_time),
    total_duration_seconds=float(duration_h * 3600 + duration_min * 60),
    checkpoints=frame_to_checkpoints(edited),
)

try:
    result = orchestrator.recalculate(plan_input, profile)
except ValidationError as e:
    st.error(f"Entrée invalide : {'; '.join(e.details)}")
    st.stop()
except DurationExceededError:
    st.error("Les arrêts dépassent la durée totale : augmentez la durée ou réduisez les arrêts.")
    st.stop()

for warning in result.warnings:
    st.warning(f"Heure figée illisible pour {warning.checkpoint_id} ({warning.field}), valeur calculée utilisée.")

m1, m2, m3 = st.columns(3)
m1.metric("Arrivée", fmt_datetime(result.finish_datetime))
m2.metric("Vitesse requise", fmt_speed_kmh(result.overall_required_speed_kmh))
m3.metric("Temps d'arrêt", fmt_duration(plan_input.total_stop_seconds))

timetable = pd.DataFrame(
    [
        {
            "Tronçon": f"{seg.from_label} → {seg.to_label}",
            "Distance": fmt_km(seg.distance_km),
            "Arrivée": fmt_clock(seg.arrival_datetime) + (" 📌" if seg.arrival.is_pinned else ""),
            "Départ": fmt_clock(seg.departure_datetime) + (" 📌" if seg.departure.is_pinned else ""),
            "Vitesse": fmt_speed_kmh(seg.required_speed_kmh),
            "D+": fmt_m(seg.elev_gain_m),
            "D-": fmt_m(seg.elev_loss_m),
        }
        for seg in result.segments
    ]
)
st.dataframe(timetable, hide_index=True, use_container_width=True)

if st.button("Enregistrer le plan", disabled=not label.strip()):
    plan_id = repository.save(plan_input, label.strip(), st.session_state.get("race_plan_id"))
    st.session_state["race_plan_id"] = plan_id
    st.success("Plan enregistré.")
