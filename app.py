import streamlit as st
from streamlit.logger import get_logger

from persistence.csv_storage import CsvStorage
from persistence.plan_repository import PlanRepository
from utils.config import load_config
from utils.formatting import set_locale, fmt_km

logger = get_logger(__name__)


def _saved_plans(cfg) -> None:
    plans = PlanRepository(CsvStorage(base_dir=cfg.plans_dir)).list()
    if plans.empty:
        st.info("Aucun plan enregistré.")
        return
    st.dataframe(
        plans.assign(totalDistanceKm=plans["totalDistanceKm"].astype(float).map(fmt_km))[
            ["label", "totalDistanceKm", "startDateTime"]
        ],
        hide_index=True,
    )


def main():
    st.set_page_config(page_title="Race Pacer", layout="wide")
    cfg = load_config()
    set_locale(cfg.locale)
    st.session_state.setdefault("app_config", cfg)
    logger.debug("Plans stored in %s", cfg.plans_dir)
    st.title("Race Pacer")
    st.caption("Use the sidebar to open the race plan page.")

    with st.expander("Settings", expanded=False):
        st.write(
            {
                "DATA_DIR": str(cfg.data_dir),
                "ELEVATION_THRESHOLD_M": cfg.elevation_threshold_m,
                "ELEVATION_SMOOTHING_WINDOW": cfg.smoothing_window,
                "DEFAULT_STOP_SECONDS": cfg.default_stop_seconds,
                "APP_LOCALE": cfg.locale,
            }
        )

    _saved_plans(cfg)


if __name__ == "__main__":
    main()
