"""
Configuration loading utilities.

Loads environment variables from `.env`, validates numeric settings, and
ensures the plan store directory exists.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import load_dotenv, find_dotenv
from streamlit.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", int, float)


@dataclass(frozen=True)
class Config:
    data_dir: Path
    plans_dir: Path
    elevation_threshold_m: float = 3.0
    smoothing_window: int = 5
    default_stop_seconds: int = 600
    locale: str = "fr_FR"


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _env_number(name: str, default: T, cast: Callable[[str], T], minimum: T) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except (ValueError, TypeError):
        logger.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("%s=%r below %s, using default %s", name, raw, minimum, default)
        return default
    return value


def load_config() -> Config:
    """Load configuration from environment and provision directories."""
    load_dotenv(find_dotenv(usecwd=True), override=True)

    data_dir_str = os.getenv("DATA_DIR", "./data")
    data_dir = Path(data_dir_str).expanduser().resolve()
    plans_dir = data_dir / "plans"

    elevation_threshold_m = _env_number("ELEVATION_THRESHOLD_M", 3.0, float, 0.0)
    smoothing_window = _env_number("ELEVATION_SMOOTHING_WINDOW", 5, int, 1)
    default_stop_seconds = _env_number("DEFAULT_STOP_SECONDS", 600, int, 0)
    locale = os.getenv("APP_LOCALE") or "fr_FR"
    logger.debug(
        "Elevation threshold %s m, smoothing window %s", elevation_threshold_m, smoothing_window
    )

    _ensure_dir(data_dir)
    _ensure_dir(plans_dir)

    return Config(
        data_dir=data_dir,
        plans_dir=plans_dir,
        elevation_threshold_m=elevation_threshold_m,
        smoothing_window=smoothing_window,
        default_stop_seconds=default_stop_seconds,
        locale=locale,
    )
