"""
Locale display helpers for race plan values.

Note: the engine and CSV storage keep raw floats and datetimes. These helpers
are for UI rendering only.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from babel import numbers

LOCALE = "fr_FR"
MISSING = "-"


def set_locale(locale_str: str = "fr_FR") -> None:
    global LOCALE
    try:
        numbers.format_decimal(1.0, locale=locale_str)
        LOCALE = locale_str
    except Exception:
        LOCALE = "fr_FR"


def _nbsp() -> str:
    return "\u00A0"


def fmt_decimal(value: Optional[float], digits: Optional[int] = None) -> str:
    if value is None:
        return ""
    fmt = None
    if digits is not None:
        fmt = "#,##0" if digits == 0 else "#,##0." + ("0" * digits)
    return numbers.format_decimal(value, format=fmt, locale=LOCALE)


def fmt_km(km: Optional[float]) -> str:
    if km is None:
        return ""
    return f"{fmt_decimal(km, 1)}{_nbsp()}km"


def fmt_m(meters: Optional[float]) -> str:
    if meters is None:
        return ""
    return f"{fmt_decimal(round(meters), 0)}{_nbsp()}m"


def fmt_speed_kmh(speed_kmh: Optional[float]) -> str:
    if speed_kmh is None:
        return MISSING
    return f"{fmt_decimal(speed_kmh, 1)}{_nbsp()}km/h"


def fmt_duration(seconds: Optional[float]) -> str:
    """``"10h 05m"``, or ``"45m"`` under an hour."""
    if seconds is None:
        return MISSING
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes = rest // 60
    if hours > 0:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def fmt_clock(value: Optional[dt.datetime]) -> str:
    if value is None:
        return MISSING
    return value.strftime("%H:%M")


def fmt_datetime(value: Optional[dt.datetime]) -> str:
    if value is None:
        return MISSING
    return value.strftime("%Y-%m-%d %H:%M")
