"""
Working-day and local-time helpers (WITA, Asia/Makassar by default).

Check-ins only run on weekdays that are not Indonesian national holidays.
The holiday list is maintained by hand and covers 2025-2026; extra dates
can be added through the EXTRA_HOLIDAYS setting.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import TYPE_CHECKING

import pytz

from autocheckin.core.config import settings

if TYPE_CHECKING:
    from autocheckin.schemas.config import ScheduleWindow

HOLIDAYS: frozenset[date] = frozenset(
    date.fromisoformat(d)
    for d in (
        # 2025
        "2025-01-01",  # Tahun Baru
        "2025-01-29",  # Isra Mi'raj
        "2025-01-30",  # Tahun Baru Imlek
        "2025-03-29",  # Hari Raya Nyepi
        "2025-03-30",  # Idul Fitri
        "2025-03-31",  # Idul Fitri
        "2025-04-01",  # Cuti Bersama
        "2025-04-18",  # Wafat Isa Almasih
        "2025-05-01",  # Hari Buruh
        "2025-05-12",  # Waisak
        "2025-05-29",  # Kenaikan Isa Almasih
        "2025-06-01",  # Hari Lahir Pancasila
        "2025-06-06",  # Idul Adha
        "2025-06-27",  # Tahun Baru Islam
        "2025-08-17",  # Hari Kemerdekaan
        "2025-09-05",  # Maulid Nabi
        "2025-12-25",  # Natal
        # 2026
        "2026-01-01",
        "2026-01-18",
        "2026-02-17",
        "2026-03-20",
        "2026-03-21",
        "2026-04-03",
        "2026-05-01",
        "2026-05-14",
        "2026-05-27",
        "2026-06-01",
        "2026-06-17",
        "2026-08-17",
        "2026-08-26",
        "2026-12-25",
    )
)

# Fallback labels when "now" sits outside every configured window
_MIDDAY_HOUR = 12
_EVENING_HOUR = 16


def get_tz(tz_name: str | None = None):
    return pytz.timezone(tz_name or settings.TIMEZONE)


def local_now(tz_name: str | None = None) -> datetime:
    """Current wall-clock time in the service timezone (tz-aware)."""
    return datetime.now(get_tz(tz_name))


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def is_holiday(day: date) -> bool:
    return day in HOLIDAYS or day in settings.extra_holidays


def is_working_day(now: datetime | date | None = None) -> bool:
    """False on Saturday, Sunday or a listed holiday."""
    if now is None:
        now = local_now()
    day = now.date() if isinstance(now, datetime) else now
    return not (is_weekend(day) or is_holiday(day))


def resolve_window_name(now: datetime, windows: Iterable[ScheduleWindow]) -> str:
    """Name of the schedule window containing *now*.

    Outside all windows (manual runs) the nearest part of the day is used:
    Pagi before noon, Siang before 16:00, Sore afterwards.
    """
    for window in windows:
        if window.contains(now):
            return window.name
    if now.hour < _MIDDAY_HOUR:
        return "Pagi"
    if now.hour < _EVENING_HOUR:
        return "Siang"
    return "Sore"


def session_column(hour: int) -> int:
    """Column of the portal's attendance table for the given hour.

    The table reads TANGGAL | PAGI | SIANG | SORE.
    """
    if _MIDDAY_HOUR <= hour < _EVENING_HOUR:
        return 2
    if hour >= _EVENING_HOUR:
        return 3
    return 1


def format_clock(now: datetime) -> str:
    return now.strftime("%H:%M:%S")
