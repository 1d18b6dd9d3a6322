"""
Calendar triggers for the three daily check-in windows.

Each enabled window fires Monday-Friday at its start time; the runner then
waits a random offset inside the window before checking anyone in.
Holidays are filtered by the runner, not by the trigger.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from autocheckin.core.workdays import get_tz
from autocheckin.schemas.config import AppConfig, ScheduleWindow
from autocheckin.services.runner import CheckinRunner

logger = logging.getLogger(__name__)


def window_trigger(window: ScheduleWindow, tz_name: str) -> CronTrigger:
    return CronTrigger(
        day_of_week="mon-fri",
        hour=window.start_hour,
        minute=window.start_minute,
        timezone=get_tz(tz_name),
    )


def describe_jobs(config: AppConfig) -> list[tuple[str, str, int]]:
    """``(name, cron expression, jitter minutes)`` for each enabled window."""
    return [
        (window.name, window.cron_expression, round(window.jitter_range_seconds[1] / 60))
        for window in config.schedules
        if window.enabled
    ]


def build_scheduler(
    runner: CheckinRunner, config: AppConfig, timezone: str | None = None
) -> AsyncIOScheduler:
    tz_name = timezone or config.timezone
    scheduler = AsyncIOScheduler(timezone=get_tz(tz_name))
    for window in config.schedules:
        if not window.enabled:
            logger.info("📅 %s: disabled", window.name)
            continue
        scheduler.add_job(
            runner.run_window,
            trigger=window_trigger(window, tz_name),
            args=[window],
            id=f"checkin_{window.name.lower()}",
            name=f"Check-in {window.name}",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=300,
        )
    return scheduler
