"""Tests for the weekday cron jobs built from the schedule windows."""

from datetime import datetime

import pytest

from autocheckin.core.workdays import get_tz
from autocheckin.schemas.config import AppConfig, ScheduleWindow, default_schedules
from autocheckin.services.scheduler import (build_scheduler, describe_jobs,
                                            window_trigger)


@pytest.mark.asyncio
async def test_one_job_per_enabled_window(runner):
    windows = default_schedules()
    windows[1].enabled = False
    scheduler = build_scheduler(runner, AppConfig(schedules=windows))

    jobs = {job.id: job for job in scheduler.get_jobs()}
    assert set(jobs) == {"checkin_pagi", "checkin_sore"}
    assert jobs["checkin_pagi"].args[0].name == "Pagi"
    assert "day_of_week='mon-fri'" in str(jobs["checkin_sore"].trigger)
    assert "hour='17'" in str(jobs["checkin_sore"].trigger)


def test_trigger_skips_the_weekend():
    tz = get_tz("Asia/Makassar")
    window = ScheduleWindow(name="Siang", start_hour=12, start_minute=5, end_hour=13)
    saturday = tz.localize(datetime(2026, 10, 17, 9, 0))

    fire = window_trigger(window, "Asia/Makassar").get_next_fire_time(None, saturday)

    assert fire.date().isoformat() == "2026-10-19"
    assert (fire.hour, fire.minute) == (12, 5)


def test_cron_expression_and_jitter():
    window = ScheduleWindow(name="Siang", start_hour=12, start_minute=5, end_hour=13)
    assert window.cron_expression == "5 12 * * 1-5"
    assert window.jitter_range_seconds == (0.0, 55 * 60.0)


def test_describe_jobs_lists_enabled_windows():
    windows = default_schedules()
    windows[2].enabled = False
    assert describe_jobs(AppConfig(schedules=windows)) == [
        ("Pagi", "0 7 * * 1-5", 60),
        ("Siang", "5 12 * * 1-5", 55),
    ]


@pytest.mark.asyncio
async def test_timezone_argument_overrides_config(runner):
    scheduler = build_scheduler(runner, AppConfig(), "Asia/Jakarta")
    job = scheduler.get_jobs()[0]
    assert str(job.trigger.timezone) == "Asia/Jakarta"
