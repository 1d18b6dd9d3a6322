"""
Command-line entry point.

    autocheckin                  start the weekday calendar scheduler
    autocheckin --sync           load or fetch the roster and report its size
    autocheckin --manual         check everyone in now
    autocheckin --window Pagi    check everyone in now, labelled as a window
    autocheckin --serve          run the dashboard API

Immediate runs skip weekends and holidays unless ``--force`` is given.

Exit status: 0 when a run processed at least one employee or was skipped
for the calendar.  An empty roster (no enabled employees) counts as a
failed run and exits 1, as does a ``--sync`` that loads no users.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from autocheckin.container import build_runner
from autocheckin.core.config import settings
from autocheckin.services.runner import MANUAL, CheckinRunner
from autocheckin.services.scheduler import build_scheduler, describe_jobs

logger = logging.getLogger("autocheckin")


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="autocheckin", description=settings.PROJECT_NAME)
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--sync", action="store_true", help="sync users from the portal directory")
    mode.add_argument("--manual", "--checkin", action="store_true", help="run a check-in now")
    mode.add_argument("--window", metavar="NAME", help="run a check-in now for a named window (Pagi, Siang, Sore)")
    mode.add_argument("--serve", action="store_true", help="start the dashboard API")
    parser.add_argument("--force", action="store_true", help="run even on weekends and holidays")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    return parser.parse_args(argv)


def _build_runner() -> CheckinRunner:
    return build_runner(settings)


async def _close(runner: CheckinRunner) -> None:
    await runner.drain_notifications()
    await runner.fonnte.aclose()
    await runner.directory.aclose()


async def sync_roster() -> int:
    runner = _build_runner()
    try:
        logger.info("📥 Syncing users from API...")
        users = await runner.load_roster()
        if not users:
            logger.error("❌ Sync failed: no users")
            return 1
        logger.info("✅ Synced %d users", len(users))
        return 0
    finally:
        await _close(runner)


async def run_now(window: str | None, force: bool) -> int:
    runner = _build_runner()
    try:
        summary = await runner.run(window or MANUAL, enforce_calendar=not force)
        return 0 if summary.skipped or summary.total else 1
    finally:
        await _close(runner)


async def run_scheduler() -> None:
    runner = _build_runner()
    config = runner.store.load_config()
    logger.info("🚀 Starting %s", settings.PROJECT_NAME)
    logger.info("📍 Location: %s (%s, %s)", config.location_name, config.latitude, config.longitude)
    logger.info("🕐 Timezone: %s", config.timezone)
    for name, cron, jitter in describe_jobs(config):
        logger.info("📅 %s: %s (random +0-%d menit)", name, cron, jitter)

    scheduler = build_scheduler(runner, config, config.timezone)
    scheduler.start()
    logger.info("✅ Service started. Waiting for scheduled times...")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        await _close(runner)


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    if args.serve:
        import uvicorn

        uvicorn.run("autocheckin.main:app", host=args.host, port=args.port)
        return 0
    if args.sync:
        return asyncio.run(sync_roster())
    if args.manual or args.window:
        if args.manual:
            logger.info("⚡ Manual check-in triggered")
        return asyncio.run(run_now(args.window, args.force))

    try:
        asyncio.run(run_scheduler())
    except KeyboardInterrupt:
        logger.info("Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
