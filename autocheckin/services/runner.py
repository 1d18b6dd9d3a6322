"""
Check-in orchestration: roster loading and the per-employee loop.

Employees are processed strictly one at a time with random pauses before
and between attempts, so only one browser is open and submissions do not
arrive in a machine-like burst.  Each outcome becomes one entry in the
rolling log; WhatsApp notifications are sent in the background and their
failures never affect the loop.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import timedelta
from typing import Protocol

from autocheckin.core.config import Settings
from autocheckin.core.workdays import (format_clock, is_holiday, is_weekend,
                                       local_now, resolve_window_name)
from autocheckin.db.store import JsonStore
from autocheckin.schemas.checkin import (AttemptRequest, EmployeeResult,
                                         LogEntry, Outcome, RunSummary)
from autocheckin.schemas.config import AppConfig, ScheduleWindow
from autocheckin.schemas.employee import Employee
from autocheckin.services.directory import DirectoryClient, to_employees
from autocheckin.services.fonnte import FonnteClient

logger = logging.getLogger(__name__)

MANUAL = "manual"


class Executor(Protocol):
    async def attempt(self, request: AttemptRequest) -> Outcome: ...


def format_log_message(schedule: str, outcome: Outcome) -> str:
    if outcome.success:
        if outcome.checkin_time:
            return f"Telah melakukan check-in {schedule} pukul {outcome.checkin_time}"
        return f"Check-in {schedule} berhasil!"
    return f"Gagal check-in {schedule}: {outcome.message}"


class CheckinRunner:
    def __init__(
        self,
        store: JsonStore,
        executor: Executor,
        fonnte: FonnteClient,
        directory: DirectoryClient,
        settings: Settings,
        sleep=asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.executor = executor
        self.fonnte = fonnte
        self.directory = directory
        self.settings = settings
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._pending: set[asyncio.Task] = set()

    # ── Roster ──────────────────────────────────────────────────────
    async def load_roster(self) -> list[Employee]:
        """Persisted roster, or a fresh one built from the portal directory."""
        if self.store.has_roster():
            return self.store.load_employees()

        config = self.store.load_config()
        logger.info("Fetching users from API...")
        result = await self.directory.fetch(config.kode_kantor)
        if not result.success:
            logger.error("Failed to fetch users: %s", result.error)
            return []

        employees = to_employees(result.pegawai)
        self.store.save_employees(employees)
        logger.info("Saved %d users to %s", len(employees), self.store.users_path)
        return employees

    # ── Single attempt ──────────────────────────────────────────────
    def resolve_schedule(self, config: AppConfig, schedule_name: str | None) -> str:
        if not schedule_name or schedule_name.lower() == MANUAL:
            return resolve_window_name(local_now(config.timezone), config.schedules)
        return schedule_name

    def _attempt_request(self, config: AppConfig, nip: str, password: str) -> AttemptRequest:
        return AttemptRequest(
            nip=nip,
            password=password,
            status=config.status,
            shift=config.shift,
            latitude=config.latitude,
            longitude=config.longitude,
            headless=self.settings.HEADLESS,
            slow_mo=self.settings.SLOW_MO,
        )

    def _notify_later(self, config: AppConfig, employee: Employee, schedule: str, outcome: Outcome, detail: str) -> None:
        if not (config.fonnte_token and employee.phone):
            return
        task = asyncio.create_task(
            self.fonnte.notify(
                config.fonnte_token,
                employee.phone,
                name=employee.display_name,
                schedule=schedule,
                success=outcome.success,
                detail=detail,
                location_name=config.location_name,
                mode=config.status_label,
                when=local_now(config.timezone),
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain_notifications(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _process(self, config: AppConfig, employee: Employee, schedule: str) -> EmployeeResult:
        user = employee.display_name
        try:
            outcome = await self.executor.attempt(
                self._attempt_request(config, employee.nip, employee.password)
            )
        except Exception as exc:
            logger.error("❌ Error for %s: %s", employee.nip, exc)
            self.store.add_log(
                LogEntry(type="error", user=user, message=f"Gagal check-in {schedule}: {exc}", schedule=schedule)
            )
            return EmployeeResult(nip=employee.nip, name=employee.name, success=False, message=str(exc))

        message = format_log_message(schedule, outcome)
        if outcome.success:
            logger.info("✅ %s: %s", user, outcome.message)
        else:
            logger.error("❌ %s: %s", user, outcome.message)
        self.store.add_log(
            LogEntry(
                type="success" if outcome.success else "error",
                user=user,
                message=message,
                checkin_time=outcome.checkin_time,
                schedule=schedule,
            )
        )
        self._notify_later(config, employee, schedule, outcome, message)
        return EmployeeResult(
            nip=employee.nip,
            name=employee.name,
            success=outcome.success,
            message=outcome.message,
            checkin_time=outcome.checkin_time,
        )

    # ── Whole roster ────────────────────────────────────────────────
    def _skip_reason(self, config: AppConfig) -> str | None:
        today = local_now(config.timezone).date()
        if is_weekend(today):
            return "Weekend"
        if is_holiday(today):
            return "Holiday"
        return None

    async def run(self, schedule_name: str | None = None, enforce_calendar: bool = False) -> RunSummary:
        """Check in every enabled employee, one after another.

        ``enforce_calendar`` skips weekends and holidays; the dashboard
        trigger leaves it off.
        """
        config = self.store.load_config()
        schedule = self.resolve_schedule(config, schedule_name)
        logger.info(
            "=== Starting %s check-in at %s WITA ===",
            schedule,
            local_now(config.timezone).strftime("%d/%m/%Y %H:%M:%S"),
        )

        if enforce_calendar:
            reason = self._skip_reason(config)
            if reason:
                logger.info("⏭️ Skipping: %s", reason)
                self.store.add_log(
                    LogEntry(type="info", message=f"Check-in {schedule} dilewati: {reason}", schedule=schedule)
                )
                return RunSummary(schedule=schedule, skipped=True, message=f"Skipped: {reason}")

        roster = await self.load_roster()
        employees = [e for e in roster if e.is_runnable]
        if not employees:
            logger.error("❌ No enabled users found")
            return RunSummary(schedule=schedule, message="No enabled users found")

        logger.info("👥 Processing %d enabled users...", len(employees))
        results: list[EmployeeResult] = []
        for i, employee in enumerate(employees):
            pre_delay = self._rng.uniform(0, self.settings.USER_DELAY_MAX)
            if pre_delay > 1:
                logger.info("⏳ Waiting %ds before %s...", round(pre_delay), employee.display_name)
                await self._sleep(pre_delay)

            logger.info("🚀 [%d/%d] Processing: %s", i + 1, len(employees), employee.display_name)
            results.append(await self._process(config, employee, schedule))

            if i < len(employees) - 1:
                await self._sleep(
                    self._rng.uniform(
                        self.settings.INTER_USER_DELAY_MIN, self.settings.INTER_USER_DELAY_MAX
                    )
                )

        await self.drain_notifications()
        success = sum(1 for r in results if r.success)
        summary = RunSummary(
            schedule=schedule,
            total=len(results),
            success=success,
            failed=len(results) - success,
            results=results,
        )
        summary.message = summary.describe()
        logger.info("=== Check-in complete: %s ===", summary.message)
        return summary

    async def run_single(
        self, nip: str, password: str | None = None, schedule_name: str | None = None
    ) -> tuple[Outcome, str, str]:
        """One immediate attempt for a single NIP (dashboard button)."""
        config = self.store.load_config()
        schedule = self.resolve_schedule(config, schedule_name)
        if password is None:
            stored = self.store.get_employee(nip)
            password = stored.password if stored else nip

        try:
            outcome = await self.executor.attempt(self._attempt_request(config, nip, password))
        except Exception as exc:
            logger.error("❌ Error for %s: %s", nip, exc)
            message = f"Gagal check-in {schedule}: {exc}"
            self.store.add_log(LogEntry(type="error", user=nip, message=message, schedule=schedule))
            return Outcome(success=False, kind="error", message=str(exc)), schedule, message

        message = format_log_message(schedule, outcome)
        self.store.add_log(
            LogEntry(
                type="success" if outcome.success else "error",
                user=nip,
                message=message,
                checkin_time=outcome.checkin_time,
                schedule=schedule,
            )
        )
        return outcome, schedule, message

    async def run_window(self, window: ScheduleWindow) -> RunSummary:
        """Cron entry point: random offset inside the window, then a guarded run."""
        low, high = window.jitter_range_seconds
        delay = self._rng.uniform(low, high)
        config = self.store.load_config()
        planned = local_now(config.timezone) + timedelta(seconds=delay)
        logger.info("⏰ Cron triggered: %s", window.name)
        logger.info("🎲 Random delay: %d menit", round(delay / 60))
        logger.info("📌 Scheduled check-in at: %s WITA", format_clock(planned))
        if delay > 0:
            await self._sleep(delay)
        return await self.run(window.name, enforce_calendar=True)
