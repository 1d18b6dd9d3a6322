"""Pydantic schemas for check-in attempts, run summaries and the rolling log."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

LogType = Literal["info", "success", "error"]


# ── Attempt ─────────────────────────────────────────────────────────
class AttemptRequest(BaseModel):
    nip: str
    password: str
    status: str
    shift: str
    latitude: float
    longitude: float
    headless: bool = True
    slow_mo: int = 50


class Outcome(BaseModel):
    success: bool
    message: str
    kind: str = "unrecognized"
    checkin_time: str | None = None


class EmployeeResult(BaseModel):
    nip: str
    name: str
    success: bool
    message: str
    checkin_time: str | None = None


class RunSummary(BaseModel):
    schedule: str
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: bool = False
    message: str = ""
    results: list[EmployeeResult] = []

    def describe(self) -> str:
        return f"{self.success} success, {self.failed} failed"


# ── Rolling log ─────────────────────────────────────────────────────
class LogEntry(BaseModel):
    type: LogType
    message: str
    user: str | None = None
    checkin_time: str | None = None
    schedule: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LogListResponse(BaseModel):
    success: bool = True
    logs: list[LogEntry]


# ── Dashboard requests / responses ──────────────────────────────────
class CheckinRequest(BaseModel):
    nip: str
    password: str | None = None
    schedule_name: str | None = None


class CheckinResponse(BaseModel):
    success: bool
    message: str
    schedule: str
    checkin_time: str | None = None
    formatted_message: str | None = None


class TriggerResponse(BaseModel):
    success: bool
    message: str
    timestamp: datetime | None = None


class MessageResponse(BaseModel):
    success: bool
    message: str
