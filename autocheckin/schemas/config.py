"""Pydantic schemas for the configuration record and schedule windows."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from autocheckin.core.config import settings

# Attendance mode values understood by the portal's status_wfh select
STATUS_WFH = "1"
STATUS_WFO = "2"
STATUS_DL = "3"
STATUS_LABELS = {STATUS_WFH: "WFH", STATUS_WFO: "WFO", STATUS_DL: "DL"}


# ── Schedule windows ────────────────────────────────────────────────
class ScheduleWindow(BaseModel):
    name: str
    start_hour: int = Field(ge=0, le=23)
    start_minute: int = Field(default=0, ge=0, le=59)
    end_hour: int = Field(ge=0, le=23)
    end_minute: int = Field(default=0, ge=0, le=59)
    enabled: bool = True

    @property
    def start_minute_of_day(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_minute_of_day(self) -> int:
        return self.end_hour * 60 + self.end_minute

    @property
    def jitter_range_seconds(self) -> tuple[float, float]:
        """Random pre-run delay range: anywhere between window start and end."""
        span = max(0, self.end_minute_of_day - self.start_minute_of_day)
        return 0.0, span * 60.0

    @property
    def cron_expression(self) -> str:
        return f"{self.start_minute} {self.start_hour} * * 1-5"

    def contains(self, now: datetime) -> bool:
        minute = now.hour * 60 + now.minute
        return self.start_minute_of_day <= minute < self.end_minute_of_day


def default_schedules() -> list[ScheduleWindow]:
    return [
        ScheduleWindow(name="Pagi", start_hour=7, start_minute=0, end_hour=8, end_minute=0),
        ScheduleWindow(name="Siang", start_hour=12, start_minute=5, end_hour=13, end_minute=0),
        ScheduleWindow(name="Sore", start_hour=17, start_minute=0, end_hour=18, end_minute=0),
    ]


# ── Configuration record ────────────────────────────────────────────
class AppConfig(BaseModel):
    kode_kantor: str = settings.KODE_KANTOR
    status: str = settings.STATUS
    shift: str = settings.SHIFT
    latitude: float = settings.LATITUDE
    longitude: float = settings.LONGITUDE
    location_name: str = settings.LOCATION_NAME
    timezone: str = settings.TIMEZONE
    fonnte_account_token: str = settings.FONNTE_ACCOUNT_TOKEN
    fonnte_token: str = settings.FONNTE_TOKEN
    fonnte_device_number: str = ""
    fonnte_device_name: str = ""
    schedules: list[ScheduleWindow] = Field(default_factory=default_schedules)

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status)

    def find_window(self, name: str) -> ScheduleWindow | None:
        for window in self.schedules:
            if window.name.lower() == name.lower():
                return window
        return None


class ConfigUpdate(BaseModel):
    """Partial update — only submitted fields overwrite the stored record.

    The merge is top-level only: a submitted ``schedules`` list replaces the
    stored list as a whole, so send every window you want to keep.
    """

    kode_kantor: str | None = None
    status: str | None = None
    shift: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    location_name: str | None = None
    timezone: str | None = None
    fonnte_account_token: str | None = None
    fonnte_token: str | None = None
    fonnte_device_number: str | None = None
    fonnte_device_name: str | None = None
    schedules: list[ScheduleWindow] | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        if v is not None and v not in STATUS_LABELS:
            raise ValueError("status must be 1 (WFH), 2 (WFO) or 3 (DL)")
        return v


class ConfigResponse(BaseModel):
    success: bool = True
    config: AppConfig


class LocationUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    name: str


class FonnteSave(BaseModel):
    account_token: str | None = None
    device_token: str | None = None
    device_number: str | None = None
    device_name: str | None = None


class FonnteQrRequest(BaseModel):
    device_token: str | None = None
