"""
Flat-file JSON store for the configuration record, roster and rolling log.

One ``JsonStore`` is built at process start and handed to every consumer.
There is no locking: concurrent writers race and the last write wins,
which is acceptable for a single-operator dashboard.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from autocheckin.core.config import Settings
from autocheckin.core.exceptions import StoreError
from autocheckin.schemas.checkin import LogEntry
from autocheckin.schemas.config import AppConfig
from autocheckin.schemas.employee import Employee

logger = logging.getLogger(__name__)


class JsonStore:
    def __init__(
        self,
        config_path: str | Path,
        users_path: str | Path,
        logs_path: str | Path,
        defaults: AppConfig | None = None,
        retention: int = 100,
    ) -> None:
        self.config_path = Path(config_path)
        self.users_path = Path(users_path)
        self.logs_path = Path(logs_path)
        self.defaults = defaults or AppConfig()
        self.retention = retention

    @classmethod
    def from_settings(cls, settings: Settings) -> JsonStore:
        return cls(
            settings.CONFIG_FILE,
            settings.USERS_FILE,
            settings.LOGS_FILE,
            retention=settings.LOG_RETENTION,
        )

    # ── Raw file helpers ────────────────────────────────────────────
    def _read(self, path: Path, expected: type) -> Any:
        """Decode *path* and check the top-level JSON type."""
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, expected):
            raise TypeError(f"{path} holds {type(data).__name__}, expected {expected.__name__}")
        return data

    def _write(self, path: Path, data: Any) -> None:
        """Write JSON atomically (temp file in the same directory, then rename)."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False, default=str)
            os.replace(tmp, path)
        except OSError as exc:
            raise StoreError(f"Could not write {path}: {exc}") from exc

    # ── Configuration ───────────────────────────────────────────────
    def load_config(self) -> AppConfig:
        """Defaults overlaid with whatever config.json holds."""
        if not self.config_path.exists():
            return self.defaults.model_copy(deep=True)
        try:
            stored = self._read(self.config_path, dict)
            merged = {**self.defaults.model_dump(), **stored}
            return AppConfig.model_validate(merged)
        except (OSError, TypeError, ValueError, ValidationError) as exc:
            logger.error("Error loading config %s: %s", self.config_path, exc)
            return self.defaults.model_copy(deep=True)

    def save_config(self, config: AppConfig) -> None:
        self._write(self.config_path, config.model_dump(mode="json"))

    def update_config(self, patch: dict[str, Any]) -> AppConfig:
        """Merge *patch* into the stored record; omitted fields keep their value."""
        merged = {**self.load_config().model_dump(), **patch}
        config = AppConfig.model_validate(merged)
        self.save_config(config)
        return config

    def save_location(self, latitude: float, longitude: float, name: str) -> AppConfig:
        return self.update_config(
            {"latitude": latitude, "longitude": longitude, "location_name": name}
        )

    def save_fonnte(
        self,
        account_token: str | None = None,
        device_token: str | None = None,
        device_number: str | None = None,
        device_name: str | None = None,
    ) -> AppConfig:
        patch = {
            "fonnte_account_token": account_token,
            "fonnte_token": device_token,
            "fonnte_device_number": device_number,
            "fonnte_device_name": device_name,
        }
        return self.update_config({k: v for k, v in patch.items() if v is not None})

    # ── Roster ──────────────────────────────────────────────────────
    def has_roster(self) -> bool:
        return self.users_path.exists()

    def load_employees(self) -> list[Employee]:
        if not self.users_path.exists():
            return []
        try:
            return [Employee.model_validate(u) for u in self._read(self.users_path, list)]
        except (OSError, TypeError, ValueError, ValidationError) as exc:
            logger.error("Error loading users %s: %s", self.users_path, exc)
            return []

    def save_employees(self, employees: list[Employee]) -> None:
        self._write(self.users_path, [e.model_dump(mode="json") for e in employees])

    def get_employee(self, nip: str) -> Employee | None:
        return next((e for e in self.load_employees() if e.nip == nip), None)

    def upsert_employee(self, data: dict[str, Any]) -> Employee:
        """Update the employee keyed by ``nip`` or append a new one.

        New employees start enabled and use their NIP as password unless
        one is given.
        """
        employees = self.load_employees()
        nip = data["nip"]
        for i, existing in enumerate(employees):
            if existing.nip == nip:
                employees[i] = existing.model_copy(update=data)
                self.save_employees(employees)
                return employees[i]

        employee = Employee.model_validate(
            {
                "password": nip,
                **data,
                "enabled": data.get("enabled", True),
                "created_at": datetime.now(timezone.utc),
            }
        )
        employees.append(employee)
        self.save_employees(employees)
        return employee

    def delete_employee(self, nip: str) -> bool:
        employees = self.load_employees()
        remaining = [e for e in employees if e.nip != nip]
        if len(remaining) == len(employees):
            return False
        self.save_employees(remaining)
        return True

    def delete_all_employees(self) -> None:
        self.save_employees([])

    def toggle_employee(self, nip: str) -> Employee | None:
        employees = self.load_employees()
        for employee in employees:
            if employee.nip == nip:
                employee.enabled = not employee.enabled
                self.save_employees(employees)
                return employee
        return None

    def merge_directory(self, incoming: list[Employee]) -> int:
        """Append directory entries whose NIP is not on the roster yet."""
        employees = self.load_employees()
        known = {e.nip for e in employees}
        added = [e for e in incoming if e.nip not in known]
        if added or not self.has_roster():
            self.save_employees(employees + added)
        return len(added)

    # ── Rolling log ─────────────────────────────────────────────────
    def load_logs(self) -> list[LogEntry]:
        if not self.logs_path.exists():
            return []
        try:
            raw = self._read(self.logs_path, list)
            return [LogEntry.model_validate(entry) for entry in raw[-self.retention:]]
        except (OSError, TypeError, ValueError, ValidationError) as exc:
            logger.error("Error loading logs %s: %s", self.logs_path, exc)
            return []

    def add_log(self, entry: LogEntry) -> None:
        """Append one entry, keeping only the newest ``retention`` entries.

        A failed write is logged and dropped; it must not abort a check-in run.
        """
        logs = self.load_logs()
        logs.append(entry)
        try:
            self._write(
                self.logs_path,
                [e.model_dump(mode="json") for e in logs[-self.retention:]],
            )
        except StoreError as exc:
            logger.error("Could not append log entry: %s", exc)

    def clear_logs(self) -> None:
        self._write(self.logs_path, [])
