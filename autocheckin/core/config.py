"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.  Values under "Defaults for
config.json" only seed the persisted configuration record; once the
dashboard saves a config, the file wins.
"""

from __future__ import annotations

from datetime import date

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "SKEMA RAJA Auto Check-in"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # ── Flat-file storage ───────────────────────────────────────────
    CONFIG_FILE: str = "./config.json"
    USERS_FILE: str = "./users.json"
    LOGS_FILE: str = "./logs.json"
    LOG_RETENTION: int = 100
    SCREENSHOT_DIR: str = "./screenshots"

    # ── Attendance portal ───────────────────────────────────────────
    PORTAL_URL: str = "https://skemaraja.kemenhub.go.id/"
    PEGAWAI_API_URL: str = "https://skemaraja.kemenhub.go.id/api/pegawaiSelect"
    NAVIGATION_RETRIES: int = 3
    NAVIGATION_RETRY_DELAY: float = 5.0
    NAVIGATION_TIMEOUT_MS: int = 60_000
    FORM_TIMEOUT_MS: int = 60_000
    GEOLOCATION_TIMEOUT_MS: int = 10_000
    SUBMIT_TIMEOUT_MS: int = 30_000
    CLASSIFIER_RULES_FILE: str = ""

    # ── Browser ─────────────────────────────────────────────────────
    HEADLESS: bool = True
    SLOW_MO: int = 50
    VIEWPORT_WIDTH: int = 1920
    VIEWPORT_HEIGHT: int = 1080
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    ACCEPT_LANGUAGE: str = "id-ID,id;q=0.9,en-US;q=0.8,en;q=0.7"

    # ── Fonnte (WhatsApp gateway) ───────────────────────────────────
    FONNTE_BASE_URL: str = "https://api.fonnte.com"
    FONNTE_COUNTRY_CODE: str = "62"
    HTTP_TIMEOUT: float = 30.0

    # ── Defaults for config.json ────────────────────────────────────
    KODE_KANTOR: str = "004036057000000"
    STATUS: str = "2"
    SHIFT: str = "1"
    LATITUDE: float = 0.537831
    LONGITUDE: float = 123.058388
    LOCATION_NAME: str = "KSOP Gorontalo"
    TIMEZONE: str = "Asia/Makassar"
    FONNTE_TOKEN: str = ""
    FONNTE_ACCOUNT_TOKEN: str = ""

    # ── Human-like pacing (seconds) ─────────────────────────────────
    USER_DELAY_MAX: float = 30.0
    INTER_USER_DELAY_MIN: float = 3.0
    INTER_USER_DELAY_MAX: float = 8.0

    # ── Calendar ────────────────────────────────────────────────────
    EXTRA_HOLIDAYS: str = ""  # comma-separated ISO dates

    @property
    def extra_holidays(self) -> set[date]:
        return {
            date.fromisoformat(d.strip())
            for d in self.EXTRA_HOLIDAYS.split(",")
            if d.strip()
        }

    # ── Dashboard ───────────────────────────────────────────────────
    DASHBOARD_TOKEN: str = ""
    TRIGGER_RATE_LIMIT: str = "10/minute"
    CORS_ORIGINS: list[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
