"""Wires the production service objects from settings."""

from __future__ import annotations

from autocheckin.core.config import Settings
from autocheckin.db.store import JsonStore
from autocheckin.services.browser import CheckinExecutor
from autocheckin.services.directory import DirectoryClient
from autocheckin.services.fonnte import FonnteClient
from autocheckin.services.runner import CheckinRunner


def build_runner(settings: Settings, store: JsonStore | None = None) -> CheckinRunner:
    return CheckinRunner(
        store=store or JsonStore.from_settings(settings),
        executor=CheckinExecutor(settings),
        fonnte=FonnteClient(settings.FONNTE_BASE_URL, settings.HTTP_TIMEOUT, settings.FONNTE_COUNTRY_CODE),
        directory=DirectoryClient(settings.PEGAWAI_API_URL, settings.HTTP_TIMEOUT),
        settings=settings,
    )
