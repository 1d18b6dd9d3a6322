"""Employee directory lookup on the portal (``/api/pegawaiSelect``)."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from autocheckin.schemas.employee import Employee

logger = logging.getLogger(__name__)


class DirectoryResult(BaseModel):
    success: bool
    pegawai: list[dict[str, Any]] = []
    count: int = 0
    error: str | None = None


def to_employees(pegawai: list[dict[str, Any]]) -> list[Employee]:
    """One enabled roster entry per directory record; password = NIP."""
    employees = []
    for p in pegawai:
        nip = str(p.get("id") or "").strip()
        if not nip:
            continue
        employees.append(
            Employee(nip=nip, password=nip, name=str(p.get("text") or ""), phone="", enabled=True)
        )
    return employees


class DirectoryClient:
    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, kode_kantor: str) -> DirectoryResult:
        try:
            resp = await self._client.get(self.url, params={"kode_kantor": kode_kantor})
            resp.raise_for_status()
            results = resp.json().get("results") or []
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.error("Failed to fetch pegawai for %s: %s", kode_kantor, exc)
            return DirectoryResult(success=False, error=str(exc))
        return DirectoryResult(success=True, pegawai=results, count=len(results))
