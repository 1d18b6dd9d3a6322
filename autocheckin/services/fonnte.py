"""
Fonnte WhatsApp gateway client.

Fonnte authenticates with the raw token in the ``Authorization`` header:
the *device* token sends messages and pairs/disconnects the device, the
*account* token lists devices.  Every endpoint answers JSON with a
boolean ``status`` and a ``reason`` on failure.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

import httpx

from autocheckin.core.exceptions import GatewayError

logger = logging.getLogger(__name__)

_NON_DIGIT = re.compile(r"\D")


def normalize_phone(phone: str | None) -> str:
    return _NON_DIGIT.sub("", phone or "")


def render_message(
    *,
    name: str,
    schedule: str,
    when: datetime,
    location_name: str,
    mode: str,
    success: bool,
    detail: str,
) -> str:
    """Bilingual (Indonesian / English) notification body."""
    emoji = "✅" if success else "❌"
    status = "BERHASIL / SUCCESS" if success else "GAGAL / FAILED"
    closing = (
        "🎉 Terima kasih sudah absen! / Thank you for checking in!"
        if success
        else f"⚠️ {detail}\nSilakan cek manual di skemaraja.kemenhub.go.id / Please check the portal manually."
    )
    return (
        f"{emoji} *Check-in SKEMARAJA {status}*\n"
        "\n"
        f"👤 *Nama / Name:* {name}\n"
        f"📅 *Jadwal / Schedule:* {schedule}\n"
        f"🕐 *Waktu / Time:* {when.strftime('%d/%m/%Y %H:%M:%S')}\n"
        f"📍 *Lokasi / Location:* {location_name}\n"
        f"📱 *Status / Mode:* {mode}\n"
        "\n"
        f"{closing}\n"
        "\n"
        "_Auto Check-in SKEMARAJA_"
    )


class FonnteClient:
    def __init__(
        self,
        base_url: str = "https://api.fonnte.com",
        timeout: float = 30.0,
        country_code: str = "62",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.country_code = country_code
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, token: str, data: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            resp = await self._client.post(path, headers={"Authorization": token}, data=data)
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise GatewayError(f"Fonnte {path} failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise GatewayError(f"Fonnte {path} answered {type(payload).__name__}, expected an object")
        return payload

    # ── Messaging ───────────────────────────────────────────────────
    async def send_message(self, token: str, target: str, message: str) -> dict[str, Any]:
        return await self._post(
            "/send",
            token,
            {"target": target, "message": message, "countryCode": self.country_code},
        )

    async def notify(
        self,
        token: str,
        phone: str,
        *,
        name: str,
        schedule: str,
        success: bool,
        detail: str,
        location_name: str,
        mode: str,
        when: datetime,
    ) -> bool:
        """Best-effort WhatsApp notification; never raises."""
        target = normalize_phone(phone)
        if not token or not target:
            logger.debug("Skipping WhatsApp for %s: missing token or phone", name)
            return False

        message = render_message(
            name=name,
            schedule=schedule,
            when=when,
            location_name=location_name,
            mode=mode,
            success=success,
            detail=detail,
        )
        try:
            result = await self.send_message(token, target, message)
        except GatewayError as exc:
            logger.error("📱 Fonnte error: %s", exc)
            return False

        if result.get("status"):
            logger.info("📱 WhatsApp sent to %s", name)
            return True
        logger.warning("📱 WhatsApp failed: %s", result.get("reason") or "Unknown error")
        return False

    # ── Device management ───────────────────────────────────────────
    async def get_devices(self, account_token: str) -> dict[str, Any]:
        return await self._post("/get-devices", account_token)

    async def get_qr(self, device_token: str) -> dict[str, Any]:
        return await self._post("/qr", device_token, {"type": "qr"})

    async def disconnect(self, device_token: str) -> dict[str, Any]:
        return await self._post("/disconnect", device_token)
