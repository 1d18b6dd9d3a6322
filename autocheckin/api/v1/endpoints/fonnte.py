"""
Fonnte device management — thin proxies to the WhatsApp gateway.

Gateway failures are reported in the body (``success: false``) rather
than as HTTP errors so the dashboard can show the gateway's reason.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from autocheckin.api.v1.deps import get_fonnte, get_store
from autocheckin.core.exceptions import GatewayError
from autocheckin.db.store import JsonStore
from autocheckin.schemas.checkin import MessageResponse
from autocheckin.schemas.config import FonnteQrRequest, FonnteSave
from autocheckin.services.fonnte import FonnteClient

router = APIRouter(prefix="/fonnte", tags=["fonnte"])
logger = logging.getLogger(__name__)


@router.get("/status")
async def fonnte_status(
    store: JsonStore = Depends(get_store),
    fonnte: FonnteClient = Depends(get_fonnte),
) -> dict[str, Any]:
    """Connection state of the first device on the account."""
    config = store.load_config()
    has_token = bool(config.fonnte_token)
    if not config.fonnte_account_token:
        return {
            "success": True,
            "status": "unknown",
            "has_token": has_token,
            "message": "Account Token belum diset",
        }

    try:
        data = await fonnte.get_devices(config.fonnte_account_token)
    except GatewayError as exc:
        return {"success": False, "status": "error", "message": str(exc)}

    devices = data.get("data") or []
    if data.get("status") is True and devices:
        device = devices[0]
        return {
            "success": True,
            "status": "connected" if device.get("status") == "connect" else "disconnected",
            "has_token": has_token,
            "device": {
                "name": device.get("name"),
                "number": device.get("device"),
                "quota": device.get("quota"),
                "expired": device.get("expired"),
            },
        }
    return {
        "success": True,
        "status": "disconnected",
        "has_token": has_token,
        "message": "Tidak ada device yang terhubung",
    }


@router.get("/devices")
async def fonnte_devices(
    store: JsonStore = Depends(get_store),
    fonnte: FonnteClient = Depends(get_fonnte),
) -> dict[str, Any]:
    config = store.load_config()
    if not config.fonnte_account_token:
        return {"success": False, "message": "Account Token belum diset"}

    data = await fonnte.get_devices(config.fonnte_account_token)
    if data.get("status") is True and data.get("data") is not None:
        return {"success": True, "devices": data["data"]}
    return {"success": False, "message": data.get("reason") or "Gagal mengambil daftar device"}


@router.post("/qr")
async def fonnte_qr(
    body: FonnteQrRequest,
    store: JsonStore = Depends(get_store),
    fonnte: FonnteClient = Depends(get_fonnte),
) -> dict[str, Any]:
    """QR code URL for pairing a WhatsApp device."""
    token = body.device_token or store.load_config().fonnte_token
    if not token:
        return {"success": False, "message": "Device Token tidak ditemukan"}

    data = await fonnte.get_qr(token)
    if data.get("status") is True and data.get("url"):
        return {"success": True, "qr": data["url"]}
    return {
        "success": False,
        "message": data.get("reason") or data.get("detail") or "Gagal mendapatkan QR code",
    }


@router.post("/save", response_model=MessageResponse)
async def fonnte_save(
    body: FonnteSave,
    store: JsonStore = Depends(get_store),
) -> MessageResponse:
    store.save_fonnte(
        account_token=body.account_token,
        device_token=body.device_token,
        device_number=body.device_number,
        device_name=body.device_name,
    )
    logger.info("Fonnte credentials saved")
    return MessageResponse(success=True, message="Fonnte config saved")


@router.post("/disconnect", response_model=MessageResponse)
async def fonnte_disconnect(
    store: JsonStore = Depends(get_store),
    fonnte: FonnteClient = Depends(get_fonnte),
) -> MessageResponse:
    token = store.load_config().fonnte_token
    if not token:
        return MessageResponse(success=False, message="Device Token tidak ditemukan")

    data = await fonnte.disconnect(token)
    if data.get("status") is True:
        logger.info("Fonnte device disconnected")
        return MessageResponse(success=True, message="Device berhasil di-disconnect")
    return MessageResponse(success=False, message=data.get("reason") or "Gagal disconnect device")
