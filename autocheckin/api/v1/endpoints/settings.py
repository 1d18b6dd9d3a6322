"""
Configuration endpoints — the singleton config record and office location.

PUT merges: only the submitted fields overwrite what is stored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from autocheckin.api.v1.deps import get_store
from autocheckin.core.config import settings
from autocheckin.core.workdays import is_working_day, local_now
from autocheckin.db.store import JsonStore
from autocheckin.schemas.checkin import MessageResponse
from autocheckin.schemas.config import (ConfigResponse, ConfigUpdate,
                                        LocationUpdate)

router = APIRouter(tags=["settings"])
logger = logging.getLogger(__name__)


@router.get("/health")
async def health(store: JsonStore = Depends(get_store)) -> dict:
    config = store.load_config()
    now = local_now(config.timezone)
    return {
        "success": True,
        "version": settings.VERSION,
        "timezone": config.timezone,
        "local_time": now.isoformat(),
        "working_day": is_working_day(now),
    }


@router.get("/config", response_model=ConfigResponse)
async def get_config(store: JsonStore = Depends(get_store)) -> ConfigResponse:
    return ConfigResponse(config=store.load_config())


@router.put("/config", response_model=ConfigResponse)
async def update_config(
    body: ConfigUpdate,
    store: JsonStore = Depends(get_store),
) -> ConfigResponse:
    """Merge submitted fields into the stored configuration."""
    patch = body.model_dump(exclude_unset=True, exclude_none=True)
    config = store.update_config(patch)
    logger.info("Config updated: %s", sorted(patch))
    return ConfigResponse(config=config)


@router.post("/location", response_model=MessageResponse)
async def save_location(
    body: LocationUpdate,
    store: JsonStore = Depends(get_store),
) -> MessageResponse:
    store.save_location(body.latitude, body.longitude, body.name)
    logger.info("Location set to %s (%s, %s)", body.name, body.latitude, body.longitude)
    return MessageResponse(success=True, message="Location saved")
