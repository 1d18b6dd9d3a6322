"""Rolling log endpoints (newest 100 entries)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from autocheckin.api.v1.deps import get_store
from autocheckin.db.store import JsonStore
from autocheckin.schemas.checkin import LogListResponse, MessageResponse

router = APIRouter(tags=["logs"])


@router.get("/logs", response_model=LogListResponse)
async def list_logs(store: JsonStore = Depends(get_store)) -> LogListResponse:
    return LogListResponse(logs=store.load_logs())


@router.delete("/logs", response_model=MessageResponse)
async def clear_logs(store: JsonStore = Depends(get_store)) -> MessageResponse:
    store.clear_logs()
    return MessageResponse(success=True, message="Logs cleared")
