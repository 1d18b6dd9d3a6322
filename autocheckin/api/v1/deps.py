"""
FastAPI dependencies — service objects from app.state and the operator guard.
"""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from autocheckin.core.config import settings
from autocheckin.db.store import JsonStore
from autocheckin.services.directory import DirectoryClient
from autocheckin.services.fonnte import FonnteClient
from autocheckin.services.runner import CheckinRunner

bearer_scheme = HTTPBearer(auto_error=False)


# ── Service objects (built once in create_app) ──────────────────────
def get_store(request: Request) -> JsonStore:
    return request.app.state.store


def get_runner(request: Request) -> CheckinRunner:
    return request.app.state.runner


def get_fonnte(request: Request) -> FonnteClient:
    return request.app.state.fonnte


def get_directory(request: Request) -> DirectoryClient:
    return request.app.state.directory


# ── Auth ────────────────────────────────────────────────────────────
async def require_operator(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    """Check the dashboard bearer token; the API is open when none is configured."""
    expected = settings.DASHBOARD_TOKEN
    if not expected:
        return
    if credentials is None or not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing dashboard token",
            headers={"WWW-Authenticate": "Bearer"},
        )
