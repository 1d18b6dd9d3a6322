"""
V1 API router aggregator — wires all endpoint modules together.

Every route sits behind the optional dashboard token.
"""

from fastapi import APIRouter, Depends

from autocheckin.api.v1.deps import require_operator
from autocheckin.api.v1.endpoints import checkin, employees, fonnte, logs, settings

api_router = APIRouter(dependencies=[Depends(require_operator)])

# Config, location, health
api_router.include_router(settings.router)

# Roster and portal directory
api_router.include_router(employees.router)

# Rolling log
api_router.include_router(logs.router)

# Manual trigger and single check-in
api_router.include_router(checkin.router)

# WhatsApp gateway
api_router.include_router(fonnte.router)
