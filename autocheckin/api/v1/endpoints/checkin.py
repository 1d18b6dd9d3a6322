"""
Manual check-in endpoints.

- POST /trigger starts a whole-roster run in the background and returns
  immediately; it does not skip weekends or holidays.
- POST /checkin runs one employee synchronously and returns the outcome.

Both are rate limited per client IP: each call opens a real browser.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from autocheckin.api.v1.deps import get_runner, get_store
from autocheckin.core.config import settings
from autocheckin.db.store import JsonStore
from autocheckin.schemas.checkin import (CheckinRequest, CheckinResponse,
                                         TriggerResponse)
from autocheckin.services.runner import MANUAL, CheckinRunner

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(tags=["checkin"])
logger = logging.getLogger(__name__)


async def _run_in_background(runner: CheckinRunner) -> None:
    try:
        await runner.run(MANUAL)
    except Exception:
        logger.exception("Background check-in run failed")


@router.post("/trigger", response_model=TriggerResponse)
@limiter.limit(settings.TRIGGER_RATE_LIMIT)
async def trigger_checkin(
    request: Request,
    background_tasks: BackgroundTasks,
    store: JsonStore = Depends(get_store),
    runner: CheckinRunner = Depends(get_runner),
) -> TriggerResponse:
    """Check in every enabled employee now."""
    enabled = [e for e in store.load_employees() if e.is_runnable]
    if not enabled:
        return TriggerResponse(success=False, message="No enabled users found")

    background_tasks.add_task(_run_in_background, runner)
    logger.info("⚡ Manual check-in triggered for %d users", len(enabled))
    return TriggerResponse(
        success=True,
        message=f"Check-in started for {len(enabled)} users",
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/checkin", response_model=CheckinResponse)
@limiter.limit(settings.TRIGGER_RATE_LIMIT)
async def checkin_one(
    request: Request,
    body: CheckinRequest,
    runner: CheckinRunner = Depends(get_runner),
) -> CheckinResponse:
    """Check in a single employee and wait for the portal's answer."""
    outcome, schedule, message = await runner.run_single(
        body.nip, body.password, body.schedule_name
    )
    return CheckinResponse(
        success=outcome.success,
        message=outcome.message,
        schedule=schedule,
        checkin_time=outcome.checkin_time,
        formatted_message=message,
    )
