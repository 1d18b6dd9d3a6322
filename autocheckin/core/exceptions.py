"""
Domain errors and global exception handlers — prevents stack-trace leakage to clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class CheckinError(Exception):
    """Base class for errors raised while driving the attendance portal."""


class FormNotFoundError(CheckinError):
    """The login form never rendered on the portal page."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Form login tidak ditemukan. URL: {url}")


class StoreError(Exception):
    """A flat-file write failed."""


class GatewayError(Exception):
    """The messaging gateway could not be reached or answered garbage."""


# ── Handlers ────────────────────────────────────────────────────────
async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
    )


async def _store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Storage error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Could not persist changes", "success": False},
    )


async def _gateway_error_handler(_request: Request, exc: GatewayError) -> JSONResponse:
    logger.warning("Gateway error: %s", exc)
    return JSONResponse(
        status_code=200,
        content={"success": False, "message": str(exc)},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StoreError, _store_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(GatewayError, _gateway_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
