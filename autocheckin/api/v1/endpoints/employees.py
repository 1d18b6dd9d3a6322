"""
Roster endpoints — employee CRUD keyed by NIP and the portal directory.

- POST /employees adds a new employee or updates the one with the same NIP.
- POST /employees/sync pulls the office directory and appends unknown NIPs.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from autocheckin.api.v1.deps import get_directory, get_store
from autocheckin.db.store import JsonStore
from autocheckin.schemas.checkin import MessageResponse
from autocheckin.schemas.employee import (Employee, EmployeeListResponse,
                                          EmployeeUpsert, SyncResponse)
from autocheckin.services.directory import (DirectoryClient, DirectoryResult,
                                            to_employees)

router = APIRouter(tags=["employees"])
logger = logging.getLogger(__name__)


@router.get("/employees", response_model=EmployeeListResponse)
async def list_employees(store: JsonStore = Depends(get_store)) -> EmployeeListResponse:
    return EmployeeListResponse(users=store.load_employees())


@router.post("/employees", response_model=Employee)
async def upsert_employee(
    body: EmployeeUpsert,
    store: JsonStore = Depends(get_store),
) -> Employee:
    employee = store.upsert_employee(body.model_dump(exclude_unset=True, exclude_none=True))
    logger.info("Saved employee %s (%s)", employee.nip, employee.display_name)
    return employee


@router.delete("/employees", response_model=MessageResponse)
async def delete_all_employees(store: JsonStore = Depends(get_store)) -> MessageResponse:
    store.delete_all_employees()
    logger.info("All employees deleted")
    return MessageResponse(success=True, message="All users deleted")


@router.post("/employees/sync", response_model=SyncResponse)
async def sync_employees(
    kode_kantor: str | None = None,
    store: JsonStore = Depends(get_store),
    directory: DirectoryClient = Depends(get_directory),
) -> SyncResponse:
    """Import the office directory into the roster, keeping existing entries."""
    code = kode_kantor or store.load_config().kode_kantor
    result = await directory.fetch(code)
    if not result.success:
        return SyncResponse(success=False, message=result.error or "Directory lookup failed")

    added = store.merge_directory(to_employees(result.pegawai))
    total = len(store.load_employees())
    logger.info("Directory sync for %s: %d added, %d total", code, added, total)
    return SyncResponse(success=True, added=added, total=total, message=f"{added} users added")


@router.delete("/employees/{nip}", response_model=MessageResponse)
async def delete_employee(nip: str, store: JsonStore = Depends(get_store)) -> MessageResponse:
    if not store.delete_employee(nip):
        raise HTTPException(status_code=404, detail="Employee not found")
    logger.info("Deleted employee %s", nip)
    return MessageResponse(success=True, message="User deleted")


@router.post("/employees/{nip}/toggle", response_model=Employee)
async def toggle_employee(nip: str, store: JsonStore = Depends(get_store)) -> Employee:
    employee = store.toggle_employee(nip)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    logger.info("Employee %s %s", nip, "enabled" if employee.enabled else "disabled")
    return employee


@router.get("/pegawai", response_model=DirectoryResult)
async def fetch_pegawai(
    kode_kantor: str | None = Query(default=None),
    store: JsonStore = Depends(get_store),
    directory: DirectoryClient = Depends(get_directory),
) -> DirectoryResult:
    """Raw directory lookup, for the dashboard's import picker."""
    return await directory.fetch(kode_kantor or store.load_config().kode_kantor)
