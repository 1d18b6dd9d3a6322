"""Pydantic schemas for roster employees."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

_NIP_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _check_nip(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("NIP must not be empty")
    if not _NIP_RE.match(v):
        raise ValueError("NIP must be 1-64 alphanumeric chars")
    return v


class Employee(BaseModel):
    nip: str
    password: str = ""
    name: str = ""
    phone: str = ""
    enabled: bool = True
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.nip

    @property
    def is_runnable(self) -> bool:
        return self.enabled and bool(self.nip) and bool(self.password)


class EmployeeUpsert(BaseModel):
    """Add-or-update payload. Omitted fields keep their stored value."""

    nip: str
    password: str | None = None
    name: str | None = None
    phone: str | None = None
    enabled: bool | None = None

    @field_validator("nip")
    @classmethod
    def _nip(cls, v: str) -> str:
        return _check_nip(v)


class EmployeeListResponse(BaseModel):
    success: bool = True
    users: list[Employee]


class SyncResponse(BaseModel):
    success: bool
    added: int = 0
    total: int = 0
    message: str = ""
