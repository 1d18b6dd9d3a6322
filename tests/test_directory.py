"""Tests for the portal employee directory client."""

import pytest

from autocheckin.services.directory import to_employees


@pytest.mark.asyncio
async def test_fetch_returns_directory_records(directory, directory_stub):
    result = await directory.fetch("004036057000000")
    assert result.success is True
    assert result.count == 2
    assert result.pegawai[0]["text"] == "Budi Santoso"
    assert directory_stub.requests[0].url.params["kode_kantor"] == "004036057000000"


@pytest.mark.asyncio
async def test_fetch_http_error_is_reported(directory, directory_stub):
    directory_stub.status_code = 503
    result = await directory.fetch("004036057000000")
    assert result.success is False
    assert result.pegawai == []
    assert result.error


def test_to_employees_uses_nip_as_password():
    employees = to_employees(
        [{"id": "1001", "text": "Budi"}, {"id": "", "text": "Tanpa NIP"}, {"id": 1002, "text": "Siti"}]
    )
    assert [e.nip for e in employees] == ["1001", "1002"]
    assert all(e.password == e.nip for e in employees)
    assert all(e.enabled for e in employees)
    assert employees[0].name == "Budi"
