"""Tests for the optional dashboard bearer token."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from autocheckin.core.config import settings


@pytest.mark.asyncio
async def test_open_when_no_token_configured(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/config")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_missing_token_rejected(async_client: AsyncClient):
    with patch.object(settings, "DASHBOARD_TOKEN", "s3cret"):
        resp = await async_client.get("/api/v1/employees")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_wrong_token_rejected(async_client: AsyncClient):
    with patch.object(settings, "DASHBOARD_TOKEN", "s3cret"):
        resp = await async_client.post(
            "/api/v1/trigger", headers={"Authorization": "Bearer nope"}
        )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_correct_token_accepted(async_client: AsyncClient):
    with patch.object(settings, "DASHBOARD_TOKEN", "s3cret"):
        resp = await async_client.get(
            "/api/v1/logs", headers={"Authorization": "Bearer s3cret"}
        )
    assert resp.status_code == 200
