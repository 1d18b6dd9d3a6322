"""Tests for the Fonnte device management endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_status_without_account_token(async_client: AsyncClient, gateway):
    data = (await async_client.get("/api/v1/fonnte/status")).json()
    assert data["status"] == "unknown"
    assert data["has_token"] is False
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_status_connected_device(async_client: AsyncClient, gateway, store):
    store.save_fonnte(account_token="acc", device_token="dev")
    gateway.responses["/get-devices"] = {
        "status": True,
        "data": [{"name": "Kantor", "device": "62812", "status": "connect", "quota": "100", "expired": "-"}],
    }
    data = (await async_client.get("/api/v1/fonnte/status")).json()
    assert data["status"] == "connected"
    assert data["has_token"] is True
    assert data["device"]["number"] == "62812"
    assert gateway.requests[0].headers["Authorization"] == "acc"


@pytest.mark.asyncio
async def test_status_gateway_down(async_client: AsyncClient, gateway, store):
    store.save_fonnte(account_token="acc")
    gateway.fail = True
    data = (await async_client.get("/api/v1/fonnte/status")).json()
    assert data["success"] is False
    assert data["status"] == "error"


@pytest.mark.asyncio
async def test_devices_gateway_error_is_reported_in_body(async_client: AsyncClient, gateway, store):
    store.save_fonnte(account_token="acc")
    gateway.fail = True
    resp = await async_client.get("/api/v1/fonnte/devices")
    assert resp.status_code == 200
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_qr_uses_body_token_before_stored(async_client: AsyncClient, gateway, store):
    store.save_fonnte(device_token="stored")
    gateway.responses["/qr"] = {"status": True, "url": "data:image/png;base64,AAA"}
    data = (await async_client.post("/api/v1/fonnte/qr", json={"device_token": "fresh"})).json()
    assert data == {"success": True, "qr": "data:image/png;base64,AAA"}
    assert gateway.requests[0].headers["Authorization"] == "fresh"


@pytest.mark.asyncio
async def test_qr_without_any_token(async_client: AsyncClient):
    data = (await async_client.post("/api/v1/fonnte/qr", json={})).json()
    assert data["success"] is False


@pytest.mark.asyncio
async def test_save_keeps_unsent_fields(async_client: AsyncClient, store):
    await async_client.post("/api/v1/fonnte/save", json={"account_token": "acc", "device_token": "dev"})
    await async_client.post("/api/v1/fonnte/save", json={"device_name": "Kantor"})
    config = store.load_config()
    assert (config.fonnte_account_token, config.fonnte_token, config.fonnte_device_name) == (
        "acc",
        "dev",
        "Kantor",
    )


@pytest.mark.asyncio
async def test_disconnect(async_client: AsyncClient, gateway, store):
    missing = (await async_client.post("/api/v1/fonnte/disconnect")).json()
    assert missing["success"] is False

    store.save_fonnte(device_token="dev")
    gateway.responses["/disconnect"] = {"status": True}
    data = (await async_client.post("/api/v1/fonnte/disconnect")).json()
    assert data["success"] is True


@pytest.mark.asyncio
async def test_non_object_gateway_reply_is_reported_in_body(async_client: AsyncClient, gateway, store):
    store.save_fonnte(account_token="acc", device_token="dev")
    gateway.responses["/get-devices"] = ["oops"]
    gateway.responses["/qr"] = "oops"

    devices = await async_client.get("/api/v1/fonnte/devices")
    assert devices.status_code == 200
    assert devices.json()["success"] is False

    qr = await async_client.post("/api/v1/fonnte/qr", json={})
    assert qr.status_code == 200
    assert qr.json()["success"] is False

    status = (await async_client.get("/api/v1/fonnte/status")).json()
    assert status["status"] == "error"
