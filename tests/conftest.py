"""
Shared test fixtures for the auto check-in test suite.

No browser is launched and nothing leaves the process: the executor is a
scripted fake, both HTTP clients run on httpx.MockTransport and sleeps
return immediately.
"""

import os
import random
import sys
import tempfile
from typing import AsyncGenerator
from urllib.parse import parse_qs

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
_TMP = tempfile.mkdtemp(prefix="autocheckin-tests-")
os.environ["CONFIG_FILE"] = os.path.join(_TMP, "config.json")
os.environ["USERS_FILE"] = os.path.join(_TMP, "users.json")
os.environ["LOGS_FILE"] = os.path.join(_TMP, "logs.json")
os.environ["SCREENSHOT_DIR"] = os.path.join(_TMP, "screenshots")
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["TRIGGER_RATE_LIMIT"] = "1000/minute"
os.environ["DASHBOARD_TOKEN"] = ""

import httpx
from httpx import ASGITransport, AsyncClient

from autocheckin.core.config import settings
from autocheckin.db.store import JsonStore
from autocheckin.main import create_app
from autocheckin.schemas.checkin import AttemptRequest, Outcome
from autocheckin.services.directory import DirectoryClient
from autocheckin.services.fonnte import FonnteClient
from autocheckin.services.runner import CheckinRunner

SUCCESS = Outcome(
    success=True, kind="success", message="Check-in berhasil! (07:15:00)", checkin_time="07:15:00"
)


class FakeExecutor:
    """Returns (or raises) scripted outcomes in order; defaults to success."""

    def __init__(self) -> None:
        self.outcomes: list = []
        self.calls: list[AttemptRequest] = []

    async def attempt(self, request: AttemptRequest) -> Outcome:
        self.calls.append(request)
        result = self.outcomes.pop(0) if self.outcomes else SUCCESS
        if isinstance(result, Exception):
            raise result
        return result


class GatewayStub:
    """Fake Fonnte API: canned JSON per path, every request recorded."""

    def __init__(self) -> None:
        self.responses: dict[str, object] = {"/send": {"status": True}}
        self.requests: list[httpx.Request] = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("gateway down", request=request)
        return httpx.Response(200, json=self.responses.get(request.url.path, {"status": False}))

    def form(self, index: int = -1) -> dict[str, str]:
        body = parse_qs(self.requests[index].content.decode())
        return {k: v[0] for k, v in body.items()}


class DirectoryStub:
    def __init__(self) -> None:
        self.results = [
            {"id": "198001012005011001", "text": "Budi Santoso"},
            {"id": "198502022010012002", "text": "Siti Aminah"},
        ]
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "error"})
        return httpx.Response(200, json={"results": self.results})


async def _no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def store(tmp_path) -> JsonStore:
    return JsonStore(
        tmp_path / "config.json",
        tmp_path / "users.json",
        tmp_path / "logs.json",
        retention=settings.LOG_RETENTION,
    )


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def gateway() -> GatewayStub:
    return GatewayStub()


@pytest.fixture
def directory_stub() -> DirectoryStub:
    return DirectoryStub()


@pytest.fixture
async def fonnte(gateway: GatewayStub) -> AsyncGenerator[FonnteClient, None]:
    client = FonnteClient(transport=httpx.MockTransport(gateway.handler))
    yield client
    await client.aclose()


@pytest.fixture
async def directory(directory_stub: DirectoryStub) -> AsyncGenerator[DirectoryClient, None]:
    client = DirectoryClient(
        "https://portal.test/api/pegawaiSelect",
        transport=httpx.MockTransport(directory_stub.handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def runner(store, executor, fonnte, directory) -> CheckinRunner:
    return CheckinRunner(
        store=store,
        executor=executor,
        fonnte=fonnte,
        directory=directory,
        settings=settings,
        sleep=_no_sleep,
        rng=random.Random(7),
    )


@pytest.fixture
async def async_client(store, runner) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to an app built around the test store."""
    app = create_app(store=store, runner=runner)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
