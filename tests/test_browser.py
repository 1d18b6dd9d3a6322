"""
Tests for the browser executor's pure helpers and navigation retry.

No real browser is launched; the page is a stand-in with a scripted goto.
"""

from pathlib import Path

import pytest
from playwright.async_api import Error as PlaywrightError

from autocheckin.core.config import settings
from autocheckin.services.browser import (CheckinExecutor, extract_clock_time,
                                          screenshot_path)


class FlakyPage:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def goto(self, url, **kwargs):
        self.calls += 1
        if self.calls <= self.failures:
            raise PlaywrightError("net::ERR_CONNECTION_RESET")
        return None


def _executor(sleeps):
    async def record(seconds):
        sleeps.append(seconds)

    return CheckinExecutor(settings, sleep=record)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("07-Jan-2026 11:29:24", "11:29:24"),
        ("7:05:09", "7:05:09"),
        ("-", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_clock_time(text, expected):
    assert extract_clock_time(text) == expected


def test_screenshot_path():
    assert screenshot_path("shots", "error", 1700000000000) == Path("shots") / "error_1700000000000.png"


def test_portal_origin():
    assert CheckinExecutor(settings).portal_origin == "https://skemaraja.kemenhub.go.id"


@pytest.mark.asyncio
async def test_goto_retries_then_succeeds():
    """Two failed navigations, third succeeds: three calls, two fixed pauses."""
    sleeps = []
    page = FlakyPage(failures=2)
    await _executor(sleeps).goto_with_retry(page)
    assert page.calls == 3
    assert sleeps == [settings.NAVIGATION_RETRY_DELAY] * 2


@pytest.mark.asyncio
async def test_goto_raises_after_last_retry():
    sleeps = []
    page = FlakyPage(failures=10)
    with pytest.raises(PlaywrightError):
        await _executor(sleeps).goto_with_retry(page)
    assert page.calls == settings.NAVIGATION_RETRIES
    assert len(sleeps) == settings.NAVIGATION_RETRIES - 1


@pytest.mark.asyncio
async def test_goto_first_try_does_not_pause():
    sleeps = []
    page = FlakyPage(failures=0)
    await _executor(sleeps).goto_with_retry(page)
    assert page.calls == 1
    assert sleeps == []
