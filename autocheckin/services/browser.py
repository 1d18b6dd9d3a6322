"""
Playwright driver for one check-in attempt on the SKEMA RAJA portal.

A fresh Chromium instance is launched per attempt and always closed
afterwards.  Geolocation permission is granted for the portal origin
*before* the coordinates are set and before navigation, otherwise the
page never receives a position.

Navigation failures (after retries) and a missing login form are raised
to the caller; every other page state comes back as an ``Outcome``.
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
import time
from pathlib import Path
from urllib.parse import urlsplit

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright
from playwright_stealth import Stealth

from autocheckin.core.config import Settings
from autocheckin.core.exceptions import FormNotFoundError
from autocheckin.core.workdays import format_clock, local_now, session_column
from autocheckin.schemas.checkin import AttemptRequest, Outcome
from autocheckin.schemas.config import STATUS_LABELS, STATUS_WFO
from autocheckin.services.classifier import (DEFAULT_RULES, UNRECOGNIZED,
                                             ClassificationRule, classify,
                                             load_rules)

logger = logging.getLogger(__name__)

_CLOCK_RE = re.compile(r"(\d{1,2}:\d{2}:\d{2})")

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]

TRIGGER_GEOLOCATION_JS = """
() => new Promise((resolve, reject) => {
    navigator.geolocation.getCurrentPosition(
        (pos) => resolve([pos.coords.latitude, pos.coords.longitude]),
        (err) => reject(new Error(err.message)),
        { enableHighAccuracy: true, timeout: 10000, maximumAge: 0 }
    );
})
"""

LOCATION_CAPTURED_JS = """
() => {
    const input = document.querySelector('input[name="location_user"]');
    return !!(input && input.value && input.value.includes(','));
}
"""

INJECT_LOCATION_JS = """
([lat, lng]) => {
    const input = document.querySelector('input[name="location_user"]');
    if (input && (!input.value || !input.value.includes(','))) {
        input.value = `${lat}, ${lng}`;
    }
}
"""

CHECK_SHIFT_JS = """
(value) => {
    const radio = document.querySelector(`input[name="shift"][value="${value}"]`);
    if (radio) radio.checked = true;
}
"""

# TANGGAL | PAGI | SIANG | SORE — first body row is today
READ_SESSION_CELL_JS = """
(column) => {
    const table = document.querySelector('#absensi table')
        || document.querySelector('table.table-bordered');
    if (!table) return null;
    const rows = table.querySelectorAll('tbody tr');
    if (rows.length === 0) return null;
    const cells = rows[0].querySelectorAll('td');
    if (cells.length <= column) return null;
    return cells[column].textContent.trim();
}
"""


def extract_clock_time(text: str | None) -> str | None:
    """Pull ``HH:MM:SS`` out of cell text like ``07-Jan-2026 11:29:24``."""
    if not text:
        return None
    match = _CLOCK_RE.search(text)
    return match.group(1) if match else None


def screenshot_path(directory: str | Path, stage: str, now_ms: int | None = None) -> Path:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return Path(directory) / f"{stage}_{now_ms}.png"


def typing_delay() -> float:
    """Per-character typing delay in milliseconds."""
    return random.uniform(50, 150)


class CheckinExecutor:
    """Runs the portal's check-in flow in a throwaway browser."""

    def __init__(
        self,
        settings: Settings,
        rules: tuple[ClassificationRule, ...] | None = None,
        sleep=asyncio.sleep,
    ) -> None:
        self.settings = settings
        if rules is None:
            rules = load_rules(settings.CLASSIFIER_RULES_FILE) if settings.CLASSIFIER_RULES_FILE else DEFAULT_RULES
        self.rules = rules
        self._sleep = sleep
        # Hides automation fingerprints such as navigator.webdriver on every page
        self.stealth = Stealth(navigator_languages_override=("id-ID", "id"))

    @property
    def portal_origin(self) -> str:
        parts = urlsplit(self.settings.PORTAL_URL)
        return f"{parts.scheme}://{parts.netloc}"

    # ── Small helpers ───────────────────────────────────────────────
    async def _pause(self, low_ms: int, high_ms: int) -> None:
        await self._sleep(random.uniform(low_ms, high_ms) / 1000)

    async def _screenshot(self, page: Page, stage: str) -> None:
        try:
            path = screenshot_path(self.settings.SCREENSHOT_DIR, stage)
            path.parent.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(path), full_page=True)
            logger.info("📸 Screenshot saved: %s", path)
        except (PlaywrightError, OSError) as exc:
            logger.error("Failed to save screenshot %s: %s", stage, exc)

    async def _random_mouse_move(self, page: Page) -> None:
        viewport = page.viewport_size or {
            "width": self.settings.VIEWPORT_WIDTH,
            "height": self.settings.VIEWPORT_HEIGHT,
        }
        for _ in range(3):
            await page.mouse.move(
                random.randint(0, viewport["width"] - 1),
                random.randint(0, viewport["height"] - 1),
                steps=10,
            )
            await self._pause(100, 300)

    async def _type_into(self, page: Page, selector: str, value: str) -> None:
        field = page.locator(selector)
        await field.click()
        await self._pause(200, 500)
        await field.press_sequentially(value, delay=typing_delay())

    # ── Flow steps ──────────────────────────────────────────────────
    async def goto_with_retry(self, page: Page) -> None:
        """Open the portal, retrying a failed navigation with a fixed pause."""
        retries = max(1, self.settings.NAVIGATION_RETRIES)
        for attempt in range(1, retries + 1):
            try:
                await page.goto(
                    self.settings.PORTAL_URL,
                    wait_until="networkidle",
                    timeout=self.settings.NAVIGATION_TIMEOUT_MS,
                )
                return
            except PlaywrightError:
                if attempt == retries:
                    raise
                logger.warning(
                    "⚠️ Navigation failed, retrying (%d left)...", retries - attempt
                )
                await self._sleep(self.settings.NAVIGATION_RETRY_DELAY)

    async def _trigger_geolocation(self, page: Page) -> None:
        try:
            coords = await page.evaluate(TRIGGER_GEOLOCATION_JS)
            logger.debug("In-page geolocation: %s", coords)
        except PlaywrightError as exc:
            logger.warning("⚠️ Geolocation trigger warning: %s", exc)

    async def _wait_for_form(self, page: Page) -> None:
        try:
            await page.wait_for_selector(
                'input[name="nip"]', timeout=self.settings.FORM_TIMEOUT_MS
            )
            logger.info("📝 Login form detected")
        except PlaywrightTimeoutError:
            await self._screenshot(page, "form_not_found")
            logger.error("❌ Form not found. URL: %s, Title: %s", page.url, await page.title())
            raise FormNotFoundError(page.url) from None

    async def _select_shift(self, page: Page, shift: str) -> None:
        logger.info("⏰ Selecting shift: %s", shift)
        try:
            await page.click(f'input[name="shift"][value="{shift}"]', timeout=5_000)
        except PlaywrightError:
            await page.evaluate(CHECK_SHIFT_JS, shift)

    async def _ensure_location(self, page: Page, latitude: float, longitude: float) -> None:
        logger.info("📍 Waiting for geolocation...")
        try:
            await page.wait_for_function(
                LOCATION_CAPTURED_JS, timeout=self.settings.GEOLOCATION_TIMEOUT_MS
            )
        except PlaywrightTimeoutError:
            logger.warning("⚠️ Geolocation not captured automatically, setting manually...")
        await page.evaluate(INJECT_LOCATION_JS, [latitude, longitude])

    async def _submit(self, page: Page) -> None:
        """Click submit and wait for the page it navigates to."""
        logger.info("🚀 Submitting form...")
        try:
            async with page.expect_navigation(
                wait_until="networkidle", timeout=self.settings.SUBMIT_TIMEOUT_MS
            ):
                await page.click("#btnSubmit")
        except PlaywrightTimeoutError:
            logger.debug("No navigation after submit")

    async def _read_checkin_time(self, page: Page) -> str:
        """Clock time from today's row for the current session, else now."""
        now = local_now()
        try:
            cell = await page.evaluate(READ_SESSION_CELL_JS, session_column(now.hour))
            found = extract_clock_time(cell)
        except PlaywrightError as exc:
            logger.debug("Could not read attendance table: %s", exc)
            found = None
        return found or format_clock(now)

    async def _fill_and_submit(self, page: Page, request: AttemptRequest) -> None:
        await self._random_mouse_move(page)

        logger.info("✏️ Filling NIP...")
        await self._type_into(page, 'input[name="nip"]', request.nip)
        await self._pause(500, 1000)

        logger.info("🔑 Filling Password...")
        await self._type_into(page, 'input[name="password"]', request.password)
        await self._pause(500, 1000)

        logger.info("📋 Selecting status: %s", STATUS_LABELS.get(request.status, request.status))
        await page.select_option('select[name="status_wfh"]', request.status)
        await self._pause(300, 700)

        if request.status == STATUS_WFO:
            await self._select_shift(page, request.shift)
        await self._pause(500, 1000)

        await self._ensure_location(page, request.latitude, request.longitude)
        await self._pause(500, 1000)

        await self._submit(page)
        await self._pause(2000, 3000)

    # ── Public entry point ──────────────────────────────────────────
    async def attempt(self, request: AttemptRequest) -> Outcome:
        async with async_playwright() as pw:
            logger.info("🌐 Launching browser...")
            browser = await pw.chromium.launch(
                headless=request.headless,
                slow_mo=request.slow_mo,
                args=[
                    *LAUNCH_ARGS,
                    f"--window-size={self.settings.VIEWPORT_WIDTH},{self.settings.VIEWPORT_HEIGHT}",
                ],
            )
            page: Page | None = None
            try:
                context = await browser.new_context(
                    viewport={
                        "width": self.settings.VIEWPORT_WIDTH,
                        "height": self.settings.VIEWPORT_HEIGHT,
                    },
                    user_agent=self.settings.USER_AGENT,
                    locale="id-ID",
                    timezone_id=self.settings.TIMEZONE,
                    extra_http_headers={
                        "Accept-Language": self.settings.ACCEPT_LANGUAGE,
                        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
                    },
                )
                logger.info("📍 Granting geolocation permission for %s", self.portal_origin)
                await context.grant_permissions(["geolocation"], origin=self.portal_origin)
                logger.info("📍 Setting geolocation: %s, %s", request.latitude, request.longitude)
                await context.set_geolocation(
                    {"latitude": request.latitude, "longitude": request.longitude, "accuracy": 100}
                )
                await self.stealth.apply_stealth_async(context)
                page = await context.new_page()

                logger.info("🔗 Navigating to SKEMA RAJA...")
                await self.goto_with_retry(page)
                await self._pause(1000, 2000)
                await self._screenshot(page, "page_loaded")

                logger.info("📍 Triggering geolocation in browser...")
                await self._trigger_geolocation(page)
                await self._pause(2000, 3000)
                await self._screenshot(page, "after_geolocation")

                await self._wait_for_form(page)
                await self._fill_and_submit(page, request)

                checkin_time = await self._read_checkin_time(page)
                outcome = classify(
                    await page.content(),
                    url=page.url,
                    title=await page.title(),
                    checkin_time=checkin_time,
                    rules=self.rules,
                )
                if outcome.kind == UNRECOGNIZED:
                    await self._screenshot(page, "unknown_result")
                return outcome
            except Exception as exc:
                logger.error("❌ Browser error: %s", exc)
                if page is not None:
                    await self._screenshot(page, "error")
                raise
            finally:
                await browser.close()
                logger.info("🔒 Browser closed")
