"""
Headless-render listing fetch via Playwright Chromium.

Expensive (1-3s) but runs the page's JavaScript, which gets past most
JS-gated challenges. Browser launch dominates the cost, so one browser
and a fixed set of pages are kept for the process lifetime.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    Route,
    TimeoutError as PWTimeoutError,
    async_playwright,
)

from giftfeed.core.config import settings
from giftfeed.services.fetchers.base import (
    FetchOutcome,
    FetchStrategy,
    Success,
    TimedOut,
    TransportError,
)
from giftfeed.services.parsers import parse_listing_rows

logger = logging.getLogger(__name__)

# Subresources a listing table does not need
BLOCKED_RESOURCE_TYPES = {"image", "stylesheet", "font", "media"}


class BrowserPoolClosed(RuntimeError):
    """Raised when a page is requested from a pool that is not running."""


async def _block_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class BrowserPool:
    """
    One Chromium instance with ``size`` reusable pages.

    A page is checked out by one caller at a time, so navigations never
    overlap on the same page. A page whose use was interrupted (error,
    timeout, cancellation) is closed and replaced rather than reused.

    Usage:
        pool = BrowserPool(size=2)
        await pool.start()
        async with pool.page() as page:
            await page.goto(url)
        await pool.close()
    """

    def __init__(self, size: Optional[int] = None, headless: Optional[bool] = None):
        self.size = max(1, size or settings.BROWSER_POOL_SIZE)
        self.headless = settings.BROWSER_HEADLESS if headless is None else headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._pages: asyncio.Queue[Page] = asyncio.Queue()
        self._replacements: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def start(self):
        """Launch Chromium and open the page pool."""
        if self.is_running:
            return

        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
            for _ in range(self.size):
                self._pages.put_nowait(await self._new_page())
        except Exception:
            await self.close()
            raise

        logger.info("BrowserPool started with %d pages", self.size)

    async def _new_page(self) -> Page:
        context = await self._browser.new_context(user_agent=settings.USER_AGENT)
        page = await context.new_page()
        # Installed once per page; reuse never stacks handlers
        await page.route("**/*", _block_heavy_resources)
        return page

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Check out a page for exclusive use."""
        if not self.is_running:
            raise BrowserPoolClosed("browser pool is not running")

        page = await self._pages.get()
        clean = False
        try:
            yield page
            clean = True
        finally:
            if clean and self.is_running and not page.is_closed():
                self._pages.put_nowait(page)
            else:
                self._schedule_replacement(page)

    def _schedule_replacement(self, page: Page):
        task = asyncio.create_task(self._replace(page))
        self._replacements.add(task)
        task.add_done_callback(self._replacements.discard)

    async def _replace(self, page: Page):
        try:
            await page.context.close()
        except PlaywrightError as exc:
            logger.debug("Closing stale page failed: %s", exc)

        if not self.is_running:
            return
        try:
            self._pages.put_nowait(await self._new_page())
        except PlaywrightError as exc:
            # Browser is gone; stop so renders fail fast and health reports it
            logger.error("BrowserPool could not replace a page, stopping: %s", exc)
            if self.is_running:
                await self.close()

    async def close(self):
        """Close every page, the browser and Playwright."""
        browser, self._browser = self._browser, None

        current = asyncio.current_task()
        pending = [t for t in self._replacements if t is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        while not self._pages.empty():
            page = self._pages.get_nowait()
            try:
                await page.context.close()
            except PlaywrightError:
                pass

        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.debug("Browser close failed: %s", exc)

        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
            logger.info("BrowserPool stopped")


class RenderFetcher(FetchStrategy):
    """Navigate a pooled page to the listing URL and parse the rendered DOM."""

    name = "render"

    def __init__(self, pool: BrowserPool, timeout: Optional[float] = None):
        self.pool = pool
        self.timeout = timeout or settings.RENDER_TIMEOUT_SEC

    async def fetch(self, url: str, limit: int, timeout: float) -> FetchOutcome:
        try:
            async with self.pool.page() as page:
                await page.goto(url, wait_until="domcontentloaded", timeout=timeout * 1000)
                html = await page.content()
        except BrowserPoolClosed as exc:
            return TransportError(cause=str(exc))
        except PWTimeoutError:
            logger.info("Render timed out after %.2fs: %s", timeout, url)
            return TimedOut(after=timeout)
        except PlaywrightError as exc:
            logger.warning("Render failed for %s: %s", url, exc)
            return TransportError(cause=str(exc))

        records = parse_listing_rows(html, limit)
        logger.debug("Render parsed %d records: %s", len(records), url)
        return Success(records=tuple(records))
