"""Shared Playwright browser process."""

import asyncio
import logging

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from .errors import BrowserUnavailable

logger = logging.getLogger(__name__)

DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]


class SharedBrowser:
    """
    One long-lived chromium process serving every request.

    The handle is created by the application and passed down explicitly.
    Each request opens its own isolated BrowserContext through
    ``open_context`` and is responsible for closing it.
    """

    def __init__(
        self,
        headless: bool = True,
        args: list[str] | None = None,
    ):
        self.headless = headless
        self.args = list(DEFAULT_BROWSER_ARGS if args is None else args)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def start(self):
        """Launch the browser. Launch errors propagate to the caller."""
        if self._browser is not None:
            return

        async with self._lock:
            if self._browser is not None:
                return

            playwright = await async_playwright().start()
            try:
                self._browser = await playwright.chromium.launch(
                    headless=self.headless,
                    args=self.args,
                )
            except BaseException:
                await playwright.stop()
                raise
            self._playwright = playwright
            logger.info("Playwright browser initialized successfully")

    async def open_context(self, user_agent: str) -> BrowserContext:
        """Open a fresh isolated context presenting ``user_agent``."""
        browser = self._browser
        if browser is None:
            raise BrowserUnavailable("Browser has not been started")
        if not browser.is_connected():
            raise BrowserUnavailable("Browser process is not connected")

        try:
            return await browser.new_context(user_agent=user_agent)
        except PlaywrightError as e:
            raise BrowserUnavailable(f"Could not open browser context: {e.message}") from e

    async def close(self):
        """Close the browser, which also closes any contexts still open."""
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                finally:
                    self._browser = None
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                finally:
                    self._playwright = None
        logger.info("Playwright browser closed")
