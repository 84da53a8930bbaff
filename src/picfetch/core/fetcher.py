"""Image fetch orchestration on top of the shared browser."""

import asyncio
import contextlib
import io
import logging

from PIL import Image
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import (
    BrowserUnavailable,
    FetchError,
    FetchTimeout,
    NotAnImage,
    UnexpectedFailure,
    UpstreamHTTPError,
)
from .network_idle import NetworkIdleTracker
from .protocols import BrowserSource, FetchRequest, ImageResult

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Extra time past the navigation deadline before the fetch is abandoned.
# Playwright normally raises its own TimeoutError well inside it.
DEADLINE_GRACE = 1.0


class ImageFetcher:
    """
    Fetch one image per request through an isolated browsing context.

    Every call opens exactly one context on the shared browser and closes it
    exactly once, whatever the outcome.
    """

    def __init__(
        self,
        browser: BrowserSource,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        wait_until: str = "load",
        idle_connections: int | None = 2,
        idle_window: float = 0.5,
        max_concurrent_pages: int | None = None,
        verify_image_bytes: bool = False,
    ):
        self.browser = browser
        self.timeout = timeout
        self.user_agent = user_agent
        self.wait_until = wait_until
        self.idle_connections = idle_connections
        self.idle_window = idle_window
        self.verify_image_bytes = verify_image_bytes
        self._slots = asyncio.Semaphore(max_concurrent_pages) if max_concurrent_pages else None

    @classmethod
    def from_settings(cls, browser: BrowserSource, settings) -> "ImageFetcher":
        return cls(
            browser,
            timeout=settings.timeout,
            user_agent=settings.user_agent,
            wait_until=settings.wait_until,
            idle_connections=settings.idle_connections,
            idle_window=settings.idle_window,
            max_concurrent_pages=settings.max_concurrent_pages,
            verify_image_bytes=settings.verify_image_bytes,
        )

    async def fetch(self, request: FetchRequest) -> ImageResult:
        """Fetch ``request.url`` and return its body if it is an image."""
        logger.info("Downloading image from URL: %s", request.url)
        slot = self._slots if self._slots is not None else contextlib.nullcontext()
        async with slot:
            try:
                result = await self._fetch(request)
            except FetchError as e:
                logger.error("Error downloading image from %s: %s", request.url, e)
                raise
            except Exception as e:
                logger.exception("Unexpected error downloading image from %s", request.url)
                raise UnexpectedFailure(str(e) or type(e).__name__) from e

        logger.info(
            "Successfully downloaded image: %s, size: %d bytes",
            request.url,
            result.byte_length,
        )
        return result

    async def _fetch(self, request: FetchRequest) -> ImageResult:
        try:
            context = await self.browser.open_context(self.user_agent)
        except BrowserUnavailable:
            raise
        except Exception as e:
            raise BrowserUnavailable(f"Could not open browser context: {e}") from e

        try:
            page = await context.new_page()
            try:
                response = await asyncio.wait_for(
                    self._navigate(page, request.url),
                    timeout=self.timeout + DEADLINE_GRACE,
                )
            except (PlaywrightTimeoutError, asyncio.TimeoutError) as e:
                raise FetchTimeout(request.url, self.timeout) from e

            if response is None:
                raise UnexpectedFailure(f"Navigation to {request.url} produced no response")
            if not response.ok:
                raise UpstreamHTTPError(response.status, response.status_text)

            headers = await response.all_headers()
            content_type = headers.get("content-type") or DEFAULT_CONTENT_TYPE
            if not content_type.lower().startswith("image/"):
                raise NotAnImage(content_type)

            content = await response.body()
            if self.verify_image_bytes and not _looks_like_image(content, content_type):
                raise NotAnImage(content_type, "Response body is not a decodable image")

            return ImageResult(
                url=request.url,
                final_url=response.url,
                status=response.status,
                content=content,
                content_type=content_type,
            )
        finally:
            await self._close_context(context)

    async def _navigate(self, page, url: str):
        """Navigate and wait for the network to settle, all within ``self.timeout``."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        tracker = None
        if self.idle_connections is not None:
            tracker = NetworkIdleTracker(page, self.idle_connections, self.idle_window)

        response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout * 1000)

        if tracker is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise asyncio.TimeoutError()
            await asyncio.wait_for(tracker.wait_for_idle(), timeout=remaining)

        return response

    async def _close_context(self, context):
        try:
            await context.close()
        except PlaywrightError as e:
            # The browser may already be gone (shutdown or crash)
            logger.warning("Failed to close browser context: %s", e)


def _looks_like_image(content: bytes, content_type: str) -> bool:
    """Check that Pillow recognizes ``content`` as an image. SVG is text, so it passes."""
    if content_type.lower().startswith("image/svg"):
        return True
    try:
        with Image.open(io.BytesIO(content)) as img:
            img.verify()
    except Image.DecompressionBombError:
        return True
    except (OSError, SyntaxError, ValueError):
        return False
    return True
