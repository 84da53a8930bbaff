"""Instrumented stand-ins for the Playwright browser used across tests."""

import asyncio
import io

import pytest
from PIL import Image


def make_png(size=(2, 2), color=(255, 0, 0)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


PNG_BYTES = make_png()


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        content_type: str | None = "image/png",
        body: bytes = PNG_BYTES,
        url: str = "https://example.com/image.png",
        status_text: str = "OK",
    ):
        self.status = status
        self.status_text = status_text
        self.url = url
        self._body = body
        self._headers = {"content-type": content_type} if content_type else {}
        self.body_reads = 0

    @property
    def ok(self) -> bool:
        return self.status == 0 or 200 <= self.status <= 299

    async def all_headers(self):
        return dict(self._headers)

    async def body(self):
        self.body_reads += 1
        return self._body


class FakePage:
    def __init__(self, goto):
        self._goto = goto
        self.handlers: dict[str, list] = {}
        self.goto_calls: list[tuple[str, str, float]] = []

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def emit(self, event, payload):
        for handler in self.handlers.get(event, []):
            handler(payload)

    async def goto(self, url, wait_until="load", timeout=30000):
        self.goto_calls.append((url, wait_until, timeout))
        return await self._goto(self, url)


class FakeContext:
    def __init__(self, browser, user_agent):
        self.browser = browser
        self.user_agent = user_agent
        self.pages: list[FakePage] = []
        self.close_calls = 0

    async def new_page(self):
        page = FakePage(self.browser.goto)
        self.pages.append(page)
        return page

    async def close(self):
        self.close_calls += 1
        self.browser.closed += 1


class FakeBrowser:
    """Counts every context opened and closed."""

    def __init__(self, goto=None, fail_open: Exception | None = None):
        self.goto = goto or ok_goto()
        self.fail_open = fail_open
        self.contexts: list[FakeContext] = []
        self.opened = 0
        self.closed = 0
        self.started = False
        self.shut_down = False

    async def start(self):
        self.started = True

    async def close(self):
        self.shut_down = True

    async def open_context(self, user_agent):
        if self.fail_open is not None:
            raise self.fail_open
        self.opened += 1
        context = FakeContext(self, user_agent)
        self.contexts.append(context)
        return context


def ok_goto(response=None):
    async def goto(page, url):
        return response or FakeResponse(url=url)

    return goto


def raising_goto(exc):
    async def goto(page, url):
        raise exc

    return goto


def hanging_goto():
    async def goto(page, url):
        await asyncio.sleep(3600)

    return goto


@pytest.fixture
def browser():
    return FakeBrowser()
