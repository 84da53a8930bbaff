"""In-flight request tracking for a "network idle" navigation heuristic.

Playwright's own ``networkidle`` waits for zero connections. Pages that keep
a long-poll or analytics beacon open never get there, so the threshold and
settle window are configurable here instead. Reaching idle does not mean
every resource finished loading.
"""

import asyncio
from typing import Any


class NetworkIdleTracker:
    """Counts a page's in-flight requests and waits for them to settle."""

    def __init__(self, page: Any, max_inflight: int = 2, window: float = 0.5):
        self.max_inflight = max_inflight
        self.window = window
        self._inflight: set[Any] = set()
        self._changed = asyncio.Event()

        page.on("request", self._on_request)
        page.on("requestfinished", self._on_done)
        page.on("requestfailed", self._on_done)

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def _on_request(self, request):
        self._inflight.add(request)
        self._changed.set()

    def _on_done(self, request):
        self._inflight.discard(request)
        self._changed.set()

    async def wait_for_idle(self):
        """
        Return once at most ``max_inflight`` requests stayed open for ``window`` seconds.

        Never times out on its own; callers bound it with a deadline.
        """
        loop = asyncio.get_running_loop()
        quiet_since: float | None = None
        while True:
            self._changed.clear()
            if self.inflight > self.max_inflight:
                quiet_since = None
                await self._changed.wait()
                continue

            if quiet_since is None:
                quiet_since = loop.time()
            remaining = quiet_since + self.window - loop.time()
            if remaining <= 0:
                return
            try:
                await asyncio.wait_for(self._changed.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                return
