"""Data containers and protocol definitions for the fetch pipeline."""

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class FetchRequest:
    """A validated download request."""

    url: str


@dataclass
class ImageResult:
    """Image body captured from the top-level navigation response."""

    url: str
    final_url: str
    status: int
    content: bytes
    content_type: str

    @property
    def byte_length(self) -> int:
        return len(self.content)


class BrowserSource(Protocol):
    """Protocol for the shared browser handle the fetcher draws contexts from."""

    async def open_context(self, user_agent: str) -> Any:
        """Open an isolated browsing context. Caller owns and must close it."""
        ...
