"""Failure classes for the fetch pipeline.

Each class carries the HTTP status the API layer answers with, so handlers
translate any ``FetchError`` without a lookup table.
"""


class FetchError(Exception):
    """Base class for all classified fetch failures."""

    status_code = 500


class MissingURL(FetchError, ValueError):
    """No URL was supplied, or it was empty."""

    status_code = 400

    def __init__(self, message: str = "URL is required"):
        super().__init__(message)


class InvalidURLFormat(FetchError, ValueError):
    """The supplied URL is not an absolute URL with a scheme and host."""

    status_code = 400

    def __init__(self, url: object):
        self.url = url
        super().__init__(f"Invalid URL format: {url!r}")


class FetchTimeout(FetchError):
    """Navigation did not settle before the deadline."""

    status_code = 408

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Navigation to {url} exceeded {timeout:g}s")


class UpstreamHTTPError(FetchError):
    """The target answered with a non-success status."""

    def __init__(self, status: int, reason: str = ""):
        self.status = status
        self.reason = reason
        super().__init__(f"HTTP {status}: {reason}" if reason else f"HTTP {status}")


class NotAnImage(FetchError):
    """The response body is not an image."""

    def __init__(self, content_type: str, detail: str = "URL does not point to an image"):
        self.content_type = content_type
        super().__init__(f"{detail} (content-type: {content_type})")


class BrowserUnavailable(FetchError):
    """No browsing context could be opened on the shared browser."""


class UnexpectedFailure(FetchError):
    """Anything else that went wrong while fetching."""
