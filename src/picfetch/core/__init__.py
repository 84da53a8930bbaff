"""Core image fetch components."""

from .browser import SharedBrowser
from .errors import (
    BrowserUnavailable,
    FetchError,
    FetchTimeout,
    InvalidURLFormat,
    MissingURL,
    NotAnImage,
    UnexpectedFailure,
    UpstreamHTTPError,
)
from .fetcher import ImageFetcher
from .protocols import BrowserSource, FetchRequest, ImageResult
from .validator import validate_url

__all__ = [
    "BrowserSource",
    "BrowserUnavailable",
    "FetchError",
    "FetchRequest",
    "FetchTimeout",
    "ImageFetcher",
    "ImageResult",
    "InvalidURLFormat",
    "MissingURL",
    "NotAnImage",
    "SharedBrowser",
    "UnexpectedFailure",
    "UpstreamHTTPError",
    "validate_url",
]
