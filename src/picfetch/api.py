"""HTTP interface using FastAPI."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import FetcherSettings
from .core import (
    FetchError,
    ImageFetcher,
    ImageResult,
    MissingURL,
    SharedBrowser,
    UpstreamHTTPError,
    validate_url,
)

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def create_app(settings: FetcherSettings | None = None, browser=None) -> FastAPI:
    """
    Build the application.

    ``browser`` is the shared browser handle; one is created from ``settings``
    when omitted. The lifespan starts it before serving and closes it on
    shutdown.
    """
    settings = settings or FetcherSettings()
    if browser is None:
        browser = SharedBrowser(headless=settings.headless, args=settings.browser_args)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await browser.start()
        app.state.browser = browser
        app.state.fetcher = ImageFetcher.from_settings(browser, settings)
        logger.info("Image fetch service ready")
        yield
        logger.info("Shutting down, closing browser")
        await browser.close()

    app = FastAPI(title="picfetch", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse({"error": "Endpoint not found"}, status_code=404)
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error("Unhandled error: %s", exc, exc_info=exc)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    @app.get("/health")
    async def health():
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return {"status": "healthy", "timestamp": timestamp.replace("+00:00", "Z")}

    @app.post("/v1/download_pic_from_url")
    async def download_pic_post(request: Request):
        body = await _read_json(request)
        raw = body.get("url") if isinstance(body, dict) else None
        return await _download(request.app, raw, "URL is required")

    @app.get("/v1/download_pic_from_url")
    async def download_pic_get(request: Request):
        raw = request.query_params.get("url")
        return await _download(request.app, raw, "URL parameter is required")

    return app


async def _read_json(request: Request):
    """Parse the request body as JSON; an empty or unparseable body counts as empty."""
    try:
        return await request.json()
    except ValueError:
        return None


async def _download(app: FastAPI, raw, missing_message: str) -> Response:
    try:
        fetch_request = validate_url(raw, missing_message)
    except MissingURL as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except FetchError:
        return JSONResponse({"error": "Invalid URL format"}, status_code=400)

    fetcher: ImageFetcher = app.state.fetcher
    try:
        result = await fetcher.fetch(fetch_request)
    except FetchError as e:
        return _error_response(e)

    return _image_response(result, app.state.settings.cache_max_age)


def _image_response(result: ImageResult, max_age: int) -> Response:
    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={
            "Content-Length": str(result.byte_length),
            "Cache-Control": f"public, max-age={max_age}",
        },
    )


def _error_response(error: FetchError) -> JSONResponse:
    if error.status_code == 408:
        return JSONResponse({"error": "Request timeout"}, status_code=408)

    payload = {"error": "Failed to download image", "details": str(error)}
    if isinstance(error, UpstreamHTTPError):
        payload["upstream_status"] = error.status
    return JSONResponse(payload, status_code=error.status_code)
