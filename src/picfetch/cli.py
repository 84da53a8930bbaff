"""CLI interface using typer."""

import asyncio
from pathlib import Path

import httpx
import typer

from .config import settings
from .logging_config import configure_logging

app = typer.Typer(
    name="picfetch",
    help="Download images through a headless browser",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port"),
):
    """Run the HTTP service."""
    import uvicorn

    from .api import create_app

    configure_logging(settings.log_level, settings.log_dir)
    # uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown, which closes the browser
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
    )


@app.command()
def download(
    url: str = typer.Argument(..., help="Image URL to download"),
    server: str = typer.Option("http://localhost:8000", "--server", "-s", help="Service base URL"),
    output: Path = typer.Option(None, "-o", "--output", help="Output file"),
    timeout: float = typer.Option(60.0, "--timeout", help="Client timeout (seconds)"),
):
    """Download an image through a running service."""
    endpoint = f"{server.rstrip('/')}/v1/download_pic_from_url"
    try:
        resp = httpx.post(endpoint, json={"url": url}, timeout=timeout)
    except httpx.HTTPError as e:
        typer.echo(f"Request failed: {e}", err=True)
        raise typer.Exit(1)

    if resp.status_code != 200:
        typer.echo(f"Download failed ({resp.status_code}): {resp.text}", err=True)
        raise typer.Exit(1)

    _report(resp.headers.get("content-type", ""), resp.content, output)


@app.command()
def fetch(
    url: str = typer.Argument(..., help="Image URL to fetch"),
    output: Path = typer.Option(None, "-o", "--output", help="Output file"),
):
    """Fetch an image with a local browser, without a server."""
    from .core import FetchError, validate_url

    try:
        result = asyncio.run(_fetch_local(validate_url(url)))
    except FetchError as e:
        typer.echo(f"Fetch failed: {e}", err=True)
        raise typer.Exit(1)

    _report(result.content_type, result.content, output)


async def _fetch_local(request):
    from .core import ImageFetcher, SharedBrowser

    browser = SharedBrowser(headless=settings.headless, args=settings.browser_args)
    await browser.start()
    try:
        fetcher = ImageFetcher.from_settings(browser, settings)
        return await fetcher.fetch(request)
    finally:
        await browser.close()


def _report(content_type: str, content: bytes, output: Path | None):
    typer.echo(f"Content-Type: {content_type}")
    typer.echo(f"Size: {len(content)} bytes")
    if output:
        output.write_bytes(content)
        typer.echo(f"Saved to {output}")


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"picfetch {__version__}")


if __name__ == "__main__":
    app()
