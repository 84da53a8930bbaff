"""Configuration using pydantic-settings."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from .core.browser import DEFAULT_BROWSER_ARGS
from .core.fetcher import DEFAULT_USER_AGENT


class FetcherSettings(BaseSettings):
    """Image fetch service configuration."""

    host: str = "0.0.0.0"
    port: int = Field(8000, validation_alias=AliasChoices("PICFETCH_PORT", "PORT", "port"))

    # Navigation policy. "Network idle" is a heuristic: at most
    # idle_connections requests in flight for idle_window seconds.
    timeout: float = 30.0
    wait_until: str = "load"
    idle_connections: int | None = 2
    idle_window: float = 0.5

    user_agent: str = DEFAULT_USER_AGENT
    headless: bool = True
    browser_args: list[str] = Field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    max_concurrent_pages: int | None = None
    verify_image_bytes: bool = False

    cache_max_age: int = 3600
    cors_origins: list[str] = ["*"]

    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    model_config = {
        "env_prefix": "PICFETCH_",
        "env_parse_none_str": "null",
        "populate_by_name": True,
    }


settings = FetcherSettings()
