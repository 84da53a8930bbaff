"""Logging setup: console plus combined and error log files.

Console lines are plain text. The log files hold one JSON object per line
(timestamp, level, logger, event), rendered by structlog.
"""

import logging
from pathlib import Path

import structlog

CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def _json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
    )


def configure_logging(level: str = "INFO", log_dir: Path | None = Path("logs")) -> logging.Logger:
    """Configure the ``picfetch`` logger. Safe to call more than once."""
    logger = logging.getLogger("picfetch")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_formatter = _json_formatter()

        combined = logging.FileHandler(log_dir / "combined.log", encoding="utf-8")
        combined.setFormatter(file_formatter)
        logger.addHandler(combined)

        errors = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        errors.setLevel(logging.ERROR)
        errors.setFormatter(file_formatter)
        logger.addHandler(errors)

    logger.propagate = False
    return logger
