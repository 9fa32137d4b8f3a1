"""Logging configuration for md2word.

Key features:
- Unified loguru-based logging with consistent formatting
- Intercepts third-party library logs (playwright, PIL, python-docx, etc.)
- Optional rotating file sink
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from md2word.config import LogConfig, get_config
from md2word.constants import DEFAULT_LOG_RETENTION, DEFAULT_LOG_ROTATION

# Third-party loggers to intercept and route to loguru
INTERCEPTED_LOGGERS = [
    "playwright",
    "playwright.async_api",
    "PIL",
    "PIL.Image",
    "PIL.PngImagePlugin",
    "markdown_it",
    "docx",
    "cairosvg",
    "asyncio",
]

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{message}</cyan>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <5} | {module}:{line: <3} | {message}"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and forward to loguru.

    Uses the record's built-in location info instead of frame tracing.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.bind(
            name=record.name,
            module=record.module,
            function=record.funcName,
            line=record.lineno,
        ).opt(exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    verbose: bool = False,
    log_dir: str | None = None,
    log_level: str = "DEBUG",
    rotation: str = DEFAULT_LOG_ROTATION,
    retention: str = DEFAULT_LOG_RETENTION,
    quiet: bool = False,
) -> tuple[int | None, Path | None]:
    """Configure logging sinks.

    Args:
        verbose: Show DEBUG messages on the console.
        log_dir: Directory for log files. Supports ~ expansion.
                 Can be overridden by MD2WORD_LOG_DIR env var.
        log_level: Log level for file output.
        rotation: Log file rotation size.
        retention: Log file retention period.
        quiet: Disable console logging entirely.

    Returns:
        Tuple of (console_handler_id, log_file_path).
    """
    logger.remove()

    console_handler_id: int | None = None
    if not quiet:
        console_handler_id = logger.add(
            sys.stderr,
            level="DEBUG" if verbose else "INFO",
            format=CONSOLE_FORMAT,
            filter=lambda record: _should_show_log(record, verbose),
        )

    env_log_dir = os.environ.get("MD2WORD_LOG_DIR")
    if env_log_dir:
        log_dir = env_log_dir

    log_file_path: Path | None = None
    if log_dir:
        log_path = Path(log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        log_file_path = log_path / f"md2word_{timestamp}.log"
        logger.add(
            log_file_path,
            level=log_level,
            rotation=rotation,
            retention=retention,
            format=FILE_FORMAT,
        )

    _setup_log_interception()

    return console_handler_id, log_file_path


def setup_logging_from_config(
    log_config: LogConfig | None = None,
    verbose: bool = False,
    quiet: bool = False,
) -> tuple[int | None, Path | None]:
    """Configure logging from the `log` section of the loaded configuration."""
    log_config = log_config or get_config().log
    return setup_logging(
        verbose=verbose,
        log_dir=log_config.dir,
        log_level=log_config.level,
        rotation=log_config.rotation,
        retention=log_config.retention,
        quiet=quiet,
    )


def _setup_log_interception() -> None:
    """Route third-party stdlib loggers through loguru (WARNING+ only)."""
    intercept_handler = InterceptHandler()

    for logger_name in INTERCEPTED_LOGGERS:
        stdlib_logger = logging.getLogger(logger_name)
        stdlib_logger.handlers.clear()
        stdlib_logger.addHandler(intercept_handler)
        stdlib_logger.propagate = False
        stdlib_logger.setLevel(logging.WARNING)


def _is_third_party_log(name: str) -> bool:
    """Check whether a logger name belongs to an intercepted library."""
    name_lower = name.lower()
    for intercepted in INTERCEPTED_LOGGERS:
        intercepted_lower = intercepted.lower()
        if name_lower == intercepted_lower or name_lower.startswith(
            f"{intercepted_lower}."
        ):
            return True
    return False


def _should_show_log(record: Any, verbose: bool) -> bool:
    """Filter function for console logging.

    Warnings always pass. Third-party INFO is hidden. DEBUG only when verbose.
    """
    level = record["level"].name

    if level in ("WARNING", "ERROR", "CRITICAL"):
        return True

    if level == "DEBUG":
        return verbose

    name = record.get("extra", {}).get("name", "")
    return not _is_third_party_log(name)
