"""
Logging configuration for the application.

Provides centralized logging setup with support for console and file output.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..config.settings import AppConfig

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "chart_structure.log"

# HTTP client loggers are noisy at DEBUG
QUIET_LOGGERS = ("urllib3", "requests")

_configured = False


def configure_logging(
    level: str = "INFO",
    log_to_file: bool = False,
    log_file: Optional[str | Path] = None,
    log_dir: str = "logs",
    format_string: Optional[str] = None,
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Enable file logging in addition to console
        log_file: Specific log file path (optional)
        log_dir: Directory for log files (used if log_file not specified)
        format_string: Custom log format string (optional)

    Example:
        configure_logging(level="DEBUG", log_to_file=True)
    """
    global _configured

    if _configured:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_to_file:
        log_path = Path(log_file) if log_file is not None else Path(log_dir) / LOG_FILE_NAME
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        root_logger.info(f"Logging to file: {log_path}")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    _configured = True
    root_logger.debug(f"Logging configured at {level} level")


def configure_from_config(config: AppConfig) -> None:
    """Configure logging from the log_* fields of an AppConfig."""
    configure_logging(
        level=config.log_level,
        log_to_file=config.log_to_file,
        log_dir=config.log_dir,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def reset_logging() -> None:
    """Reset logging configuration (mainly for testing)."""
    global _configured
    _configured = False

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.WARNING)
