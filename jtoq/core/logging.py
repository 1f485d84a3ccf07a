"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""Logging infrastructure for JTOQ.

This module configures console logging through Rich, optional file and JSON
output, and redaction of qTest API keys and access tokens before a record is
emitted.
"""

import json
import logging
import os
import re
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from re import Pattern
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "jtoq"


class LogRedactor:
    """
    Redacts credentials from log messages.
    """

    def __init__(self) -> None:
        self.patterns: dict[str, Pattern] = {
            "api_key": re.compile(
                r'(api[_-]?key|refresh_token|access_token)["\']?\s*[:=]\s*["\']?([^"\'&\s,}]{4,})',
                re.IGNORECASE,
            ),
            "bearer_token": re.compile(r"(Bearer)\s+([^\s\"']{8,})", re.IGNORECASE),
        }

    def redact(self, message: str) -> str:
        """
        Replace credential values in the message with a placeholder.

        The key or scheme is kept so the log line remains readable.
        """
        if not isinstance(message, str):
            return message

        message = self.patterns["api_key"].sub(r"\1: [REDACTED]", message)
        return self.patterns["bearer_token"].sub(r"\1 [REDACTED]", message)


redactor = LogRedactor()


class RedactingFilter(logging.Filter):
    """Filter that rewrites each record's message through the redactor."""

    def __init__(self, log_redactor: LogRedactor | None = None) -> None:
        super().__init__()
        self.redactor = log_redactor or redactor

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.redactor.redact(record.getMessage())
        record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs log records as JSON.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data)


def _plain_formatter(include_timestamp: bool) -> logging.Formatter:
    format_str = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        if include_timestamp
        else "[%(levelname)s] %(name)s: %(message)s"
    )
    return logging.Formatter(format_str)


def configure_logging(
    level: int | str = logging.INFO,
    log_file: str | None = None,
    json_format: bool = False,
    include_timestamp: bool = True,
    use_rich: bool = True,
    debug: bool = False,
) -> None:
    """
    Configure the ``jtoq`` logger hierarchy.

    Args:
    ----
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL or integer)
        log_file: Optional path to log file
        json_format: Whether to use JSON format for logs
        include_timestamp: Whether to include timestamps in logs
        use_rich: Whether to use Rich for console output
        debug: Whether to force debug mode

    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    if debug:
        level = logging.DEBUG

    handlers: list[logging.Handler] = []

    if use_rich and not json_format:
        rich_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_time=include_timestamp,
        )
        rich_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(rich_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            JSONFormatter() if json_format else _plain_formatter(include_timestamp)
        )
        handlers.append(console_handler)

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            JSONFormatter() if json_format else _plain_formatter(include_timestamp)
        )
        handlers.append(file_handler)

    redacting_filter = RedactingFilter()
    for handler in handlers:
        handler.addFilter(redacting_filter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)

    logger.debug(f"Logging configured with level {logging.getLevelName(level)}")


@contextmanager
def log_operation(
    logger: logging.Logger,
    operation_name: str,
    level: int = logging.INFO,
) -> Iterator[None]:
    """
    Log the start, completion time and failure of an operation.

    Exceptions raised inside the block are logged and re-raised.
    """
    start_time = time.time()
    logger.log(level, f"Starting {operation_name}")
    try:
        yield
    except Exception as e:
        duration = time.time() - start_time
        logger.error(f"Failed {operation_name} after {duration:.2f}s: {type(e).__name__}: {e}")
        raise
    duration = time.time() - start_time
    logger.log(level, f"Completed {operation_name} in {duration:.2f}s")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the ``jtoq`` hierarchy.

    Names outside the hierarchy are prefixed with ``jtoq.`` so records reach
    the handlers installed by ``configure_logging``.

    Args:
    ----
        name: Name of the logger, typically __name__

    """
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
