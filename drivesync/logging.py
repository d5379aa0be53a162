"""structlog setup for the ``gd`` command line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import structlog

# HTTP client chatter from the OAuth exchange; shown only at DEBUG.
_HTTP_LOGGERS = ("urllib3", "requests")


def configure_logging(level: str = "INFO", json_output: bool = False, log_file: Optional[Path] = None) -> None:
    """(Re)initialise logging for one invocation.

    Called again once a context is discovered, so loggers are not cached.
    """

    level = level.upper()
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    http_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
