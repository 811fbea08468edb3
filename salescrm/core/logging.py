"""Structured logging setup shared by the web app and CLI.

``configure_logging`` routes both structlog loggers and stdlib
``logging.getLogger(__name__)`` loggers through one set of processors, so
query-layer messages carry the request id bound by the web middleware.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LOG_FILE = Path("logs/salescrm.log")

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("aiosqlite", "asyncio", "httpx", "multipart")


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level name; defaults to ``LOG_LEVEL`` (INFO)
        json_logs: Render JSON lines instead of console output; defaults to ``JSON_LOGS``
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if json_logs is None:
        json_logs = os.getenv("JSON_LOGS", "false").lower() == "true"

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdlib records get the same processors as structlog events
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE.parent.exists():
        handlers.append(logging.FileHandler(LOG_FILE))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.set_name("salescrm")

    # Reconfiguring replaces only the handlers installed here
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == "salescrm"]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
