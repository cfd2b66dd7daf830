"""Centralised logging setup for pkglens."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import FilteringBoundLogger

_CONFIGURED = False
_HANDLERS: list[logging.Handler] = []

LOG_DIR = Path.home() / ".pkglens" / "logs"


def drop_none_values(logger: Any, method_name: str, event_dict: dict) -> dict:
    # Optional fields such as returncode or timeout are often None
    return {k: v for k, v in event_dict.items() if v is not None}


def configure_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    enable_console: bool = False,
    force: bool = False,
) -> None:
    """Send pkglens events to ``log_file`` (``~/.pkglens/logs/pkglens.log``).

    JSON lines go to the file. ``enable_console`` switches to the coloured
    renderer on stderr, which ``pkglens --verbose`` uses. A second call is a
    no-op unless ``force`` is set, in which case the earlier handlers are
    closed and replaced.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    for handler in _HANDLERS:
        logging.root.removeHandler(handler)
        handler.close()
    _HANDLERS.clear()

    numeric_level = getattr(logging, level.upper())

    if log_file is None:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOG_DIR / "pkglens.log"

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=2)
    file_handler.setLevel(numeric_level)

    shared_processors = [
        drop_none_values,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.root.addHandler(console_handler)
        _HANDLERS.append(console_handler)

        renderers = [
            structlog.processors.ExceptionRenderer(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.root.setLevel(numeric_level)
    logging.root.addHandler(file_handler)
    _HANDLERS.append(file_handler)

    _CONFIGURED = True


def get_logger(name: str = "pkglens") -> FilteringBoundLogger:
    """Logger for ``name``; configures file logging on first use.

    Events are snake_case names (``command_complete``, ``native_fetch_failed``)
    with ``backend``, ``command``, ``count`` and ``duration_ms`` as the usual
    keys.
    """
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)
