from __future__ import annotations

import logging
from logging.config import dictConfig
from threading import Lock
from typing import Any

import structlog
import structlog.types
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
)
from structlog.stdlib import BoundLogger
from structlog.stdlib import get_logger as get_structlog_logger

_LOGGING_INITIALISED = False
_LOGGING_LOCK = Lock()


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if isinstance(resolved, str):
        return logging.INFO
    return int(resolved)


def configure_logging(level: str = "INFO", *, force: bool = False) -> None:
    """Route structlog through stdlib logging with a JSON renderer, once per process."""

    global _LOGGING_INITIALISED
    if _LOGGING_INITIALISED and not force:
        return

    with _LOGGING_LOCK:
        if _LOGGING_INITIALISED and not force:
            return

        resolved = _resolve_level(level)
        dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "structlog": {
                        "()": structlog.stdlib.ProcessorFormatter,
                        "processor": structlog.processors.JSONRenderer(),
                    }
                },
                "handlers": {
                    "default": {
                        "level": resolved,
                        "class": "logging.StreamHandler",
                        "formatter": "structlog",
                    }
                },
                "loggers": {
                    "": {"handlers": ["default"], "level": resolved},
                    # The storage SDK logs every HTTP request at INFO.
                    "azure": {
                        "handlers": ["default"],
                        "level": logging.WARNING,
                        "propagate": False,
                    },
                },
            }
        )

        processors: list[structlog.types.Processor] = [
            merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True


def bind_invocation_context(**kwargs: Any) -> None:
    """Attach invocation-scoped fields (invocation id, blob name) to every log line."""
    bind_contextvars(**kwargs)


def clear_invocation_context() -> None:
    clear_contextvars()


def get_logger(name: str | None = None) -> BoundLogger:
    """Helper returning a structured logger bound to *name*."""
    return get_structlog_logger(name)
