"""Console logging for the jwtctl command line."""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.typing import FilteringBoundLogger


def _render(_logger: Any, _method_name: str, event_dict: dict[str, Any]) -> str:
    level = str(event_dict.pop("level", "info")).upper()
    event = event_dict.pop("event", "")
    extra = " ".join(f"{key}={value}" for key, value in event_dict.items())
    line = f"{level:<5} | {event}"
    return f"{line} {extra}" if extra else line


def configure_logging(log_level: str = "warning", stream: TextIO | None = None) -> None:
    """Route structlog output to ``stream`` (stderr by default) at ``log_level``."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            _render,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    return structlog.get_logger(name)
