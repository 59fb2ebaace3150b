"""
Structured logging for the assistant core.

Events are emitted through structlog with keyword context. A correlation ID
bound here is attached to every event from the same execution context, so a
CLI invocation, its gateway calls and the store transitions they cause can
be traced together.
"""

import logging
import sys
import uuid
from typing import List, Optional

import structlog
from rich.console import Console
from rich.logging import RichHandler

# Transport libraries log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Bind a correlation ID (generated when omitted) to the current context."""
    correlation_id = correlation_id or uuid.uuid4().hex[:8]
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    return structlog.contextvars.get_contextvars().get("correlation_id")


def clear_correlation_id() -> None:
    structlog.contextvars.unbind_contextvars("correlation_id")


def _processors(rich_output: bool) -> List:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.dev.set_exc_info,
    ]
    if rich_output:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True, exception_formatter=structlog.dev.rich_traceback
            )
        )
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    return processors


def setup_logging(debug: bool = False, rich_output: bool = True) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        debug: Emit DEBUG events instead of INFO and above
        rich_output: Colored console output; JSON lines on stdout otherwise
    """
    level = logging.DEBUG if debug else logging.INFO

    if rich_output:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler])
    else:
        logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    structlog.configure(
        processors=_processors(rich_output),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr if rich_output else sys.stdout),
        cache_logger_on_first_use=True,
    )
