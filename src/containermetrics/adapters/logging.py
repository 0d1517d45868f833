"""Standard library logging setup for the exporter.

Log records are enriched with the fields bound in logging_context, so
lines emitted while serving a request carry its request_id.
"""

import logging
import sys

from containermetrics.adapters.logging_context import get_log_context

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(context)s] %(message)s"

logger = logging.getLogger("containermetrics")

_handler: logging.Handler | None = None


class LogContextFilter(logging.Filter):
    """Logging filter that attaches the current log context to records.

    Sets ``record.context`` to a ``key=value`` rendering of the context and
    copies each field onto the record unless it would shadow a standard
    LogRecord attribute.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_log_context()
        record.context = " ".join(f"{k}={v}" for k, v in sorted(context.items()))
        for key, value in context.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def configure_logging(level: str | int = "INFO") -> logging.Handler:
    """Install a context-aware stream handler on the root logger.

    Args:
        level: Root log level name or number.

    Returns:
        The installed handler.
    """
    global _handler
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(LogContextFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _handler = handler
    root.setLevel(level)
    return handler


def log_exception(message: str) -> None:
    """Log the exception currently being handled, with traceback."""
    logger.exception(message)
