"""Context-local fields attached to every log record.

Values are stored in a ContextVar, so each asyncio task sees the context
that was active when it was created. Probe tasks spawned while serving a
request therefore inherit that request's request_id.
"""

from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "containermetrics_log_context", default=None
)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current log context."""
    return dict(_log_context.get() or {})


def set_log_context(**fields: Any) -> None:
    """Replace the current log context with the given fields."""
    _log_context.set(dict(fields))


def clear_log_context() -> None:
    """Remove all fields from the current log context."""
    _log_context.set(None)
