"""ASGI generic adapter for the exporter endpoints.

This adapter provides a framework-agnostic ASGI application that can be used
with any ASGI server (uvicorn, hypercorn, daphne) without requiring FastAPI
as a dependency.
"""

import fnmatch
import json
import logging
import time
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

from containermetrics.adapters.logging import log_exception
from containermetrics.adapters.logging_context import (
    clear_log_context,
    set_log_context,
)
from containermetrics.core.aggregator import MetricsAggregator
from containermetrics.core.exceptions import DiscoveryError

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

access_logger = logging.getLogger("containermetrics.access")


def _extract_request_id(scope: Scope, header_name: str = "X-Request-ID") -> str:
    """Extract or generate a request ID from ASGI scope headers.

    Searches for the specified header (case-insensitive). If not found,
    generates a new UUID.

    Args:
        scope: ASGI scope dictionary containing request metadata.
        header_name: Name of the header to search for (default: "X-Request-ID").

    Returns:
        Request ID string (either from header or newly generated UUID).
    """
    header_bytes = header_name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for name, value in headers:
        if name.lower() == header_bytes:
            return str(value.decode("utf-8", errors="replace"))

    return str(uuid.uuid4())


def _get_log_level_for_status(status_code: int) -> int:
    """Determine log level based on HTTP status code.

    Maps status codes to log levels:
    - 400-499 (4xx) → WARNING
    - 500-599 (5xx) → ERROR
    - Other → INFO (default)

    Args:
        status_code: HTTP status code from response.

    Returns:
        Logging level number.
    """
    if 400 <= status_code < 500:
        return logging.WARNING
    if 500 <= status_code < 600:
        return logging.ERROR
    return logging.INFO


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _handle_metrics(send: Send, aggregator: MetricsAggregator) -> None:
    """Run an aggregation pass and send the payload or an error response.

    Args:
        send: ASGI send callable for writing response.
        aggregator: Aggregator producing the payload.
    """
    try:
        body = await aggregator.aggregate()
    except DiscoveryError:
        error_body = json.dumps({"error": "Container discovery failed"})
        await _send_response(send, 503, "application/json", error_body)
        return
    except Exception:
        log_exception("Error aggregating container metrics")
        error_body = json.dumps({"error": "Internal Server Error"})
        await _send_response(send, 500, "application/json", error_body)
        return
    await _send_response(send, 200, PROMETHEUS_CONTENT_TYPE, body)


class RequestLoggingMiddleware:
    """ASGI middleware that logs one access line per HTTP request.

    The request ID is bound into the log context for the duration of the
    request, so everything logged while serving it (including probe
    failures) carries the same request_id.
    """

    def __init__(
        self,
        app: ASGIApp,
        exclude_paths: list[str] | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            exclude_paths: List of paths to exclude from access logging.
                          Supports exact matches and wildcard patterns
                          (e.g., "/internal/*").
            request_id_header: Name of the header to extract request ID from
                             (default: "X-Request-ID").
        """
        self.app = app
        self.exclude_paths = exclude_paths or []
        self.request_id_header = request_id_header

    def _path_excluded(self, path: str) -> bool:
        """Check if path matches any pattern in exclude_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_id = _extract_request_id(scope, self.request_id_header)
        captured: dict[str, Any] = {"status": None, "body_size": 0}

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            elif message["type"] == "http.response.body":
                captured["body_size"] += len(message.get("body", b""))
            await send(message)

        set_log_context(request_id=request_id)
        try:
            await self.app(scope, receive, wrapped_send)
        except Exception:
            if not self._path_excluded(scope["path"]):
                log_exception(f"{scope['method']} {scope['path']} raised")
            raise
        else:
            duration = time.perf_counter() - start_time
            if not self._path_excluded(scope["path"]):
                self._log_request(scope, captured, duration)
        finally:
            clear_log_context()

    def _log_request(
        self, scope: Scope, captured: dict[str, Any], duration: float
    ) -> None:
        """Write the access log line for a completed request."""
        status = captured["status"] or 0
        access_logger.log(
            _get_log_level_for_status(status),
            "%s %s %d %dB %.1fms",
            scope["method"],
            scope["path"],
            status,
            captured["body_size"],
            duration * 1000,
        )


def create_asgi_app(aggregator: MetricsAggregator) -> ASGIApp:
    """Create an ASGI app with /metrics and /health endpoints.

    Args:
        aggregator: Aggregator invoked on every /metrics request.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        path = scope["path"]

        if path == "/metrics":
            await _handle_metrics(send, aggregator)
        elif path == "/health":
            await _send_response(send, 200, "text/plain", "OK")
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
