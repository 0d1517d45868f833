"""Tests for ASGI helper functions.

This module tests the internal helpers for sending responses, extracting
request IDs and choosing access-log levels.
"""

from __future__ import annotations

import logging
import uuid

import pytest

from containermetrics.adapters.frameworks.asgi import (
    _extract_request_id,
    _get_log_level_for_status,
    _send_response,
)


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.ASGI.SendResponse.Headers")
async def test_send_response_sends_correct_headers(asgi_send_capture):
    """_send_response sends http.response.start with correct status."""

    # Arrange: Get send capture fixture
    send, responses = asgi_send_capture

    # Act: Send response with specific status and content type
    await _send_response(send, 201, "text/plain", "test body")

    # Assert: Should send http.response.start with correct headers
    assert len(responses) == 2
    assert responses[0]["type"] == "http.response.start"
    assert responses[0]["status"] == 201
    assert responses[0]["headers"] == [(b"content-type", b"text/plain")]


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.ASGI.SendResponse.Body")
async def test_send_response_sends_body_as_bytes(asgi_send_capture):
    """_send_response should send http.response.body with body encoded as bytes."""

    send, responses = asgi_send_capture

    await _send_response(send, 200, "text/plain", "up{container_name=web} 1\n")

    assert responses[1]["type"] == "http.response.body"
    assert responses[1]["body"] == b"up{container_name=web} 1\n"


@pytest.mark.tier(0)
@pytest.mark.tra("Adapter.ASGI.Middleware.RequestId.Extract")
def test_extract_request_id_is_case_insensitive(asgi_scope):
    """The request ID header is matched regardless of case."""
    scope = asgi_scope(headers=[(b"X-Request-Id", b"abc-123")])

    assert _extract_request_id(scope) == "abc-123"


@pytest.mark.tier(0)
@pytest.mark.tra("Adapter.ASGI.Middleware.RequestId.Extract")
def test_extract_request_id_custom_header(asgi_scope):
    """A custom header name can be used."""
    scope = asgi_scope(headers=[(b"x-correlation-id", b"corr-1")])

    assert _extract_request_id(scope, "X-Correlation-ID") == "corr-1"


@pytest.mark.tier(0)
@pytest.mark.tra("Adapter.ASGI.Middleware.RequestId.Generate")
def test_extract_request_id_generates_uuid(asgi_scope):
    """Without the header a new UUID is generated."""
    request_id = _extract_request_id(asgi_scope())

    assert uuid.UUID(request_id)


@pytest.mark.tier(0)
@pytest.mark.tra("Adapter.ASGI.Middleware.LogLevels")
@pytest.mark.parametrize(
    ("status", "level"),
    [
        (200, logging.INFO),
        (204, logging.INFO),
        (302, logging.INFO),
        (404, logging.WARNING),
        (500, logging.ERROR),
        (503, logging.ERROR),
        (0, logging.INFO),
    ],
)
def test_log_level_for_status(status, level):
    """Status codes map to access-log levels."""
    assert _get_log_level_for_status(status) == level
