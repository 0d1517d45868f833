"""Shared test fixtures for all test modules."""

import pytest

from containermetrics.adapters.logging_context import clear_log_context
from containermetrics.adapters.registry.in_memory import InMemoryContainerRegistry
from containermetrics.core.aggregator import MetricsAggregator
from containermetrics.core.models import ECS_CONTAINER_NAME_LABEL

try:
    import httpx
except ImportError:
    httpx = None

LABEL_KEY = "prometheus.scrape"

WEB_METRICS = (
    "# HELP up Was the last scrape successful\n"
    "# TYPE up gauge\n"
    "up 1\n"
)

API_METRICS = (
    "# TYPE http_requests_total counter\n"
    'http_requests_total{method="GET"} 42\n'
)


def labels_for(name: str | None = None, target: str = "") -> dict[str, str]:
    """Build a discoverable label set, optionally with an ECS name."""
    labels = {LABEL_KEY: target}
    if name is not None:
        labels[ECS_CONTAINER_NAME_LABEL] = name
    return labels


@pytest.fixture(autouse=True)
def _reset_log_context():
    """Each test starts with an empty log context."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def make_labels():
    """Factory fixture building discoverable label sets."""
    return labels_for


@pytest.fixture
def label_key() -> str:
    """Discovery label key used across tests."""
    return LABEL_KEY


@pytest.fixture
def registry() -> InMemoryContainerRegistry:
    """Fixture providing an empty in-memory container registry."""
    return InMemoryContainerRegistry()


@pytest.fixture
def populated_registry(
    registry: InMemoryContainerRegistry
) -> InMemoryContainerRegistry:
    """Fixture providing a registry with two healthy labeled containers."""
    registry.add_container("c-web", labels_for("web"), stdout=WEB_METRICS)
    registry.add_container("c-api", labels_for("api"), stdout=API_METRICS)
    return registry


@pytest.fixture
def aggregator(
    registry: InMemoryContainerRegistry, label_key: str
) -> MetricsAggregator:
    """Fixture providing an aggregator over the in-memory registry."""
    return MetricsAggregator(registry, label_key, probe_timeout=5.0)


# === ASGI Test Fixtures ===


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from containermetrics.adapters.frameworks.asgi import Scope

    def _scope(
        method: str = "GET",
        path: str = "/metrics",
        headers: list[tuple[bytes, bytes]] | None = None,
    ) -> Scope:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": headers or [],
        }

    return _scope


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_receive():
    """Receive callable delivering an empty request body."""

    async def receive() -> dict[str, object]:
        return {"type": "http.request", "body": b""}

    return receive


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(aggregator)
            async with asgi_test_client(app) as client:
                response = await client.get("/metrics")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
